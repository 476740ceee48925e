from __future__ import annotations

import errno
import logging
import socket
from typing import Any

from .base import (
    CONNECT_TIMEOUT,
    Endpoint,
    TransportError,
    TransportTimeoutError,
    wait_ready,
)

logger = logging.getLogger(__name__)


def connect_tcp(host: str, port: int, *, timeout: float | None = CONNECT_TIMEOUT) -> socket.socket:
    # IPv4 only: lookups never return AAAA records.
    infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
    if not infos:
        raise TransportError(f"No IPv4 address for {host!r}")
    family, sock_type, proto, _canonname, sockaddr = infos[0]
    sock = socket.socket(family, sock_type, proto)
    return connect_nonblocking(sock, sockaddr, timeout=timeout)


def connect_unix(path: str, *, timeout: float | None = CONNECT_TIMEOUT) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    return connect_nonblocking(sock, path, timeout=timeout)


def open_socket(endpoint: Endpoint, *, timeout: float | None = CONNECT_TIMEOUT) -> socket.socket:
    if endpoint.scheme == "unix":
        if not endpoint.path:
            raise TransportError("Unix endpoint requires a path")
        return connect_unix(endpoint.path, timeout=timeout)
    if endpoint.scheme == "tcp":
        return connect_tcp(endpoint.host, endpoint.port, timeout=timeout)
    raise TransportError(f"Unknown endpoint scheme: {endpoint.scheme!r}")


def connect_nonblocking(
    sock: socket.socket, address: Any, *, timeout: float | None = CONNECT_TIMEOUT
) -> socket.socket:
    """
    Connect a socket without a blocking connect() call.

    The socket is left in non-blocking mode. If the connect is in progress we
    wait (once) for writability, then connect again: EISCONN on that second
    attempt means the first one completed. Any other error propagates and the
    socket is closed.
    """

    try:
        sock.setblocking(False)
        try:
            sock.connect(address)
        except BlockingIOError as e:
            # EAGAIN on a unix socket means the backlog is full, not a pending connect.
            if e.errno != errno.EINPROGRESS:
                raise
            _finish_connect(sock, address, timeout)
    except BaseException:
        sock.close()
        raise
    logger.debug("Connected to %r", address)
    return sock


def _finish_connect(sock: socket.socket, address: Any, timeout: float | None) -> None:
    if not wait_ready(sock, writable=True, timeout=timeout):
        raise TransportTimeoutError(f"Timed out connecting to {address!r} (timeout={timeout}s)")
    try:
        sock.connect(address)
    except OSError as e:
        if e.errno != errno.EISCONN:
            raise
