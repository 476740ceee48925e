from __future__ import annotations

import logging
import socket
import types
from collections.abc import Sequence
from typing import Any

from resplink.protocol.command import Arg, build_command
from resplink.protocol.reply import (
    DEFAULT_MAX_BULK_LENGTH,
    DEFAULT_MAX_DEPTH,
    ValueDecoder,
    read_reply,
)
from resplink.transport.base import (
    CONNECT_TIMEOUT,
    Endpoint,
    KeepaliveConfig,
    NotConnectedError,
    normalize_timeout,
)
from resplink.transport.connector import open_socket
from resplink.transport.reader import BufferedSocket

logger = logging.getLogger(__name__)

KEEPALIVE_SUPPORTED = all(
    hasattr(socket, name) for name in ("SO_KEEPALIVE", "TCP_KEEPIDLE", "TCP_KEEPINTVL", "TCP_KEEPCNT")
)


class Connection:
    """
    One blocking RESP session over a TCP or unix stream socket.

    Not thread-safe: at most one write followed by one read in flight.
    Error replies come back from read() as CommandError values.
    """

    def __init__(
        self,
        sock: socket.socket,
        *,
        endpoint: Endpoint | None = None,
        timeout: float | None = None,
        decoder: ValueDecoder | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_bulk_length: int = DEFAULT_MAX_BULK_LENGTH,
    ) -> None:
        self.endpoint = endpoint
        self.decoder = decoder or ValueDecoder()
        self.max_depth = max_depth
        self.max_bulk_length = max_bulk_length
        self._timeout = normalize_timeout(timeout)
        self._io: BufferedSocket | None = BufferedSocket(sock, timeout=self._timeout)

    @classmethod
    def connect(
        cls,
        target: Endpoint | str,
        *,
        connect_timeout: float | None = CONNECT_TIMEOUT,
        timeout: float | None = None,
        decoder: ValueDecoder | None = None,
        keepalive: KeepaliveConfig | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_bulk_length: int = DEFAULT_MAX_BULK_LENGTH,
    ) -> Connection:
        endpoint = Endpoint.from_url(target) if isinstance(target, str) else target
        sock = open_socket(endpoint, timeout=connect_timeout)
        conn = cls(
            sock,
            endpoint=endpoint,
            timeout=timeout,
            decoder=decoder,
            max_depth=max_depth,
            max_bulk_length=max_bulk_length,
        )
        if keepalive is not None:
            try:
                conn.set_keepalive(keepalive)
            except BaseException:
                conn.disconnect()
                raise
        return conn

    def __enter__(self) -> Connection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        state = "connected" if self.connected else "disconnected"
        return f"<Connection {self.endpoint or '?'} {state}>"

    @property
    def connected(self) -> bool:
        return self._io is not None

    def disconnect(self) -> None:
        io, self._io = self._io, None
        if io is None:
            return
        try:
            io.sock.close()
        except OSError as e:
            logger.debug("Ignoring error while closing %s: %s", self.endpoint, e)
        finally:
            io.clear()
        logger.debug("Disconnected from %s", self.endpoint)

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float | None) -> None:
        self._timeout = normalize_timeout(value)
        if self._io is not None:
            self._io.timeout = self._timeout

    def write(self, command: Sequence[Arg]) -> None:
        self._require_io().write_all(build_command(command))

    def read(self) -> Any:
        return read_reply(
            self._require_io(),
            decoder=self.decoder,
            max_depth=self.max_depth,
            max_bulk_length=self.max_bulk_length,
        )

    def call(self, *args: Arg) -> Any:
        self.write(args)
        return self.read()

    def set_keepalive(self, config: KeepaliveConfig) -> None:
        sock = self._keepalive_socket()
        if sock is None:
            return
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, int(config.time))
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, int(config.interval))
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPCNT, int(config.probes))

    def get_keepalive(self) -> KeepaliveConfig | None:
        sock = self._keepalive_socket()
        if sock is None:
            return None
        return KeepaliveConfig(
            time=sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE),
            interval=sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL),
            probes=sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPCNT),
        )

    def _keepalive_socket(self) -> socket.socket | None:
        # Keepalive tuning is best effort: unsupported platforms and unix sockets are no-ops.
        if not KEEPALIVE_SUPPORTED:
            return None
        sock = self._require_io().sock
        if sock.family != socket.AF_INET:
            return None
        return sock

    def _require_io(self) -> BufferedSocket:
        if self._io is None:
            raise NotConnectedError("Not connected.")
        return self._io
