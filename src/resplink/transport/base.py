from __future__ import annotations

import selectors
import socket
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

CONNECT_TIMEOUT = 10.0
READ_CHUNK_SIZE = 1024
MAX_RECV_SIZE = 64 * 1024
DEFAULT_PORT = 6379
CRLF = b"\r\n"

_TCP_SCHEMES = {"redis", "tcp"}


class TransportError(Exception):
    pass


class TransportTimeoutError(TransportError, TimeoutError):
    pass


class ConnectionResetByPeer(TransportError, ConnectionResetError):
    pass


class NotConnectedError(TransportError):
    pass


class LineTooLongError(TransportError):
    pass


def normalize_timeout(timeout: float | None) -> float | None:
    """Map None/zero/negative to None (wait indefinitely); keep positive seconds."""
    if timeout is None or timeout <= 0:
        return None
    return float(timeout)


def wait_ready(sock: socket.socket, *, writable: bool, timeout: float | None) -> bool:
    """
    Block until `sock` is readable (or writable), at most `timeout` seconds.

    Uses selectors rather than select.select() so descriptors above FD_SETSIZE work.
    """

    events = selectors.EVENT_WRITE if writable else selectors.EVENT_READ
    with selectors.DefaultSelector() as sel:
        sel.register(sock, events)
        return bool(sel.select(timeout))


@dataclass(frozen=True, slots=True)
class Endpoint:
    """
    Connection target.

    scheme is "tcp" (host + port, IPv4 only) or "unix" (filesystem path).
    """

    scheme: str = "tcp"
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    path: str | None = None

    @classmethod
    def tcp(cls, host: str, port: int = DEFAULT_PORT) -> Endpoint:
        return cls(scheme="tcp", host=host, port=port)

    @classmethod
    def unix(cls, path: str) -> Endpoint:
        return cls(scheme="unix", host="", port=0, path=path)

    @classmethod
    def from_url(cls, url: str) -> Endpoint:
        """
        Parse redis://host:port, tcp://host:port or unix:///path/to/socket.
        """

        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme == "unix":
            path = unquote(parts.path)
            if not path:
                raise TransportError(f"Missing socket path in {url!r}")
            return cls.unix(path)
        if scheme not in _TCP_SCHEMES:
            raise TransportError(f"Unsupported scheme in {url!r}")
        # No AUTH or SELECT happens here, so credentials or a db index would be silently ignored.
        if parts.username is not None or parts.password is not None:
            raise TransportError("Credentials in the URL are not supported")
        if parts.path not in ("", "/") or parts.query:
            raise TransportError(f"Database path or query not supported in {url!r}")
        try:
            port = parts.port
        except ValueError as e:
            raise TransportError(f"Invalid port in {url!r}") from e
        return cls.tcp(parts.hostname or "127.0.0.1", port or DEFAULT_PORT)

    def __str__(self) -> str:
        if self.scheme == "unix":
            return f"unix://{self.path}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True, slots=True)
class KeepaliveConfig:
    """TCP keepalive tuning: idle seconds before probing, probe interval, probe count."""

    time: int
    interval: int
    probes: int
