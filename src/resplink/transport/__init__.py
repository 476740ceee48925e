from .base import (
    CONNECT_TIMEOUT,
    ConnectionResetByPeer,
    Endpoint,
    KeepaliveConfig,
    LineTooLongError,
    NotConnectedError,
    TransportError,
    TransportTimeoutError,
)
from .connector import connect_tcp, connect_unix, open_socket
from .reader import BufferedSocket

__all__ = [
    "CONNECT_TIMEOUT",
    "BufferedSocket",
    "ConnectionResetByPeer",
    "Endpoint",
    "KeepaliveConfig",
    "LineTooLongError",
    "NotConnectedError",
    "TransportError",
    "TransportTimeoutError",
    "connect_tcp",
    "connect_unix",
    "open_socket",
]
