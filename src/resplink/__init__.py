from __future__ import annotations

from .connection import KEEPALIVE_SUPPORTED, Connection
from .protocol import (
    CommandError,
    ProtocolError,
    ValueDecodeError,
    ValueDecoder,
    build_command,
    raise_for_error,
    read_reply,
)
from .transport import (
    CONNECT_TIMEOUT,
    BufferedSocket,
    ConnectionResetByPeer,
    Endpoint,
    KeepaliveConfig,
    LineTooLongError,
    NotConnectedError,
    TransportError,
    TransportTimeoutError,
)

__all__ = [
    "CONNECT_TIMEOUT",
    "KEEPALIVE_SUPPORTED",
    "BufferedSocket",
    "CommandError",
    "Connection",
    "ConnectionResetByPeer",
    "Endpoint",
    "KeepaliveConfig",
    "LineTooLongError",
    "NotConnectedError",
    "ProtocolError",
    "TransportError",
    "TransportTimeoutError",
    "ValueDecodeError",
    "ValueDecoder",
    "build_command",
    "raise_for_error",
    "read_reply",
]
