from .command import build_command
from .reply import (
    DEFAULT_MAX_BULK_LENGTH,
    DEFAULT_MAX_DEPTH,
    CommandError,
    ProtocolError,
    ValueDecodeError,
    ValueDecoder,
    raise_for_error,
    read_reply,
)

__all__ = [
    "DEFAULT_MAX_BULK_LENGTH",
    "DEFAULT_MAX_DEPTH",
    "CommandError",
    "ProtocolError",
    "ValueDecodeError",
    "ValueDecoder",
    "build_command",
    "raise_for_error",
    "read_reply",
]
