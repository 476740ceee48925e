from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

DEFAULT_MAX_DEPTH = 128
DEFAULT_MAX_BULK_LENGTH = 512 * 1024 * 1024

ERROR = b"-"
STATUS = b"+"
INTEGER = b":"
BULK = b"$"
ARRAY = b"*"


class LineReader(Protocol):
    def read_line(self) -> bytes: ...
    def read_exact(self, n: int) -> bytes: ...


class ProtocolError(Exception):
    """The byte stream no longer looks like RESP. The connection must not be reused."""

    def __init__(self, message: str, *, tag: bytes | None = None) -> None:
        super().__init__(message)
        self.tag = tag


class CommandError(Exception):
    """
    Error reply sent by the server (e.g. "ERR unknown command").

    read_reply() returns it as a value instead of raising it: a failed command
    is an ordinary outcome, the connection is still in sync.
    """

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandError):
            return NotImplemented
        return self.args == other.args

    def __hash__(self) -> int:
        return hash(self.args)


class ValueDecodeError(ValueError):
    """
    The decoder rejected a bulk payload.

    The whole reply was still consumed, so the connection stays in sync.
    `reply` holds it with the raw bytes left in place of each rejected payload.
    """

    def __init__(self, message: str, *, reply: Any) -> None:
        super().__init__(message)
        self.reply = reply


@dataclass(frozen=True, slots=True)
class ValueDecoder:
    """Turns bulk payloads into values: raw bytes by default, or text in `encoding`."""

    encoding: str | None = None
    errors: str = "strict"

    def __call__(self, raw: bytes) -> bytes | str:
        if self.encoding is None:
            return raw
        return raw.decode(self.encoding, self.errors)


@dataclass(slots=True)
class _PendingArray:
    count: int
    items: list[Any] = field(default_factory=list)


def raise_for_error(reply: Any) -> Any:
    if isinstance(reply, CommandError):
        raise reply
    return reply


def _parse_int(payload: bytes, what: str) -> int:
    try:
        return int(payload)
    except ValueError as e:
        raise ProtocolError(f"Invalid {what}: {payload!r}") from e


def _parse_length(payload: bytes, what: str) -> int:
    n = _parse_int(payload, what)
    if n < -1:
        raise ProtocolError(f"Negative {what}: {n}")
    return n


def _text(payload: bytes) -> str:
    return payload.strip().decode("utf-8", "replace")


def read_reply(
    reader: LineReader,
    *,
    decoder: ValueDecoder | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_bulk_length: int = DEFAULT_MAX_BULK_LENGTH,
) -> Any:
    """
    Read exactly one reply from `reader`.

    Nested arrays are decoded with an explicit stack of partially filled
    arrays, so hostile nesting costs heap, not interpreter stack, and is
    capped at `max_depth`. Bulk lengths above `max_bulk_length` raise
    ProtocolError before any payload is read.

    If the decoder raises, the rest of the reply is still read and
    ValueDecodeError is raised at the end, chained to the first failure.
    """

    decode = decoder or ValueDecoder()
    stack: list[_PendingArray] = []
    decode_error: Exception | None = None

    while True:
        line = reader.read_line()
        tag, payload = line[:1], line[1:-2]

        if tag == ARRAY:
            count = _parse_length(payload, "array length")
            if count > 0:
                if len(stack) >= max_depth:
                    raise ProtocolError(f"Array nesting deeper than {max_depth}")
                stack.append(_PendingArray(count=count))
                continue
            value: Any = None if count == -1 else []
        elif tag == BULK:
            length = _parse_length(payload, "bulk length")
            if length == -1:
                value = None
            else:
                if length > max_bulk_length:
                    raise ProtocolError(f"Bulk length {length} exceeds limit {max_bulk_length}")
                raw = reader.read_exact(length)
                reader.read_exact(2)  # CRLF
                try:
                    value = decode(raw)
                except Exception as e:
                    value = raw
                    if decode_error is None:
                        decode_error = e
        elif tag == STATUS:
            value = _text(payload)
        elif tag == INTEGER:
            value = _parse_int(payload, "integer reply")
        elif tag == ERROR:
            value = CommandError(_text(payload))
        else:
            raise ProtocolError(f"Unknown reply type: {tag!r}", tag=tag)

        while stack:
            top = stack[-1]
            top.items.append(value)
            if len(top.items) < top.count:
                break
            stack.pop()
            value = top.items
        else:
            if decode_error is not None:
                raise ValueDecodeError(
                    f"Could not decode bulk reply: {decode_error}", reply=value
                ) from decode_error
            return value
