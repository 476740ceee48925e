from __future__ import annotations

import pytest

from resplink.protocol.reply import (
    CommandError,
    ProtocolError,
    ValueDecodeError,
    ValueDecoder,
    raise_for_error,
    read_reply,
)


class WireReader:
    """In-memory LineReader that records how far the decoder consumed."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    @property
    def remaining(self) -> bytes:
        return self.data[self.pos :]

    def read_line(self) -> bytes:
        idx = self.data.find(b"\r\n", self.pos)
        if idx == -1:
            raise AssertionError("decoder asked for a line past the end of the wire data")
        line = self.data[self.pos : idx + 2]
        self.pos = idx + 2
        return line

    def read_exact(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise AssertionError("decoder asked for bytes past the end of the wire data")
        out = self.data[self.pos : self.pos + n]
        self.pos += n
        return out


def _decode(data: bytes, **kwargs: object) -> object:
    return read_reply(WireReader(data), **kwargs)  # type: ignore[arg-type]


def test_status_reply_is_stripped_text() -> None:
    assert _decode(b"+OK\r\n") == "OK"
    assert _decode(b"+  PONG \r\n") == "PONG"


def test_error_reply_is_returned_not_raised() -> None:
    out = _decode(b"-ERR unknown command 'FOO'\r\n")
    assert isinstance(out, CommandError)
    assert out.message == "ERR unknown command 'FOO'"
    with pytest.raises(CommandError, match="unknown command"):
        raise_for_error(out)


def test_raise_for_error_passes_values_through() -> None:
    assert raise_for_error(b"v") == b"v"
    assert raise_for_error(None) is None


def test_integer_reply() -> None:
    assert _decode(b":1000\r\n") == 1000
    assert _decode(b":-42\r\n") == -42
    assert _decode(b":9223372036854775807\r\n") == 2**63 - 1


def test_non_numeric_integer_reply_is_a_protocol_error() -> None:
    with pytest.raises(ProtocolError, match="integer reply"):
        _decode(b":abc\r\n")


def test_bulk_reply_returns_raw_bytes_by_default() -> None:
    r = WireReader(b"$5\r\nhello\r\n")
    assert read_reply(r) == b"hello"
    assert r.remaining == b""


def test_bulk_reply_may_contain_crlf() -> None:
    assert _decode(b"$4\r\na\r\nb\r\n") == b"a\r\nb"


def test_bulk_reply_goes_through_decoder() -> None:
    out = _decode("$6\r\nhéllo\r\n".encode(), decoder=ValueDecoder(encoding="utf-8"))
    assert out == "héllo"


def test_null_bulk_consumes_only_the_type_line() -> None:
    r = WireReader(b"$-1\r\n+next\r\n")
    assert read_reply(r) is None
    assert r.remaining == b"+next\r\n"


def test_empty_bulk_still_consumes_terminator() -> None:
    r = WireReader(b"$0\r\n\r\n:7\r\n")
    assert read_reply(r) == b""
    assert r.remaining == b":7\r\n"
    assert read_reply(r) == 7


def test_bad_bulk_length_is_a_protocol_error() -> None:
    with pytest.raises(ProtocolError):
        _decode(b"$x\r\n")
    with pytest.raises(ProtocolError, match="Negative"):
        _decode(b"$-2\r\n")


def test_null_and_empty_arrays_are_distinct() -> None:
    assert _decode(b"*-1\r\n") is None
    assert _decode(b"*0\r\n") == []


def test_array_of_mixed_replies() -> None:
    data = b"*5\r\n:1\r\n$3\r\nfoo\r\n$-1\r\n+OK\r\n-ERR bad\r\n"
    out = _decode(data)
    assert out == [1, b"foo", None, "OK", CommandError("ERR bad")]


def test_nested_arrays_decode_in_order() -> None:
    data = (
        b"*3\r\n"
        b"*2\r\n:1\r\n*1\r\n*2\r\n$1\r\na\r\n*-1\r\n"
        b"*0\r\n"
        b":3\r\n"
    )
    r = WireReader(data + b"+tail\r\n")
    assert read_reply(r) == [[1, [[b"a", None]]], [], 3]
    assert r.remaining == b"+tail\r\n"


def test_deep_nesting_within_limit() -> None:
    depth = 500
    data = b"*1\r\n" * depth + b":9\r\n"
    out = _decode(data, max_depth=depth)
    for _ in range(depth):
        assert isinstance(out, list) and len(out) == 1
        out = out[0]
    assert out == 9


def test_nesting_beyond_limit_is_a_protocol_error() -> None:
    data = b"*1\r\n" * 4 + b":9\r\n"
    with pytest.raises(ProtocolError, match="nesting"):
        _decode(data, max_depth=3)


def test_unknown_tag_carries_tag_and_stops_reading() -> None:
    r = WireReader(b"?what\r\n+OK\r\n")
    with pytest.raises(ProtocolError) as ei:
        read_reply(r)
    assert ei.value.tag == b"?"
    assert r.remaining == b"+OK\r\n"


def test_empty_line_is_a_protocol_error() -> None:
    with pytest.raises(ProtocolError) as ei:
        _decode(b"\r\n")
    assert ei.value.tag == b""


def test_oversized_bulk_length_fails_before_reading_payload() -> None:
    reader = WireReader(b"$999999999999999\r\nab")
    with pytest.raises(ProtocolError, match="exceeds limit"):
        read_reply(reader)  # type: ignore[arg-type]
    assert reader.remaining == b"ab"


def test_bulk_length_limit_is_configurable() -> None:
    assert _decode(b"$4\r\nabcd\r\n", max_bulk_length=4) == b"abcd"
    with pytest.raises(ProtocolError):
        _decode(b"$5\r\nabcde\r\n", max_bulk_length=4)


def test_decoder_failure_still_consumes_the_whole_reply() -> None:
    reader = WireReader(b"*2\r\n$2\r\n\xff\xfe\r\n$2\r\nok\r\n+NEXT\r\n")
    with pytest.raises(ValueDecodeError) as ei:
        read_reply(reader, decoder=ValueDecoder(encoding="utf-8"))  # type: ignore[arg-type]
    assert ei.value.reply == [b"\xff\xfe", "ok"]
    assert isinstance(ei.value.__cause__, UnicodeDecodeError)
    assert reader.remaining == b"+NEXT\r\n"
    assert read_reply(reader) == "NEXT"  # type: ignore[arg-type]


def test_decoder_failure_on_single_bulk() -> None:
    reader = WireReader(b"$1\r\n\x80\r\n:7\r\n")
    with pytest.raises(ValueError):
        read_reply(reader, decoder=ValueDecoder(encoding="ascii"))  # type: ignore[arg-type]
    assert reader.remaining == b":7\r\n"
