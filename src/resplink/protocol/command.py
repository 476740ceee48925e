from __future__ import annotations

from collections.abc import Sequence

Arg = bytes | bytearray | memoryview | str | int | float


def _arg_bytes(arg: Arg) -> bytes:
    if isinstance(arg, (bytes, bytearray, memoryview)):
        return bytes(arg)
    if isinstance(arg, str):
        return arg.encode("utf-8")
    # bool is an int subclass but "True" is never what a caller meant.
    if isinstance(arg, bool) or not isinstance(arg, (int, float)):
        raise TypeError(f"Unsupported command argument type: {type(arg).__name__}")
    return str(arg).encode("ascii")


def build_command(args: Sequence[Arg]) -> bytes:
    """
    Encode a command as a RESP array of bulk strings:

        *<argc>\\r\\n  then  $<len>\\r\\n<arg>\\r\\n  per argument
    """

    if not args:
        raise ValueError("Command must have at least one argument")
    out = bytearray(b"*%d\r\n" % len(args))
    for arg in args:
        data = _arg_bytes(arg)
        out += b"$%d\r\n" % len(data)
        out += data
        out += b"\r\n"
    return bytes(out)
