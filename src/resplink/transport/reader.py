from __future__ import annotations

import socket

from .base import (
    CRLF,
    MAX_RECV_SIZE,
    READ_CHUNK_SIZE,
    ConnectionResetByPeer,
    LineTooLongError,
    TransportTimeoutError,
    normalize_timeout,
    wait_ready,
)

DEFAULT_MAX_LINE_LENGTH = 64 * 1024 * 1024


class BufferedSocket:
    """
    Non-blocking stream socket with a read buffer.

    Every recv/send is attempted non-blocking; on would-block we wait for
    readiness (selectors), bounded by `timeout` (None waits forever), and
    retry. End-of-stream surfaces as ConnectionResetByPeer, never as b"".

    Works the same for TCP and AF_UNIX sockets.
    """

    __slots__ = ("sock", "max_line_length", "_buffer", "_timeout")

    def __init__(
        self,
        sock: socket.socket,
        *,
        timeout: float | None = None,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> None:
        sock.setblocking(False)
        self.sock = sock
        self.max_line_length = max_line_length
        self._buffer = bytearray()
        self._timeout = normalize_timeout(timeout)

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float | None) -> None:
        self._timeout = normalize_timeout(value)

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        self._buffer.clear()

    def read_exact(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("n must be >= 0")
        head = bytes(self._buffer[:n])
        del self._buffer[:n]
        if len(head) == n:
            return head

        # Large payloads go straight from the socket into the result, one bounded recv at a time.
        parts = [head]
        remaining = n - len(head)
        while remaining > 0:
            chunk = self._recv(min(remaining, MAX_RECV_SIZE))
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)

    def read_line(self) -> bytes:
        """Return the next line, CRLF included."""
        start = 0
        while True:
            idx = self._buffer.find(CRLF, start)
            if idx != -1:
                end = idx + len(CRLF)
                line = bytes(self._buffer[:end])
                del self._buffer[:end]
                return line
            if len(self._buffer) > self.max_line_length:
                raise LineTooLongError(
                    f"No line terminator within {self.max_line_length} bytes"
                )
            # The CR of a split terminator may be the last byte we already have.
            start = max(len(self._buffer) - 1, 0)
            self._buffer += self._recv(READ_CHUNK_SIZE)

    def write_all(self, data: bytes) -> None:
        view = memoryview(data)
        offset = 0
        while offset < len(view):
            try:
                offset += self.sock.send(view[offset:])
            except BlockingIOError:
                self._wait(writable=True)

    def _recv(self, nbytes: int) -> bytes:
        while True:
            try:
                chunk = self.sock.recv(nbytes)
            except BlockingIOError:
                self._wait(writable=False)
                continue
            if not chunk:
                raise ConnectionResetByPeer("Connection closed by peer")
            return chunk

    def _wait(self, *, writable: bool) -> None:
        if not wait_ready(self.sock, writable=writable, timeout=self._timeout):
            op = "write" if writable else "read"
            raise TransportTimeoutError(f"Timed out waiting to {op} (timeout={self._timeout}s)")
