"""
Byte stream boundary used by the dialer.
"""

import socket
from typing import Optional, Protocol


class IncompleteReadError(EOFError):
    """The stream ended before the requested number of bytes arrived."""

    def __init__(self, partial: bytes, expected: int):
        super().__init__(
            f"{len(partial)} bytes read on a total of {expected} expected bytes"
        )
        self.partial = partial
        self.expected = expected


class Stream(Protocol):
    """Blocking bidirectional byte stream."""

    def readexactly(self, n: int) -> bytes:
        ...

    def write(self, data: bytes) -> None:
        ...

    def close(self) -> None:
        ...


class SocketStream:
    """Stream over a connected blocking socket."""

    def __init__(self, sock: socket.socket):
        self.socket = sock

    def readexactly(self, n: int) -> bytes:
        buf = bytearray()
        while len(buf) < n:
            chunk = self.socket.recv(n - len(buf))
            if not chunk:
                raise IncompleteReadError(bytes(buf), n)
            buf.extend(chunk)
        return bytes(buf)

    def read(self, n: int = 8192) -> bytes:
        return self.socket.recv(n)

    def write(self, data: bytes) -> None:
        self.socket.sendall(data)

    def close(self) -> None:
        self.socket.close()

    def settimeout(self, timeout: Optional[float]) -> None:
        self.socket.settimeout(timeout)

    def fileno(self) -> int:
        return self.socket.fileno()

    def __enter__(self) -> "SocketStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
