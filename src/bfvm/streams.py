from __future__ import annotations

from typing import BinaryIO, Optional, Protocol


class ByteSource(Protocol):
    def read_byte(self) -> Optional[int]:
        """Return the next byte, or None at end of input."""
        ...


class ByteSink(Protocol):
    def write_byte(self, value: int) -> None:
        ...


class StreamSource:
    """Pulls one byte per read from a binary stream such as ``sys.stdin.buffer``."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def read_byte(self) -> Optional[int]:
        data = self.stream.read(1)
        if not data:
            return None
        return data[0]


class StreamSink:
    def __init__(self, stream: BinaryIO, *, flush: bool = True) -> None:
        self.stream = stream
        self.flush = flush

    def write_byte(self, value: int) -> None:
        self.stream.write(bytes((value,)))
        if self.flush:
            self.stream.flush()


class BytesSource:
    def __init__(self, data: bytes = b"") -> None:
        self.data = bytes(data)
        self.offset = 0

    def read_byte(self) -> Optional[int]:
        if self.offset >= len(self.data):
            return None
        value = self.data[self.offset]
        self.offset += 1
        return value


class BufferSink:
    def __init__(self) -> None:
        self.buffer = bytearray()

    def write_byte(self, value: int) -> None:
        self.buffer.append(value)

    def getvalue(self) -> bytes:
        return bytes(self.buffer)
