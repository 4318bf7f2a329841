from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, List, Optional, Protocol

from .memory import Memory, MemoryConfig


class EofPolicy(Enum):
    ZERO = 'zero'            # cell becomes 0
    KEEP = 'keep'            # cell left unchanged
    MINUS_ONE = 'minus-one'  # cell becomes the top cell value


class InStream(Protocol):
    def read(self) -> Optional[int]:
        """Next input value, or None to leave the current cell unchanged."""


class OutStream(Protocol):
    def write(self, value: int) -> None: ...


def _eof_value(eof: EofPolicy) -> Optional[int]:
    if eof is EofPolicy.ZERO:
        return 0
    if eof is EofPolicy.MINUS_ONE:
        return -1
    return None


class BufferInput:
    def __init__(self, data: bytes = b"", eof: EofPolicy = EofPolicy.ZERO):
        self._data = bytes(data)
        self._pos = 0
        self.eof = eof

    def read(self) -> Optional[int]:
        if self._pos >= len(self._data):
            return _eof_value(self.eof)
        value = self._data[self._pos]
        self._pos += 1
        return value


class StreamInput:
    """Reads one byte per call from a binary file object (may block)."""

    def __init__(self, fileobj: BinaryIO, eof: EofPolicy = EofPolicy.ZERO):
        self._fileobj = fileobj
        self.eof = eof

    def read(self) -> Optional[int]:
        chunk = self._fileobj.read(1)
        if not chunk:
            return _eof_value(self.eof)
        return chunk[0]


class BufferOutput:
    def __init__(self):
        self.values: List[int] = []

    def write(self, value: int) -> None:
        self.values.append(value)

    def getvalue(self) -> bytes:
        return bytes(v & 0xFF for v in self.values)


class StreamOutput:
    """Writes the low byte of each value to a binary file object."""

    def __init__(self, fileobj: BinaryIO, flush: bool = False):
        self._fileobj = fileobj
        self._flush = flush

    def write(self, value: int) -> None:
        self._fileobj.write(bytes((value & 0xFF,)))
        if self._flush:
            self._fileobj.flush()


@dataclass
class Context:
    memory: Memory
    in_stream: InStream
    out_stream: OutStream

    @classmethod
    def create(
        cls,
        config: Optional[MemoryConfig] = None,
        data: bytes = b"",
        eof: EofPolicy = EofPolicy.ZERO,
    ) -> "Context":
        return cls(Memory(config), BufferInput(data, eof), BufferOutput())
