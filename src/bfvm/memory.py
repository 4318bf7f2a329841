from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np

from .errors import OutOfBound, Overflow

_DTYPES = {8: np.uint8, 16: np.uint16, 32: np.uint32}


class OverflowPolicy(Enum):
    WRAP = 'wrap'
    ERROR = 'error'


class BoundsPolicy(Enum):
    WRAP = 'wrap'
    ERROR = 'error'


@dataclass(frozen=True)
class MemoryConfig:
    length: int = 30000
    cell_bits: int = 8
    overflow: OverflowPolicy = OverflowPolicy.WRAP
    bounds: BoundsPolicy = BoundsPolicy.ERROR

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise ValueError(f"Tape length must be positive, got {self.length}")
        if self.cell_bits not in _DTYPES:
            raise ValueError(f"Unsupported cell width: {self.cell_bits} (expected 8, 16 or 32)")

    @property
    def cell_size(self) -> int:
        return 1 << self.cell_bits


class Memory:
    """Fixed-length tape of unsigned cells with a single pointer.

    Every operation either succeeds or raises with the pointer and the
    cells untouched.
    """

    def __init__(self, config: Optional[MemoryConfig] = None):
        self.config = config if config is not None else MemoryConfig()
        self._cells = np.zeros(self.config.length, dtype=_DTYPES[self.config.cell_bits])
        self._ptr = 0

    @property
    def pointer(self) -> int:
        return self._ptr

    def __len__(self) -> int:
        return self.config.length

    def get(self) -> int:
        return int(self._cells[self._ptr])

    def set(self, value: int) -> None:
        self._cells[self._ptr] = self._fit(value)

    def add(self, delta: int) -> None:
        self._cells[self._ptr] = self._fit(int(self._cells[self._ptr]) + delta)

    def seek(self, offset: int) -> None:
        target = self._ptr + offset
        if 0 <= target < self.config.length:
            self._ptr = target
        elif self.config.bounds is BoundsPolicy.WRAP:
            self._ptr = target % self.config.length
        else:
            raise OutOfBound(
                message=f"pointer {self._ptr} moved by {offset:+d} leaves the tape [0, {self.config.length})",
                pointer=self._ptr,
            )

    def _fit(self, value: int) -> int:
        size = self.config.cell_size
        if 0 <= value < size:
            return value
        if self.config.overflow is OverflowPolicy.WRAP:
            return value % size
        raise Overflow(
            message=f"value {value} at cell {self._ptr} is outside [0, {size})",
            pointer=self._ptr,
        )

    def snapshot(self, start: int = 0, stop: Optional[int] = None) -> List[int]:
        return [int(v) for v in self._cells[start:stop]]
