from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple, Union

from . import parser as syntax
from .parser import AddUntilZeroArg


@dataclass(frozen=True)
class Add:
    val: int


@dataclass(frozen=True)
class Seek:
    offset: int


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class AddUntilZero:
    target: Tuple[AddUntilZeroArg, ...]


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Jump:
    target: int


@dataclass(frozen=True)
class JumpIfZero:
    target: int


@dataclass(frozen=True)
class Halt:
    pass


Instruction = Union[Add, Seek, Clear, AddUntilZero, Input, Output, Jump, JumpIfZero, Halt]


def _emit(nodes: Iterable[syntax.Node], out: List[Instruction]) -> None:
    for n in nodes:
        if isinstance(n, syntax.Add):
            out.append(Add(n.n))
        elif isinstance(n, syntax.Move):
            out.append(Seek(n.n))
        elif isinstance(n, syntax.Input):
            out.append(Input())
        elif isinstance(n, syntax.Output):
            out.append(Output())
        elif isinstance(n, syntax.Clear):
            out.append(Clear())
        elif isinstance(n, syntax.AddUntilZero):
            out.append(AddUntilZero(n.target))
        elif isinstance(n, syntax.Loop):
            top = len(out)
            out.append(JumpIfZero(-1))  # patched below
            _emit(n.body, out)
            out.append(Jump(top))
            out[top] = JumpIfZero(len(out))
        else:
            raise TypeError(f"Unexpected syntax node: {n!r}")


def _format(ins: Instruction) -> str:
    if isinstance(ins, Add):
        return f"add {ins.val:+d}"
    if isinstance(ins, Seek):
        return f"seek {ins.offset:+d}"
    if isinstance(ins, AddUntilZero):
        args = ", ".join(f"[{a.offset:+d}]*{a.times}" for a in ins.target)
        return f"add_until_zero {args}"
    if isinstance(ins, Jump):
        return f"jump {ins.target}"
    if isinstance(ins, JumpIfZero):
        return f"jump_if_zero {ins.target}"
    return type(ins).__name__.lower()


class InstructionList:
    """Immutable program: jump targets are indices into this same list,
    and the last instruction is always the only ``Halt``."""

    __slots__ = ('_items',)

    def __init__(self, items: Iterable[Instruction]):
        self._items: Tuple[Instruction, ...] = tuple(items)

    @classmethod
    def compile(cls, tree: Iterable[syntax.Node]) -> "InstructionList":
        out: List[Instruction] = []
        _emit(tree, out)
        out.append(Halt())
        return cls(out)

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InstructionList):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"InstructionList({list(self._items)!r})"

    def dump(self) -> str:
        width = len(str(len(self._items) - 1))
        return "\n".join(f"{i:>{width}}  {_format(ins)}" for i, ins in enumerate(self._items))
