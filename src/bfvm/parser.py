from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import make_parse_error
from .lexer import Token, TokenKind


# ---------------- Syntax nodes ----------------
@dataclass(frozen=True)
class Add:
    n: int  # net +/- on current cell


@dataclass(frozen=True)
class Move:
    n: int  # net >/<


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Loop:
    body: Tuple["Node", ...]


@dataclass(frozen=True)
class Clear:
    pass  # "[-]"


@dataclass(frozen=True)
class AddUntilZeroArg:
    offset: int
    times: int


@dataclass(frozen=True)
class AddUntilZero:
    target: Tuple[AddUntilZeroArg, ...]


Node = Union[Add, Move, Input, Output, Loop, Clear, AddUntilZero]
SyntaxTree = List[Node]


# ---------------- Basic utilities ----------------
def pack(nodes: Iterable[Node]) -> List[Node]:
    """Combine adjacent Add/Add and Move/Move; remove zeros."""
    out: List[Node] = []
    for n in nodes:
        if out and isinstance(n, (Add, Move)) and type(out[-1]) is type(n):
            s = out.pop().n + n.n
            if s != 0:
                out.append(type(n)(s))
            continue
        if isinstance(n, (Add, Move)) and n.n == 0:
            continue
        out.append(n)
    return out


# ---------------- Linear loop analysis ----------------
def analyze_linear_loop(body: Iterable[Node]) -> Optional[Dict[int, int]]:
    """
    If the loop body consists only of Add/Move, its net pointer shift is 0
    and it takes exactly 1 from the starting cell per pass, return the
    per-pass delta map: offset -> delta, in first-visited order, including
    offsets the pointer only passes through (delta 0).
    Otherwise None.

    Within a pass the running change at every offset must stay between 0
    and that offset's delta, so a cell never goes further than the value
    the closed form writes.
    """
    p = 0
    delta: Dict[int, int] = {0: 0}
    reach: Dict[int, Tuple[int, int]] = {0: (0, 0)}  # offset -> (min, max) running change
    for n in body:
        if isinstance(n, Move):
            p += n.n
            delta.setdefault(p, 0)
            reach.setdefault(p, (0, 0))
        elif isinstance(n, Add):
            delta[p] += n.n
            lo, hi = reach[p]
            reach[p] = (min(lo, delta[p]), max(hi, delta[p]))
        else:
            return None
    if p != 0 or delta[0] != -1:
        return None
    for off, (lo, hi) in reach.items():
        if lo < min(0, delta[off]) or hi > max(0, delta[off]):
            return None
    return delta


# ---------------- Parser: tokens -> tree ----------------
class Parser:
    """Builds the syntax tree and rewrites linear loops as it closes them.

    ``source`` is only used to render error messages. With ``optimize``
    off every loop stays a plain ``Loop``.
    """

    def __init__(self, source: str = '', optimize: bool = True):
        self.source = source
        self.optimize = optimize
        self.optimized_loops = 0

    def parse(self, tokens: Iterable[Token]) -> SyntaxTree:
        stack: List[List[Node]] = [[]]
        opens: List[int] = []

        for tok in tokens:
            kind = tok.kind
            if kind is TokenKind.LOOP_OPEN:
                stack.append([])
                opens.append(tok.position)
            elif kind is TokenKind.LOOP_CLOSE:
                if len(stack) == 1:
                    raise make_parse_error(kind='close', source=self.source, position=tok.position)
                opens.pop()
                body = pack(stack.pop())
                stack[-1].append(self._close_loop(body))
            elif kind is TokenKind.INC:
                stack[-1].append(Add(1))
            elif kind is TokenKind.DEC:
                stack[-1].append(Add(-1))
            elif kind is TokenKind.RIGHT:
                stack[-1].append(Move(1))
            elif kind is TokenKind.LEFT:
                stack[-1].append(Move(-1))
            elif kind is TokenKind.INPUT:
                stack[-1].append(Input())
            elif kind is TokenKind.OUTPUT:
                stack[-1].append(Output())

        if opens:
            raise make_parse_error(kind='open', source=self.source, position=opens[-1])
        return pack(stack[0])

    def _close_loop(self, body: List[Node]) -> Node:
        delta = analyze_linear_loop(body) if self.optimize else None
        if delta is None:
            return Loop(tuple(body))

        self.optimized_loops += 1
        target = tuple(AddUntilZeroArg(off, times) for off, times in delta.items() if off != 0)
        if not target:
            return Clear()
        return AddUntilZero(target)
