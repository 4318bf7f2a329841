from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


def _line_and_column(source: str, position: int) -> Tuple[int, int]:
    line = source.count('\n', 0, position) + 1
    start = source.rfind('\n', 0, position) + 1
    return line, position - start + 1


def _build_context(lines: List[str], line_no_1: int, column: int, *, context: int = 1) -> str:
    idx = max(1, min(line_no_1, len(lines)))
    start = max(1, idx - context)

    out: List[str] = []
    for i in range(start, idx + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
    out.append(f"  {'':4s} | {' ' * (column - 1)}^")
    return "\n".join(out)


def _hint_for(kind: str) -> Optional[str]:
    if kind == 'open':
        return 'Every "[" needs a matching "]" later in the program.'
    if kind == 'close':
        return 'This "]" closes nothing. Remove it or add a "[" before it.'
    return None


@dataclass
class BFVMError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ParseError(BFVMError):
    position: int
    line: int = 0
    column: int = 0
    context: str = ''


class UnmatchedOpenBracket(ParseError):
    pass


class UnmatchedCloseBracket(ParseError):
    pass


def make_parse_error(*, kind: str, source: str, position: int) -> ParseError:
    """Build a bracket error pointing at ``position`` in ``source``.

    ``kind`` is ``'open'`` for a loop that is never closed and ``'close'``
    for a stray loop end.
    """
    if kind == 'open':
        cls, what = UnmatchedOpenBracket, "unmatched '['"
    else:
        cls, what = UnmatchedCloseBracket, "unmatched ']'"

    line, column = _line_and_column(source, position)
    ctx = _build_context(source.split('\n'), line, column)
    hint = _hint_for(kind)
    hint_block = f"\nHint: {hint}" if hint else ""
    return cls(
        message=f"ParseError: {what} (line {line}, column {column})\n{ctx}{hint_block}",
        position=position,
        line=line,
        column=column,
        context=ctx,
    )


@dataclass
class TapeError(BFVMError):
    """Invalid tape access under a strict policy.

    The tape is left exactly as it was before the failing call.
    """

    pointer: int


class OutOfBound(TapeError):
    pass


class Overflow(TapeError):
    pass


class ProcessorError(BFVMError):
    pass


@dataclass
class ProcessorMemoryError(ProcessorError):
    source: TapeError


class AlreadyHalted(ProcessorError):
    pass


class Failed(ProcessorError):
    pass


class Empty(ProcessorError):
    pass
