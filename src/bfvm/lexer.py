from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List


class TokenKind(Enum):
    INC = '+'
    DEC = '-'
    LEFT = '<'
    RIGHT = '>'
    INPUT = ','
    OUTPUT = '.'
    LOOP_OPEN = '['
    LOOP_CLOSE = ']'


_SYMBOLS = {kind.value: kind for kind in TokenKind}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    position: int  # character offset in the source


def build_token_list(source: str) -> List[Token]:
    """Scan ``source`` into command tokens; anything else is a comment."""
    return [Token(_SYMBOLS[ch], pos) for pos, ch in enumerate(source) if ch in _SYMBOLS]
