from __future__ import annotations

import logging

from .instruction import InstructionList
from .lexer import build_token_list
from .parser import Parser

logger = logging.getLogger(__name__)


class Compiler:
    def __init__(self, optimize: bool = True):
        self.optimize = optimize
        self.optimized_loops = 0

    def compile(self, source: str) -> InstructionList:
        """Compile ``source`` into a jump-resolved program.

        Raises ``ParseError`` on unbalanced loops; nothing is returned
        in that case.
        """
        tokens = build_token_list(source)
        parser = Parser(source, optimize=self.optimize)
        tree = parser.parse(tokens)
        instructions = InstructionList.compile(tree)
        self.optimized_loops = parser.optimized_loops
        logger.debug(
            "compiled %d tokens into %d instructions (%d loops optimized)",
            len(tokens), len(instructions), parser.optimized_loops,
        )
        return instructions


def compile(source: str) -> InstructionList:
    return Compiler().compile(source)
