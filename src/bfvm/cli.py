from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .compiler import Compiler
from .context import Context, EofPolicy, StreamInput, StreamOutput
from .errors import BFVMError
from .memory import BoundsPolicy, Memory, MemoryConfig, OverflowPolicy
from .processor import Processor


def init_logging(verbose: bool = False) -> None:
    root = logging.getLogger('bfvm')
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)5s %(name)s: %(message)s"))
        root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfvm",
        description="Compile and run a Brainfuck program on a bounded tape.",
    )
    parser.add_argument("file", help="Program source file")
    parser.add_argument("--tape-length", type=int, default=30000, help="Number of cells (default 30000)")
    parser.add_argument("--cell-bits", type=int, choices=(8, 16, 32), default=8, help="Cell width in bits")
    parser.add_argument("--overflow", choices=[p.value for p in OverflowPolicy], default="wrap",
                        help="Cell arithmetic outside the cell range: wrap around or fail")
    parser.add_argument("--bounds", choices=[p.value for p in BoundsPolicy], default="error",
                        help="Pointer moves past either end: wrap around or fail")
    parser.add_argument("--eof", choices=[p.value for p in EofPolicy], default="zero",
                        help="What ',' stores once input is exhausted")
    parser.add_argument("--no-optimize", action="store_true", help="Keep every loop as plain jumps")
    parser.add_argument("--dump", action="store_true", help="Print the compiled instructions and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(args.verbose)

    try:
        with open(args.file, 'r', encoding='utf-8') as f:
            source = f.read()
    except OSError as e:
        print(f"Couldn't read {args.file}: {e.strerror}", file=sys.stderr)
        return 1

    try:
        config = MemoryConfig(
            length=args.tape_length,
            cell_bits=args.cell_bits,
            overflow=OverflowPolicy(args.overflow),
            bounds=BoundsPolicy(args.bounds),
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        instructions = Compiler(optimize=not args.no_optimize).compile(source)
        if args.dump:
            print(instructions.dump())
            return 0

        context = Context(
            Memory(config),
            StreamInput(sys.stdin.buffer, EofPolicy(args.eof)),
            StreamOutput(sys.stdout.buffer, flush=True),
        )
        Processor(instructions).run(context)
    except BFVMError as e:
        print(e, file=sys.stderr)
        return 1
    return 0
