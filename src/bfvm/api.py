from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .compiler import Compiler
from .context import Context, EofPolicy
from .instruction import InstructionList
from .memory import Memory, MemoryConfig
from .processor import Processor


@dataclass(frozen=True)
class RunOptions:
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    eof: EofPolicy = EofPolicy.ZERO
    optimize: bool = True


@dataclass(frozen=True)
class CompileResult:
    instructions: InstructionList
    optimized_loops: int


@dataclass(frozen=True)
class RunResult:
    output: bytes
    memory: Memory
    processor: Processor


def compile_string(source: str, *, optimize: bool = True) -> CompileResult:
    compiler = Compiler(optimize=optimize)
    instructions = compiler.compile(source)
    return CompileResult(instructions=instructions, optimized_loops=compiler.optimized_loops)


def compile_file(path: str | Path, *, optimize: bool = True, encoding: str = "utf-8") -> CompileResult:
    p = Path(path)
    return compile_string(p.read_text(encoding=encoding), optimize=optimize)


def run_string(source: str, data: bytes = b"", *, options: Optional[RunOptions] = None) -> RunResult:
    """Compile and run ``source`` on a fresh buffered context.

    Parse and processor errors propagate unchanged.
    """
    options = options if options is not None else RunOptions()
    result = compile_string(source, optimize=options.optimize)
    context = Context.create(options.memory, data, options.eof)
    processor = Processor(result.instructions)
    processor.run(context)
    return RunResult(output=context.out_stream.getvalue(), memory=context.memory, processor=processor)


def run_file(path: str | Path, data: bytes = b"", *, options: Optional[RunOptions] = None,
             encoding: str = "utf-8") -> RunResult:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding), data, options=options)
