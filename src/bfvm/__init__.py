from .api import CompileResult, RunOptions, RunResult, compile_file, compile_string, run_file, run_string
from .compiler import Compiler, compile
from .context import BufferInput, BufferOutput, Context, EofPolicy, StreamInput, StreamOutput
from .errors import (
    AlreadyHalted,
    BFVMError,
    Empty,
    Failed,
    OutOfBound,
    Overflow,
    ParseError,
    ProcessorError,
    ProcessorMemoryError,
    TapeError,
    UnmatchedCloseBracket,
    UnmatchedOpenBracket,
)
from .instruction import InstructionList
from .lexer import Token, TokenKind, build_token_list
from .memory import BoundsPolicy, Memory, MemoryConfig, OverflowPolicy
from .processor import Processor, ProcessorState

__all__ = [
    'AlreadyHalted',
    'BFVMError',
    'BoundsPolicy',
    'BufferInput',
    'BufferOutput',
    'CompileResult',
    'Compiler',
    'Context',
    'Empty',
    'EofPolicy',
    'Failed',
    'InstructionList',
    'Memory',
    'MemoryConfig',
    'OutOfBound',
    'Overflow',
    'OverflowPolicy',
    'ParseError',
    'Processor',
    'ProcessorError',
    'ProcessorMemoryError',
    'ProcessorState',
    'RunOptions',
    'RunResult',
    'StreamInput',
    'StreamOutput',
    'TapeError',
    'Token',
    'TokenKind',
    'UnmatchedCloseBracket',
    'UnmatchedOpenBracket',
    'build_token_list',
    'compile',
    'compile_file',
    'compile_string',
    'run_file',
    'run_string',
]
