from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from .context import Context
from .errors import AlreadyHalted, Empty, Failed, ProcessorMemoryError, TapeError
from .instruction import (
    Add,
    AddUntilZero,
    Clear,
    Halt,
    Input,
    InstructionList,
    Jump,
    JumpIfZero,
    Output,
    Seek,
)
from .memory import BoundsPolicy, Memory
from .parser import AddUntilZeroArg

logger = logging.getLogger(__name__)


class ProcessorState(Enum):
    READY = 'ready'
    RUNNING = 'running'
    HALTED = 'halted'
    FAILED = 'failed'


class Counter:
    def __init__(self):
        self.val = 0

    def tick(self) -> None:
        self.val += 1

    def jump(self, target: int) -> None:
        self.val = target

    def get(self) -> int:
        return self.val


class Processor:
    """Executes an ``InstructionList`` against a ``Context``.

    ``HALTED`` and ``FAILED`` are terminal. A failed processor cannot be
    resumed; build a new one from the same instructions to run again.
    """

    def __init__(self, instructions: InstructionList):
        self.counter = Counter()
        self.instructions = instructions
        self.state = ProcessorState.READY
        self.steps = 0

    def _abort(self, err: TapeError) -> ProcessorMemoryError:
        self.state = ProcessorState.FAILED
        pc = self.counter.get()
        logger.debug("processor failed at instruction %d: %s", pc, err)
        return ProcessorMemoryError(
            message=f"invalid memory operation at instruction {pc}: {err}",
            source=err,
        )

    def _tick(self) -> None:
        self.counter.tick()
        self._check_halted()

    def _check_halted(self) -> None:
        if isinstance(self.instructions[self.counter.get()], Halt):
            self.state = ProcessorState.HALTED

    def _check_runnable(self) -> None:
        if self.state is ProcessorState.HALTED:
            raise AlreadyHalted(message="all instructions have already finished")
        if self.state is ProcessorState.FAILED:
            raise Failed(message="couldn't continue to run due to the previous error")

    def step(self, context: Context) -> None:
        self._check_runnable()

        ins = self.instructions[self.counter.get()]
        if isinstance(ins, Halt):
            # Only a Halt-only program can still be READY on its sentinel.
            raise Empty(message="empty program loaded")

        memory = context.memory
        try:
            if isinstance(ins, Add):
                memory.add(ins.val)
                self._tick()
            elif isinstance(ins, Seek):
                memory.seek(ins.offset)
                self._tick()
            elif isinstance(ins, Clear):
                memory.set(0)
                self._tick()
            elif isinstance(ins, AddUntilZero):
                self._add_until_zero(ins.target, memory)
                self._tick()
            elif isinstance(ins, Input):
                value = context.in_stream.read()
                if value is not None:
                    memory.set(value % memory.config.cell_size)
                self._tick()
            elif isinstance(ins, Output):
                context.out_stream.write(memory.get())
                self._tick()
            elif isinstance(ins, Jump):
                self.counter.jump(ins.target)
                self._check_halted()
            elif isinstance(ins, JumpIfZero):
                if memory.get() == 0:
                    self.counter.jump(ins.target)
                    self._check_halted()
                else:
                    self._tick()
            else:
                raise TypeError(f"Unknown instruction: {ins!r}")
        except TapeError as e:
            raise self._abort(e) from e

        self.steps += 1
        if self.state is ProcessorState.READY:
            self.state = ProcessorState.RUNNING

    def _add_until_zero(self, target: Iterable[AddUntilZeroArg], memory: Memory) -> None:
        if memory.config.bounds is BoundsPolicy.WRAP and any(arg.offset % len(memory) == 0 for arg in target):
            # An offset wraps onto the start cell: replay one pass at a time.
            while memory.get() != 0:
                memory.add(-1)
                for arg in target:
                    memory.seek(arg.offset)
                    memory.add(arg.times)
                    memory.seek(-arg.offset)
            return

        val = memory.get()
        if val == 0:
            return

        memory.set(0)
        for arg in target:
            memory.seek(arg.offset)
            memory.add(val * arg.times)
            memory.seek(-arg.offset)

    def run(self, context: Context) -> None:
        if self.state is ProcessorState.READY and len(self.instructions) == 1:
            raise Empty(message="empty program loaded")
        self._check_runnable()

        while self.state in (ProcessorState.READY, ProcessorState.RUNNING):
            self.step(context)

        logger.debug("processor halted after %d steps", self.steps)
