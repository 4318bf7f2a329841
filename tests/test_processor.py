"""
Tests for the virtual machine: states, dispatch, failure and loop rewriting.
"""

import random

import pytest

from bfvm.compiler import Compiler, compile
from bfvm.context import BufferInput, Context, EofPolicy
from bfvm.errors import AlreadyHalted, Empty, Failed, OutOfBound, Overflow, ProcessorMemoryError
from bfvm.instruction import Add, AddUntilZero, Halt, InstructionList, Seek
from bfvm.memory import BoundsPolicy, Memory, MemoryConfig, OverflowPolicy
from bfvm.parser import AddUntilZeroArg
from bfvm.processor import Counter, Processor, ProcessorState

STRICT = MemoryConfig(length=16, overflow=OverflowPolicy.ERROR, bounds=BoundsPolicy.ERROR)
WRAPPING = MemoryConfig(length=16, overflow=OverflowPolicy.WRAP, bounds=BoundsPolicy.WRAP)


def run(source, data=b"", config=STRICT, eof=EofPolicy.ZERO, optimize=True):
    context = Context.create(config, data, eof)
    processor = Processor(Compiler(optimize=optimize).compile(source))
    processor.run(context)
    return processor, context


def test_counter():
    counter = Counter()
    counter.tick()
    counter.tick()
    assert counter.get() == 2
    counter.jump(7)
    assert counter.get() == 7


def test_increment_and_output():
    processor, context = run("+++.", config=MemoryConfig(length=1))
    assert context.out_stream.values == [3]
    assert processor.state is ProcessorState.HALTED


def test_hello():
    source = "++++++++[>++++++++<-]>+.+."
    processor, context = run(source)
    assert context.out_stream.getvalue() == b"AB"
    assert processor.state is ProcessorState.HALTED


def test_echo_until_eof():
    _, context = run(",[.,]", data=b"echo")
    assert context.out_stream.getvalue() == b"echo"


def test_input_keep_on_eof():
    _, context = run("+++,.", eof=EofPolicy.KEEP)
    assert context.out_stream.values == [3]


def test_input_minus_one_on_eof_wraps():
    _, context = run(",.", config=WRAPPING, eof=EofPolicy.MINUS_ONE)
    assert context.out_stream.values == [255]


@pytest.mark.parametrize("cell_bits,top", [(8, 255), (16, 65535)])
def test_input_minus_one_on_strict_cells(cell_bits, top):
    """End of input never fails the run, whatever the overflow policy."""
    config = MemoryConfig(length=4, cell_bits=cell_bits, overflow=OverflowPolicy.ERROR)
    processor, context = run(",.", config=config, eof=EofPolicy.MINUS_ONE)
    assert context.out_stream.values == [top]
    assert processor.state is ProcessorState.HALTED


def test_empty_program():
    processor = Processor(compile(""))
    context = Context.create(STRICT)
    with pytest.raises(Empty):
        processor.run(context)
    with pytest.raises(Empty):
        processor.step(context)
    assert processor.state is ProcessorState.READY


def test_step_by_step_states():
    processor = Processor(compile("+>+"))
    context = Context.create(STRICT)
    assert processor.state is ProcessorState.READY
    processor.step(context)
    assert processor.state is ProcessorState.RUNNING
    assert processor.counter.get() == 1
    processor.step(context)
    processor.step(context)
    assert processor.state is ProcessorState.HALTED
    assert processor.steps == 3
    assert context.memory.snapshot(0, 2) == [1, 1]


def test_jump_into_halt_halts():
    processor = Processor(compile("[-.]"))
    context = Context.create(STRICT)
    processor.step(context)
    assert processor.state is ProcessorState.HALTED
    assert context.out_stream.values == []


def test_halted_processor_is_terminal():
    processor, context = run("+.")
    before = (context.memory.snapshot(), context.memory.pointer, list(context.out_stream.values))
    with pytest.raises(AlreadyHalted):
        processor.run(context)
    with pytest.raises(AlreadyHalted):
        processor.step(context)
    assert processor.state is ProcessorState.HALTED
    assert (context.memory.snapshot(), context.memory.pointer, context.out_stream.values) == before


def test_failed_processor_is_terminal():
    """A memory error fails the run; later calls fail without touching the context."""
    processor = Processor(compile("+.<+."))
    context = Context.create(STRICT)
    with pytest.raises(ProcessorMemoryError) as excinfo:
        processor.run(context)
    assert isinstance(excinfo.value.source, OutOfBound)
    assert excinfo.value.__cause__ is excinfo.value.source
    assert processor.state is ProcessorState.FAILED
    assert processor.counter.get() == 2

    before = (context.memory.snapshot(), context.memory.pointer, list(context.out_stream.values))
    with pytest.raises(Failed):
        processor.run(context)
    with pytest.raises(Failed):
        processor.step(context)
    assert (context.memory.snapshot(), context.memory.pointer, context.out_stream.values) == before
    assert context.out_stream.values == [1]


def test_overflow_fails_the_run():
    processor = Processor(compile("-"))
    with pytest.raises(ProcessorMemoryError) as excinfo:
        processor.run(Context.create(STRICT))
    assert isinstance(excinfo.value.source, Overflow)
    assert processor.state is ProcessorState.FAILED


def test_wrapping_tape_run():
    _, context = run("<+++.>>-.", config=WRAPPING)
    assert context.out_stream.values == [3, 255]
    assert context.memory.pointer == 1


def test_add_until_zero_is_noop_on_zero():
    processor = Processor(InstructionList([
        AddUntilZero((AddUntilZeroArg(100, 1),)),
        Halt(),
    ]))
    context = Context.create(STRICT)
    processor.run(context)
    assert processor.state is ProcessorState.HALTED


def test_add_until_zero_aborts_on_first_error():
    processor = Processor(InstructionList([
        Add(2),
        AddUntilZero((AddUntilZeroArg(1, 3), AddUntilZeroArg(-1, 1))),
        Halt(),
    ]))
    context = Context.create(STRICT)
    with pytest.raises(ProcessorMemoryError) as excinfo:
        processor.run(context)
    assert isinstance(excinfo.value.source, OutOfBound)
    assert context.memory.snapshot(0, 2) == [0, 6]
    assert processor.state is ProcessorState.FAILED


def test_seek_error_keeps_counter():
    processor = Processor(InstructionList([Seek(-1), Halt()]))
    with pytest.raises(ProcessorMemoryError):
        processor.step(Context.create(STRICT))
    assert processor.counter.get() == 0


def test_custom_streams():
    class Upper:
        def __init__(self):
            self.seen = []

        def write(self, value):
            self.seen.append(chr(value).upper())

    out = Upper()
    context = Context(Memory(STRICT), BufferInput(b"ab"), out)
    Processor(compile(",.,.")).run(context)
    assert out.seen == ["A", "B"]


# ---------------- Optimized loops versus plain loops ----------------
def preset(values, start):
    """Source that writes ``values`` to the tape and parks the pointer on ``start``."""
    return ">".join("+" * v for v in values) + "<" * (len(values) - 1 - start)


@pytest.mark.parametrize("loop", [
    "[-]",                  # pure clear
    "[->+<]",               # single offset
    "[->+++<]",             # single offset with multiplier
    "[->>++<<<->]",         # multi offset, both directions
    "[>+>---<<-]",          # multi offset, decrement last
    "[<+>->>-<<]",          # multi offset, decrement in the middle
])
def test_optimized_loop_matches_plain_loop(loop):
    """Same tape when both finish, same error kind when both fail."""
    configs = (
        WRAPPING,
        MemoryConfig(length=8),
        MemoryConfig(length=8, overflow=OverflowPolicy.ERROR, bounds=BoundsPolicy.ERROR),
    )
    rng = random.Random(loop)
    for _ in range(10):
        values = [rng.randrange(256) for _ in range(8)]
        source = preset(values, 3) + loop
        for config in configs:
            assert outcome(source, config, optimize=True) == outcome(source, config, optimize=False)


def outcome(source, config, optimize):
    context = Context.create(config)
    processor = Processor(Compiler(optimize=optimize).compile(source))
    try:
        processor.run(context)
    except ProcessorMemoryError as e:
        return type(e.source).__name__, None
    return "ok", (context.memory.snapshot(), context.memory.pointer)


def test_strict_cells_reject_excursions_past_the_net_change():
    """A cell bumped to 256 mid-pass fails the run even if the pass undoes it."""
    source = preset([1, 255], 0) + "[->+>+<-<]"
    config = MemoryConfig(length=4, overflow=OverflowPolicy.ERROR)
    assert outcome(source, config, optimize=True) == ("Overflow", None)
    assert outcome(source, config, optimize=False) == ("Overflow", None)


@pytest.mark.parametrize("start", [2, 4, 100])
def test_offset_wrapping_onto_start_cell(start):
    """On a wrapping tape an offset equal to the tape length hits the start cell."""
    source = "+" * start + "[->>>-<<<]"
    config = MemoryConfig(length=3, bounds=BoundsPolicy.WRAP)
    assert isinstance(compile(source)[1], AddUntilZero)
    assert outcome(source, config, optimize=True) == ("ok", ([0, 0, 0], 0))
    assert outcome(source, config, optimize=False) == ("ok", ([0, 0, 0], 0))


def test_optimized_loop_compiles_to_single_instruction():
    assert len(compile("[->+<]")) == 2
    assert len(Compiler(optimize=False).compile("[->+<]")) == 7


def test_optimized_loop_fails_like_plain_loop():
    """Both forms fail on the same kind of error under a strict tape."""
    source = "+[-<+>]"
    for optimize in (True, False):
        processor = Processor(Compiler(optimize=optimize).compile(source))
        with pytest.raises(ProcessorMemoryError) as excinfo:
            processor.run(Context.create(STRICT))
        assert isinstance(excinfo.value.source, OutOfBound)
