from __future__ import annotations

import io
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np

from .errors import make_step_limit, make_tape_underflow
from .ir import Add, Input, Loop, Multiply, Node, Output, Program, SetZero, Shift
from .logger import INTERP_LOG

INITIAL_TAPE_SIZE = 32768  # 2^15, doubled on demand


class Tape:
    """Unbounded-right byte tape backed by a numpy uint8 buffer."""

    def __init__(self, size: int = INITIAL_TAPE_SIZE):
        self.memory = np.zeros(size, dtype=np.uint8)
        self.high = -1  # highest materialized cell

    def _ensure(self, index: int) -> None:
        if index < 0:
            raise make_tape_underflow(index)
        size = len(self.memory)
        if index >= size:
            while size <= index:
                size *= 2
            grown = np.zeros(size, dtype=np.uint8)
            grown[:len(self.memory)] = self.memory
            self.memory = grown
        if index > self.high:
            self.high = index

    def get(self, index: int) -> int:
        if index < 0:
            raise make_tape_underflow(index)
        if index >= len(self.memory):
            return 0
        return int(self.memory[index])

    def set(self, index: int, value: int) -> None:
        self._ensure(index)
        self.memory[index] = value & 0xFF

    def add(self, index: int, delta: int) -> None:
        self._ensure(index)
        self.memory[index] = (int(self.memory[index]) + delta) & 0xFF

    def snapshot(self) -> bytes:
        """Cell contents up to the last nonzero cell."""
        return self.memory[:self.high + 1].tobytes().rstrip(b"\0")


# ---------------- I/O streams ----------------
class BytesInput:
    """Literal input; end of data reads as EOF."""

    def __init__(self, data: Union[bytes, str] = b""):
        if isinstance(data, str):
            data = data.encode("latin-1")
        self._data = bytes(data)
        self._pos = 0

    def read_byte(self) -> Optional[int]:
        if self._pos >= len(self._data):
            return None
        value = self._data[self._pos]
        self._pos += 1
        return value


class StreamInput:
    """Pulls bytes one at a time from a binary or text file object."""

    def __init__(self, stream):
        self.stream = stream

    def read_byte(self) -> Optional[int]:
        chunk = self.stream.read(1)
        if not chunk:
            return None
        if isinstance(chunk, str):
            return ord(chunk) & 0xFF
        return chunk[0]


class BufferOutput:
    def __init__(self):
        self._buf = bytearray()

    def write_byte(self, value: int) -> None:
        self._buf.append(value)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class StreamOutput:
    def __init__(self, stream, flush: bool = True):
        self.stream = stream
        self.flush = flush
        self._text = isinstance(stream, io.TextIOBase)

    def write_byte(self, value: int) -> None:
        if self._text:
            self.stream.write(chr(value))
        else:
            self.stream.write(bytes([value]))
        if self.flush:
            self.stream.flush()


@dataclass(frozen=True)
class ExecutionResult:
    output: bytes  # empty when a streaming sink consumed the bytes
    tape: bytes
    pointer: int
    steps: int


# ---------------- Execution engine ----------------
class Interpreter:
    """
    Executes a Program against a fresh tape.

    Loops are run with an explicit frame stack, one [nodes, position] frame
    per active loop level. A frame whose body is exhausted is popped and the
    parent, still positioned on the Loop node, re-checks the condition.
    """

    def __init__(self, program: Program, input=None, output=None, max_steps: Optional[int] = None):
        self.program = tuple(program)
        if input is None or isinstance(input, (bytes, bytearray, str)):
            input = BytesInput(input or b"")
        self.input = input
        self.output = output if output is not None else BufferOutput()
        self.max_steps = max_steps
        self.tape = Tape()
        self.pointer = 0
        self.steps = 0
        self.last_output: Optional[int] = None

    def _execute(self, n: Node) -> None:
        tape = self.tape
        if isinstance(n, Add):
            tape.add(self.pointer + n.offset, n.delta)
        elif isinstance(n, Shift):
            target = self.pointer + n.delta
            if target < 0:
                raise make_tape_underflow(target)
            self.pointer = target
        elif isinstance(n, Output):
            value = tape.get(self.pointer)
            self.last_output = value
            self.output.write_byte(value)
        elif isinstance(n, Input):
            value = self.input.read_byte()
            tape.set(self.pointer, 0 if value is None else value)
        elif isinstance(n, SetZero):
            tape.set(self.pointer, 0)
        elif isinstance(n, Multiply):
            value = tape.get(self.pointer)
            if value:
                for off, factor in n.factors:
                    tape.add(self.pointer + off, value * factor)
                tape.set(self.pointer, 0)
        else:
            raise TypeError(f"Unknown IR node: {n!r}")

    def run(self) -> ExecutionResult:
        frames: List[list] = [[self.program, 0]]
        while frames:
            frame = frames[-1]
            nodes, pc = frame
            if pc >= len(nodes):
                frames.pop()
                continue

            self.steps += 1
            if self.max_steps is not None and self.steps > self.max_steps:
                raise make_step_limit(self.max_steps)

            n = nodes[pc]
            if isinstance(n, Loop):
                if self.tape.get(self.pointer) != 0:
                    frames.append([n.body, 0])
                else:
                    frame[1] = pc + 1
                continue

            frame[1] = pc + 1
            self._execute(n)

        INTERP_LOG.debug("halted after %d steps, pointer at %d", self.steps, self.pointer)
        return ExecutionResult(
            output=self.output.getvalue() if isinstance(self.output, BufferOutput) else b"",
            tape=self.tape.snapshot(),
            pointer=self.pointer,
            steps=self.steps,
        )


def run(program: Program, input=b"", output=None, max_steps: Optional[int] = None) -> ExecutionResult:
    return Interpreter(program, input=input, output=output, max_steps=max_steps).run()
