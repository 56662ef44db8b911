from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

import numpy as np
from numba import njit

from .errors import EndOfInput, StepLimitExceeded, TapeOverflow, TapeUnderflow
from .ir import Instruction, Operator, encode
from .streams import BufferSink, ByteSink, ByteSource, BytesSource

logger = logging.getLogger(__name__)

DEFAULT_TAPE_SIZE = 30000

# Kernel stop reasons
STOP_HALT = 0
STOP_OUTPUT = 1
STOP_INPUT = 2
STOP_STEP_LIMIT = 3
STOP_UNDERFLOW = 4
STOP_OVERFLOW = 5

_SHL = int(Operator.MOVE_LEFT)
_SHR = int(Operator.MOVE_RIGHT)
_INC = int(Operator.INCREMENT)
_DEC = int(Operator.DECREMENT)
_OUT = int(Operator.OUTPUT)
_IN = int(Operator.INPUT)
_JZ = int(Operator.JUMP_IF_ZERO)
_JNZ = int(Operator.JUMP_IF_NONZERO)


@njit(cache=True)
def run_kernel(opcodes, operands, tape, pc, dp, budget):
    """
    Execute instructions until the program ends or Python has to take over.

    Stops *before* executing an OUTPUT/INPUT instruction, and before a move
    that would leave the tape (tape and pointer are left untouched).
    A negative budget means no step limit.

    Returns (pc, dp, stop_reason, steps).
    """
    prog_len = len(opcodes)
    tape_len = len(tape)
    steps = 0
    stop_reason = STOP_HALT

    while pc < prog_len:
        if budget >= 0 and steps >= budget:
            stop_reason = STOP_STEP_LIMIT
            break

        command = opcodes[pc]
        n = operands[pc]

        if command == _SHR:
            if dp + n >= tape_len:
                stop_reason = STOP_OVERFLOW
                break
            dp += n
        elif command == _SHL:
            if dp < n:
                stop_reason = STOP_UNDERFLOW
                break
            dp -= n
        elif command == _INC:
            tape[dp] = (np.int64(tape[dp]) + n) & 255
        elif command == _DEC:
            tape[dp] = (np.int64(tape[dp]) - n) & 255
        elif command == _OUT:
            stop_reason = STOP_OUTPUT
            break
        elif command == _IN:
            stop_reason = STOP_INPUT
            break
        elif command == _JZ:
            if tape[dp] == 0:
                pc = n
                steps += 1
                continue
        elif command == _JNZ:
            if tape[dp] != 0:
                pc = n
                steps += 1
                continue

        pc += 1
        steps += 1

    return pc, dp, stop_reason, steps


class EOFPolicy(str, Enum):
    """What an INPUT instruction does when the source is exhausted."""

    ERROR = "error"
    ZERO = "zero"


class VirtualMachine:
    """Owns the tape and both registers for one program run."""

    def __init__(
        self,
        tape_size: int = DEFAULT_TAPE_SIZE,
        *,
        source: Optional[ByteSource] = None,
        sink: Optional[ByteSink] = None,
        eof: EOFPolicy = EOFPolicy.ERROR,
        max_steps: Optional[int] = None,
    ) -> None:
        if tape_size < 1:
            raise ValueError(f"tape_size must be at least 1, got {tape_size}")
        if max_steps is not None and max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")
        self.tape_size = int(tape_size)
        self.source = source if source is not None else BytesSource()
        self.sink = sink if sink is not None else BufferSink()
        self.eof = EOFPolicy(eof)
        self.max_steps = max_steps
        self.reset()

    def reset(self) -> None:
        self.tape = np.zeros(self.tape_size, dtype=np.uint8)
        self.dp = 0
        self.pc = 0
        self.steps = 0

    def execute(self, instructions: Sequence[Instruction]) -> None:
        self.reset()
        opcodes, operands = encode(instructions)
        logger.info("executing %d instructions on a %d-cell tape", len(opcodes), self.tape_size)

        while True:
            budget = -1 if self.max_steps is None else self.max_steps - self.steps
            pc, dp, stop_reason, steps = run_kernel(opcodes, operands, self.tape, self.pc, self.dp, budget)
            self.pc = int(pc)
            self.dp = int(dp)
            self.steps += int(steps)
            logger.debug("kernel stopped: reason=%d pc=%d dp=%d steps=%d",
                         stop_reason, self.pc, self.dp, self.steps)

            if stop_reason == STOP_HALT:
                break
            if stop_reason == STOP_OUTPUT:
                self._output(int(operands[self.pc]))
            elif stop_reason == STOP_INPUT:
                self._input(int(operands[self.pc]))
            else:
                raise self._fault(stop_reason, int(operands[self.pc]))
            self.pc += 1
            self.steps += 1

        logger.info("halted after %d steps", self.steps)

    def _output(self, count: int) -> None:
        value = int(self.tape[self.dp])
        for _ in range(count):
            self.sink.write_byte(value)

    def _input(self, count: int) -> None:
        for _ in range(count):
            value = self.source.read_byte()
            if value is None:
                if self.eof is EOFPolicy.ERROR:
                    raise EndOfInput(
                        message=f"end of input at instruction {self.pc}",
                        pc=self.pc,
                        data_pointer=self.dp,
                    )
                value = 0
            self.tape[self.dp] = value

    def _fault(self, stop_reason: int, amount: int):
        if stop_reason == STOP_UNDERFLOW:
            return TapeUnderflow(
                message=f"data pointer underflow: cannot move left {amount} from cell {self.dp} "
                        f"(instruction {self.pc})",
                pc=self.pc,
                data_pointer=self.dp,
                amount=amount,
            )
        if stop_reason == STOP_OVERFLOW:
            return TapeOverflow(
                message=f"data pointer overflow: cannot move right {amount} from cell {self.dp} "
                        f"on a {self.tape_size}-cell tape (instruction {self.pc})",
                pc=self.pc,
                data_pointer=self.dp,
                amount=amount,
                tape_size=self.tape_size,
            )
        return StepLimitExceeded(
            message=f"step limit of {self.max_steps} exceeded (instruction {self.pc})",
            pc=self.pc,
            data_pointer=self.dp,
            max_steps=self.max_steps if self.max_steps is not None else 0,
        )


def execute(
    instructions: Sequence[Instruction],
    tape_size: int = DEFAULT_TAPE_SIZE,
    *,
    source: Optional[ByteSource] = None,
    sink: Optional[ByteSink] = None,
    eof: EOFPolicy = EOFPolicy.ERROR,
    max_steps: Optional[int] = None,
) -> VirtualMachine:
    vm = VirtualMachine(tape_size, source=source, sink=sink, eof=eof, max_steps=max_steps)
    vm.execute(instructions)
    return vm
