from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence, Tuple

import numpy as np


# ---------------- Operators ----------------
class Operator(IntEnum):
    """The eight primitive actions, valued by their source character code."""

    MOVE_LEFT = 60  # '<'
    MOVE_RIGHT = 62  # '>'
    INCREMENT = 43  # '+'
    DECREMENT = 45  # '-'
    OUTPUT = 46  # '.'
    INPUT = 44  # ','
    JUMP_IF_ZERO = 91  # '['
    JUMP_IF_NONZERO = 93  # ']'

    @classmethod
    def from_char(cls, ch: str) -> Optional["Operator"]:
        if len(ch) != 1:
            return None
        try:
            return cls(ord(ch))
        except ValueError:
            return None

    @property
    def mnemonic(self) -> str:
        return _MNEMONICS[self]

    @property
    def is_jump(self) -> bool:
        return self in (Operator.JUMP_IF_ZERO, Operator.JUMP_IF_NONZERO)


_MNEMONICS = {
    Operator.MOVE_LEFT: "OP_SHL",
    Operator.MOVE_RIGHT: "OP_SHR",
    Operator.INCREMENT: "OP_INC",
    Operator.DECREMENT: "OP_DEC",
    Operator.OUTPUT: "OP_OUT",
    Operator.INPUT: "OP_IN",
    Operator.JUMP_IF_ZERO: "OP_JZ",
    Operator.JUMP_IF_NONZERO: "OP_JNZ",
}


# ---------------- Instructions ----------------
@dataclass(frozen=True)
class Instruction:
    opcode: Operator
    operand: int  # repeat count, or jump address for the two jumps

    def __str__(self) -> str:
        return f"{self.opcode.mnemonic}\t{self.operand}"


def format_listing(instructions: Sequence[Instruction]) -> str:
    width = max(4, len(str(len(instructions))))
    return "\n".join(f"{addr:>{width}d}  {inst}" for addr, inst in enumerate(instructions))


def encode(instructions: Sequence[Instruction]) -> Tuple[np.ndarray, np.ndarray]:
    """Pack an instruction sequence into parallel (opcode, operand) arrays for the kernel."""
    opcodes = np.array([int(inst.opcode) for inst in instructions], dtype=np.int32)
    operands = np.array([inst.operand for inst in instructions], dtype=np.int64)
    return opcodes, operands

