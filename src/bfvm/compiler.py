from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .errors import make_unbalanced_error
from .ir import Instruction, Operator

logger = logging.getLogger(__name__)


@dataclass
class CompilerState:
    instructions: List[Instruction] = field(default_factory=list)
    # address of each open JUMP_IF_ZERO, with the source position of its '['
    bracket_stack: List[int] = field(default_factory=list)
    bracket_positions: List[int] = field(default_factory=list)
    loops: int = 0

    def reset(self) -> None:
        self.instructions.clear()
        self.bracket_stack.clear()
        self.bracket_positions.clear()
        self.loops = 0


class IRCompiler:
    """Single-pass compiler from operator text to a flat instruction list.

    Runs of identical non-loop operators fold into one instruction whose
    operand is the run length. Loop brackets become JUMP_IF_ZERO /
    JUMP_IF_NONZERO pairs; the opener is emitted with a placeholder operand
    and backpatched once its closer is seen.
    """

    def __init__(self) -> None:
        self.state = CompilerState()

    def compile(self, source: str) -> List[Instruction]:
        self.state.reset()
        state = self.state
        length = len(source)
        ptr = 0

        while ptr < length:
            ch = source[ptr]
            op = Operator.from_char(ch)
            if op is None:
                ptr += 1
            elif not op.is_jump:
                start = ptr
                ptr += 1
                while ptr < length and source[ptr] == ch:
                    ptr += 1
                state.instructions.append(Instruction(op, ptr - start))
            elif op is Operator.JUMP_IF_ZERO:
                state.bracket_stack.append(len(state.instructions))
                state.bracket_positions.append(ptr)
                state.instructions.append(Instruction(Operator.JUMP_IF_ZERO, 0))
                ptr += 1
            else:
                self._close_loop(source, ptr)
                ptr += 1

        if state.bracket_stack:
            raise make_unbalanced_error(
                message='unmatched opening bracket',
                source=source,
                position=state.bracket_positions[-1],
            )

        logger.debug("compiled %d chars into %d instructions (%d loops)",
                     length, len(state.instructions), state.loops)
        return list(state.instructions)

    def _close_loop(self, source: str, position: int) -> None:
        state = self.state
        if not state.bracket_stack:
            raise make_unbalanced_error(
                message='unmatched closing bracket',
                source=source,
                position=position,
            )
        open_addr = state.bracket_stack.pop()
        state.bracket_positions.pop()
        # skip the opener when jumping back into the body
        state.instructions.append(Instruction(Operator.JUMP_IF_NONZERO, open_addr + 1))
        state.instructions[open_addr] = Instruction(Operator.JUMP_IF_ZERO, len(state.instructions))
        state.loops += 1


def compile_source(source: str) -> List[Instruction]:
    return IRCompiler().compile(source)
