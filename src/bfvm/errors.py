from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


def _build_context(lines: List[str], line_no_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
    return "\n".join(out)


def _hint_for(message: str) -> Optional[str]:
    msg = message.lower()
    if 'unmatched closing' in msg:
        return 'Every "]" needs an earlier "[" to close. Remove the extra "]" or add the missing "[".'
    if 'unmatched opening' in msg:
        return 'The loop opened here is never closed. Add the missing "]".'
    return None


def _line_col(source: str, position: int) -> tuple:
    line = source.count('\n', 0, position) + 1
    column = position - (source.rfind('\n', 0, position) + 1) + 1
    return line, column


@dataclass(eq=False)
class BFVMError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class UnbalancedLoopError(BFVMError):
    position: int
    line: int
    column: int
    context: str


@dataclass(eq=False)
class VMError(BFVMError):
    pc: int
    data_pointer: int


@dataclass(eq=False)
class TapeUnderflow(VMError):
    amount: int


@dataclass(eq=False)
class TapeOverflow(VMError):
    amount: int
    tape_size: int


@dataclass(eq=False)
class EndOfInput(VMError):
    pass


@dataclass(eq=False)
class StepLimitExceeded(VMError):
    max_steps: int


def make_unbalanced_error(*, message: str, source: str, position: int) -> UnbalancedLoopError:
    line, column = _line_col(source, position)
    ctx = _build_context(source.split('\n'), line)
    hint = _hint_for(message)
    hint_block = f"\nHint: {hint}" if hint else ""
    return UnbalancedLoopError(
        message=f"UnbalancedLoopError: {message} (line {line}, column {column})\n{ctx}{hint_block}",
        position=position,
        line=line,
        column=column,
        context=ctx,
    )
