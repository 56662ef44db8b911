from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .compiler import compile_source
from .ir import Instruction
from .streams import BufferSink, BytesSource
from .vm import DEFAULT_TAPE_SIZE, EOFPolicy, VirtualMachine


@dataclass(frozen=True)
class RunOptions:
    tape_size: int = DEFAULT_TAPE_SIZE
    eof: EOFPolicy = EOFPolicy.ERROR
    max_steps: Optional[int] = None

    def __post_init__(self) -> None:
        if self.tape_size < 1:
            raise ValueError(f"tape_size must be at least 1, got {self.tape_size}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps}")
        object.__setattr__(self, "eof", EOFPolicy(self.eof))


@dataclass(frozen=True)
class RunResult:
    output: bytes
    tape: bytes
    data_pointer: int
    steps: int


def compile_string(source: str) -> List[Instruction]:
    return compile_source(source)


def compile_file(path: str | Path, *, encoding: str = "utf-8") -> List[Instruction]:
    p = Path(path)
    return compile_string(p.read_text(encoding=encoding))


def run_string(source: str, *, input_data: bytes = b"", options: Optional[RunOptions] = None) -> RunResult:
    opts = options if options is not None else RunOptions()
    instructions = compile_source(source)
    sink = BufferSink()
    vm = VirtualMachine(
        opts.tape_size,
        source=BytesSource(input_data),
        sink=sink,
        eof=opts.eof,
        max_steps=opts.max_steps,
    )
    vm.execute(instructions)
    return RunResult(
        output=sink.getvalue(),
        tape=vm.tape.tobytes(),
        data_pointer=vm.dp,
        steps=vm.steps,
    )


def run_file(
    path: str | Path,
    *,
    input_data: bytes = b"",
    options: Optional[RunOptions] = None,
    encoding: str = "utf-8",
) -> RunResult:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding), input_data=input_data, options=options)
