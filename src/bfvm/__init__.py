from .api import RunOptions, RunResult, compile_file, compile_string, run_file, run_string
from .compiler import IRCompiler, compile_source
from .errors import (
    BFVMError,
    EndOfInput,
    StepLimitExceeded,
    TapeOverflow,
    TapeUnderflow,
    UnbalancedLoopError,
    VMError,
)
from .ir import Instruction, Operator, format_listing
from .vm import EOFPolicy, VirtualMachine, execute

__all__ = [
    'IRCompiler',
    'compile_source',
    'Instruction',
    'Operator',
    'format_listing',
    'VirtualMachine',
    'EOFPolicy',
    'execute',
    'BFVMError',
    'UnbalancedLoopError',
    'VMError',
    'TapeUnderflow',
    'TapeOverflow',
    'EndOfInput',
    'StepLimitExceeded',
    'RunOptions',
    'RunResult',
    'compile_string',
    'compile_file',
    'run_string',
    'run_file',
]
