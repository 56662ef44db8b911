from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .compiler import compile_source
from .errors import BFVMError
from .ir import format_listing
from .streams import StreamSink, StreamSource
from .vm import DEFAULT_TAPE_SIZE, EOFPolicy, VirtualMachine

logger = logging.getLogger(__name__)

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfvm",
        description="Compile a Brainfuck program to folded IR and run it on a byte tape.",
    )
    parser.add_argument("file", nargs="?", help="Path to the program source")
    parser.add_argument("--tape-size", type=int, default=DEFAULT_TAPE_SIZE,
                        help=f"Number of tape cells (default {DEFAULT_TAPE_SIZE})")
    parser.add_argument("--eof", choices=[p.value for p in EOFPolicy], default=EOFPolicy.ERROR.value,
                        help="On end of input: 'error' aborts the run, 'zero' stores 0 (default error)")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Abort after this many executed instructions")
    parser.add_argument("--dump-ir", action="store_true", help="Print the compiled IR instead of running it")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.file is None:
        parser.print_usage(sys.stderr)
        return 1
    if args.tape_size < 1:
        parser.print_usage(sys.stderr)
        print("error: --tape-size must be at least 1", file=sys.stderr)
        return 1
    if args.max_steps is not None and args.max_steps < 0:
        parser.print_usage(sys.stderr)
        print("error: --max-steps must be non-negative", file=sys.stderr)
        return 1

    logging.basicConfig(stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("bfvm").setLevel(_LOG_LEVELS[min(args.verbose, len(_LOG_LEVELS) - 1)])

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            code = f.read()
        instructions = compile_source(code)
        logger.info("compiled %s into %d instructions", args.file, len(instructions))

        if args.dump_ir:
            sys.stdout.write(format_listing(instructions) + "\n")
            return 0

        vm = VirtualMachine(
            args.tape_size,
            source=StreamSource(sys.stdin.buffer),
            sink=StreamSink(sys.stdout.buffer),
            eof=EOFPolicy(args.eof),
            max_steps=args.max_steps,
        )
        vm.execute(instructions)
    except BrokenPipeError:
        # discard bytes still buffered for the closed stdout
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        print("error: output closed (broken pipe)", file=sys.stderr)
        return 1
    except (BFVMError, OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
