from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

from bfvm.api import compile_source, read_source
from bfvm.config import EofPolicy, PointerWrap, load_config
from bfvm.errors import CompileError, ConfigError, SourceError, VMError
from bfvm.vm import VirtualMachine

EXIT_OK = 0
EXIT_SOURCE = 1
EXIT_COMPILE = 2
EXIT_RUNTIME = 3
EXIT_USAGE = 4
EXIT_OUTPUT = 5


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value}")
    return n


def _existing_path(value: str) -> Path:
    p = Path(value)
    if not p.exists():
        raise argparse.ArgumentTypeError(f"path not found: {value}")
    return p


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="bfvm", description="compile and run a Brainfuck program on a byte tape"
    )
    parser.add_argument("file", type=Path, help="program source file")
    parser.add_argument(
        "--numeric-output",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="recognise '*' to print the current cell as a decimal number",
    )
    parser.add_argument(
        "--fold-io",
        dest="fold_io_operators",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="fold consecutive ',', '.' and '*' like the arithmetic operators",
    )
    parser.add_argument(
        "--operand-bits",
        type=_positive_int,
        default=None,
        help="store operands in a field this many bits wide (default: unbounded)",
    )
    parser.add_argument(
        "--pointer-wrap", choices=[p.value for p in PointerWrap], default=None
    )
    parser.add_argument("--on-eof", choices=[p.value for p in EofPolicy], default=None)
    parser.add_argument("--tape-size", type=_positive_int, default=None)
    parser.add_argument(
        "--config", type=_existing_path, default=None, help="YAML file with VM options"
    )
    parser.add_argument(
        "--dump", action="store_true", help="print the compiled instructions instead of running"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _silence_stdout() -> None:
    # The reader went away; send the exit-time flush of buffered output nowhere.
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(
            path=args.config,
            overrides={
                "numeric_output": args.numeric_output,
                "fold_io_operators": args.fold_io_operators,
                "operand_bits": args.operand_bits,
                "pointer_wrap": args.pointer_wrap,
                "on_eof": args.on_eof,
                "tape_size": args.tape_size,
            },
        )
        src = read_source(args.file)
    except (ConfigError, SourceError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_SOURCE

    try:
        program = compile_source(src=src, config=config)
    except CompileError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_COMPILE

    try:
        if args.dump:
            if len(program):
                print(program.listing(), flush=True)
            return EXIT_OK
        VirtualMachine(config).execute(program, stdin=sys.stdin.buffer, stdout=sys.stdout.buffer)
    except BrokenPipeError:
        _silence_stdout()
        print("error: output closed before the program finished", file=sys.stderr)
        return EXIT_OUTPUT
    except VMError as e:
        sys.stdout.flush()
        print(f"error: {e}", file=sys.stderr)
        return EXIT_RUNTIME
    return EXIT_OK
