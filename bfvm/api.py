from __future__ import annotations

import io
from pathlib import Path

from bfvm.bytecode import BytecodeProgram
from bfvm.compiler import compile_program
from bfvm.config import VMConfig
from bfvm.errors import SourceOpenError, SourceReadError
from bfvm.vm import VirtualMachine


def read_source(path: Path) -> str:
    try:
        fh = path.open("rb")
    except OSError as e:
        raise SourceOpenError(f"unable to open file {path}: {e}") from e
    with fh:
        try:
            raw = fh.read()
        except OSError as e:
            raise SourceReadError(f"unable to read file {path}: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SourceReadError(f"file is not valid UTF-8 {path}: {e}") from e


def compile_source(*, src: str, config: VMConfig | None = None) -> BytecodeProgram:
    return compile_program(src, config)


def run_source(*, src: str, stdin: bytes = b"", config: VMConfig | None = None) -> bytes:
    """Compile and run `src` against in-memory input, returning everything it wrote."""
    program = compile_source(src=src, config=config)
    out = io.BytesIO()
    VirtualMachine(config).execute(program, stdin=io.BytesIO(stdin), stdout=out)
    return out.getvalue()
