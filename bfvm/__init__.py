from __future__ import annotations

from bfvm.api import compile_source, read_source, run_source
from bfvm.bytecode import BytecodeProgram, Instruction, OpKind
from bfvm.config import EofPolicy, PointerWrap, VMConfig, load_config
from bfvm.errors import (
    BfvmError,
    CompileError,
    ConfigError,
    SourceError,
    UnclosedOpenBracket,
    UnmatchedCloseBracket,
    VMError,
)
from bfvm.vm import VirtualMachine

__all__ = [
    "BfvmError",
    "BytecodeProgram",
    "CompileError",
    "ConfigError",
    "EofPolicy",
    "Instruction",
    "OpKind",
    "PointerWrap",
    "SourceError",
    "UnclosedOpenBracket",
    "UnmatchedCloseBracket",
    "VMConfig",
    "VMError",
    "VirtualMachine",
    "compile_source",
    "load_config",
    "read_source",
    "run_source",
]
