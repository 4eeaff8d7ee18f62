from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from bfvm.bytecode import FOLDABLE_KINDS, IO_KINDS, BytecodeProgram, Instruction, OpKind
from bfvm.config import VMConfig
from bfvm.errors import UnclosedOpenBracket, UnmatchedCloseBracket
from bfvm.lexer import Token, tokenize

logger = logging.getLogger(__name__)


def _append(ops: list[Instruction], kind: OpKind, *, fold: bool, config: VMConfig) -> None:
    if fold and ops and ops[-1].kind == kind:
        ops[-1] = replace(ops[-1], operand=config.clamp_operand(ops[-1].operand + 1))
        return
    ops.append(Instruction(kind=kind, operand=1))


def compile_tokens(tokens: Sequence[Token], config: VMConfig | None = None) -> BytecodeProgram:
    config = config or VMConfig()
    ops: list[Instruction] = []
    brackets: list[int] = []

    for tok in tokens:
        if tok.kind in FOLDABLE_KINDS:
            _append(ops, tok.kind, fold=True, config=config)
        elif tok.kind in IO_KINDS:
            _append(ops, tok.kind, fold=config.fold_io_operators, config=config)
        elif tok.kind is OpKind.BRANCH_IF_ZERO:
            brackets.append(len(ops))
            ops.append(Instruction(kind=OpKind.BRANCH_IF_ZERO, operand=0))
        elif tok.kind is OpKind.BRANCH_IF_NONZERO:
            if not brackets:
                raise UnmatchedCloseBracket(tok.index)
            open_index = brackets.pop()
            # The open branch lands on the close instruction; the VM steps past it.
            ops[open_index] = replace(ops[open_index], operand=config.clamp_operand(len(ops)))
            ops.append(
                Instruction(kind=OpKind.BRANCH_IF_NONZERO, operand=config.clamp_operand(open_index))
            )
        else:
            raise AssertionError(f"unhandled token kind: {tok.kind}")

    if brackets:
        raise UnclosedOpenBracket(len(brackets))
    return BytecodeProgram(instructions=tuple(ops))


def compile_program(src: str, config: VMConfig | None = None) -> BytecodeProgram:
    config = config or VMConfig()
    program = compile_tokens(tokenize(src, config), config)
    logger.debug("compiled %d source chars into %d instructions", len(src), len(program))
    return program
