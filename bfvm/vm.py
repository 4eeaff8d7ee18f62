from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO

from bfvm.bytecode import BytecodeProgram, OpKind
from bfvm.config import EofPolicy, PointerWrap, VMConfig
from bfvm.errors import TapePointerError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExecutionContext:
    """Mutable state owned by a single run: the tape and both pointers."""

    stdin: BinaryIO
    stdout: BinaryIO
    tape: bytearray
    pointer: int = 0
    ip: int = 0
    steps: int = 0


class VirtualMachine:
    def __init__(self, config: VMConfig | None = None) -> None:
        self.config = config or VMConfig()

    def new_context(self, *, stdin: BinaryIO, stdout: BinaryIO) -> ExecutionContext:
        return ExecutionContext(stdin=stdin, stdout=stdout, tape=bytearray(self.config.tape_size))

    def execute(
        self, program: BytecodeProgram, *, stdin: BinaryIO, stdout: BinaryIO
    ) -> ExecutionContext:
        """Run `program` on a fresh zeroed tape until the instruction pointer runs off the end."""
        ctx = self.new_context(stdin=stdin, stdout=stdout)
        logger.debug(
            "executing %d instructions on a %d-cell tape", len(program), self.config.tape_size
        )
        self.run(program, ctx)
        logger.debug("execution finished after %d steps", ctx.steps)
        return ctx

    def run(self, program: BytecodeProgram, ctx: ExecutionContext) -> None:
        instructions = program.instructions
        end = len(instructions)
        tape = ctx.tape
        while ctx.ip < end:
            ins = instructions[ctx.ip]
            ctx.ip += 1
            ctx.steps += 1
            kind = ins.kind
            if kind is OpKind.INCREMENT:
                tape[ctx.pointer] = (tape[ctx.pointer] + ins.operand) & 0xFF
            elif kind is OpKind.DECREMENT:
                tape[ctx.pointer] = (tape[ctx.pointer] - ins.operand) & 0xFF
            elif kind is OpKind.MOVE_RIGHT:
                ctx.pointer = self._move(ctx.pointer, ins.operand)
            elif kind is OpKind.MOVE_LEFT:
                ctx.pointer = self._move(ctx.pointer, -ins.operand)
            elif kind is OpKind.READ_BYTE:
                self._read_byte(ctx)
            elif kind is OpKind.WRITE_CHAR:
                self._write(ctx, bytes((tape[ctx.pointer],)), ins.operand)
            elif kind is OpKind.WRITE_NUMBER:
                self._write(ctx, str(tape[ctx.pointer]).encode("ascii"), ins.operand)
            elif kind is OpKind.BRANCH_IF_ZERO:
                if tape[ctx.pointer] == 0:
                    ctx.ip = ins.operand
            elif kind is OpKind.BRANCH_IF_NONZERO:
                if tape[ctx.pointer] != 0:
                    ctx.ip = ins.operand
            else:
                raise AssertionError(f"unhandled instruction kind: {kind}")

    def _move(self, pointer: int, delta: int) -> int:
        size = self.config.tape_size
        if self.config.pointer_wrap is PointerWrap.MODULAR:
            return (pointer + delta) % size
        # Boundary mode only wraps when already sitting on the edge.
        if delta > 0 and pointer == size - 1:
            return 0
        if delta < 0 and pointer == 0:
            return size - 1
        moved = pointer + delta
        if not 0 <= moved < size:
            raise TapePointerError(moved, size)
        return moved

    def _read_byte(self, ctx: ExecutionContext) -> None:
        try:
            data = ctx.stdin.read(1)
        except (OSError, ValueError):
            # Read failures count as end of input.
            data = b""
        if data:
            ctx.tape[ctx.pointer] = data[0]
            return
        policy = self.config.on_eof
        if policy is EofPolicy.SET_ZERO:
            ctx.tape[ctx.pointer] = 0
        elif policy is EofPolicy.SET_MINUS_ONE:
            ctx.tape[ctx.pointer] = 0xFF

    @staticmethod
    def _write(ctx: ExecutionContext, chunk: bytes, times: int) -> None:
        for _ in range(times):
            ctx.stdout.write(chunk)
        ctx.stdout.flush()
