from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OpKind(str, Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"
    READ_BYTE = "read_byte"
    WRITE_CHAR = "write_char"
    WRITE_NUMBER = "write_number"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    BRANCH_IF_ZERO = "branch_if_zero"
    BRANCH_IF_NONZERO = "branch_if_nonzero"


# Kinds whose operand is a repeat count rather than a jump target.
FOLDABLE_KINDS = frozenset({OpKind.INCREMENT, OpKind.DECREMENT, OpKind.MOVE_LEFT, OpKind.MOVE_RIGHT})
IO_KINDS = frozenset({OpKind.READ_BYTE, OpKind.WRITE_CHAR, OpKind.WRITE_NUMBER})
BRANCH_KINDS = frozenset({OpKind.BRANCH_IF_ZERO, OpKind.BRANCH_IF_NONZERO})


@dataclass(frozen=True, slots=True)
class Instruction:
    kind: OpKind
    operand: int = 1

    @property
    def is_branch(self) -> bool:
        return self.kind in BRANCH_KINDS

    def __str__(self) -> str:
        if self.is_branch:
            return f"{self.kind.value} -> {self.operand}"
        return f"{self.kind.value} x{self.operand}"


@dataclass(frozen=True, slots=True)
class BytecodeProgram:
    instructions: tuple[Instruction, ...]

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def listing(self) -> str:
        """One line per instruction: index, kind and operand."""
        width = len(str(max(len(self.instructions) - 1, 0)))
        return "\n".join(f"{i:>{width}}  {ins}" for i, ins in enumerate(self.instructions))
