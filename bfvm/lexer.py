from __future__ import annotations

from dataclasses import dataclass

from bfvm.bytecode import OpKind
from bfvm.config import VMConfig

BASE_CHARS: dict[str, OpKind] = {
    "+": OpKind.INCREMENT,
    "-": OpKind.DECREMENT,
    ",": OpKind.READ_BYTE,
    ".": OpKind.WRITE_CHAR,
    "<": OpKind.MOVE_LEFT,
    ">": OpKind.MOVE_RIGHT,
    "[": OpKind.BRANCH_IF_ZERO,
    "]": OpKind.BRANCH_IF_NONZERO,
}
NUMERIC_CHARS: dict[str, OpKind] = {"*": OpKind.WRITE_NUMBER}


@dataclass(frozen=True, slots=True)
class Token:
    kind: OpKind
    index: int


def operator_table(config: VMConfig | None = None) -> dict[str, OpKind]:
    config = config or VMConfig()
    if config.numeric_output:
        return {**BASE_CHARS, **NUMERIC_CHARS}
    return dict(BASE_CHARS)


def tokenize(src: str, config: VMConfig | None = None) -> list[Token]:
    """Return the operator characters of `src` with their character index.

    Anything that is not an operator is a comment and is dropped.
    """
    table = operator_table(config)
    return [Token(kind=table[ch], index=i) for i, ch in enumerate(src) if ch in table]
