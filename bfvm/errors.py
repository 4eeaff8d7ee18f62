from __future__ import annotations


class BfvmError(Exception):
    pass


class CompileError(BfvmError):
    def __init__(self, message: str, *, index: int | None = None) -> None:
        self.index = index
        prefix = "" if index is None else f"index {index}: "
        super().__init__(prefix + str(message))


class UnmatchedCloseBracket(CompileError):
    def __init__(self, source_index: int) -> None:
        self.source_index = source_index
        super().__init__("unexpected ']' with no matching '['", index=source_index)


class UnclosedOpenBracket(CompileError):
    def __init__(self, open_count: int = 1) -> None:
        self.open_count = open_count
        super().__init__(f"unclosed '[' ({open_count} left open at end of input)")


class VMError(BfvmError):
    pass


class TapePointerError(VMError):
    def __init__(self, pointer: int, tape_size: int) -> None:
        self.pointer = pointer
        self.tape_size = tape_size
        super().__init__(f"tape pointer {pointer} outside tape of {tape_size} cells")


class SourceError(BfvmError):
    pass


class SourceOpenError(SourceError):
    pass


class SourceReadError(SourceError):
    pass


class ConfigError(BfvmError):
    pass
