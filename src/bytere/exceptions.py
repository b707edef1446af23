"""Custom exceptions for bytere."""

from enum import Enum
from typing import Optional


class BytereError(Exception):
    """Base exception for all bytere errors."""

    pass


class ParseErrorKind(Enum):
    """Reasons a pattern can fail to parse."""

    INVALID_ESCAPE = "invalid escape"
    INVALID_RIGHT_PAREN = "invalid right parenthesis"
    NO_PREV = "no previous expression"
    NO_RIGHT_PAREN = "no right parenthesis"
    EMPTY = "empty expression"
    TRAILING_ESCAPE = "trailing escape"


class ParseError(BytereError):
    """Raised when a regex pattern cannot be parsed."""

    def __init__(
        self, kind: ParseErrorKind, position: int = -1, char: Optional[str] = None
    ) -> None:
        self.kind = kind
        self.position = position
        self.char = char
        super().__init__(kind.value)

    def __str__(self) -> str:
        message = super().__str__()
        if self.char is not None:
            message = f"{message} {self.char!r}"
        if self.position >= 0:
            return f"{message} at position {self.position}"
        return message


class CodeGenErrorKind(Enum):
    """Reasons code generation can fail.

    Everything except PC_OVERFLOW is an internal invariant violation.
    """

    PC_OVERFLOW = "program counter overflow"
    FAIL_STAR = "failed to patch star loop"
    FAIL_OR = "failed to patch alternation"
    FAIL_QUESTION = "failed to patch optional"


class CodeGenError(BytereError):
    """Raised when an AST cannot be turned into a program."""

    def __init__(self, kind: CodeGenErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value)


class EvalErrorKind(Enum):
    """Reasons an evaluation can fail."""

    PC_OVERFLOW = "program counter overflow"
    SP_OVERFLOW = "string pointer overflow"
    INVALID_PC = "program counter out of range"
    INVALID_CONTEXT = "no saved context to resume"
    RECURSION_LIMIT = "recursion limit exceeded"


class EvalError(BytereError):
    """Raised when the VM cannot finish evaluating a program."""

    def __init__(self, kind: EvalErrorKind, pc: int = -1) -> None:
        self.kind = kind
        self.pc = pc
        super().__init__(kind.value)

    def __str__(self) -> str:
        if self.pc >= 0:
            return f"{super().__str__()} at pc {self.pc}"
        return super().__str__()
