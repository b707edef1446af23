"""VM instruction set."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class OpCode(Enum):
    """Operation codes."""

    CHAR = auto()  # consume one code point equal to ``code_point``
    ANY = auto()  # consume any one code point
    HEAD = auto()  # assert offset 0
    MATCH_END = auto()  # assert end of input, then accept
    JUMP = auto()  # goto target1
    SPLIT = auto()  # try target1, then target2
    MATCH = auto()  # accept


@dataclass(frozen=True)
class Inst:
    """A single VM instruction.

    Attributes:
        op: The operation code.
        code_point: Code point for CHAR.
        target1: Jump target, or first (preferred) SPLIT target.
        target2: Second SPLIT target.
    """

    op: OpCode
    code_point: Optional[str] = None
    target1: Optional[int] = None
    target2: Optional[int] = None

    def __repr__(self) -> str:
        if self.op == OpCode.CHAR:
            return f"Inst(CHAR, {self.code_point!r})"
        if self.op == OpCode.JUMP:
            return f"Inst(JUMP, {self.target1})"
        if self.op == OpCode.SPLIT:
            return f"Inst(SPLIT, {self.target1}, {self.target2})"
        return f"Inst({self.op.name})"

    def __str__(self) -> str:
        if self.op == OpCode.CHAR:
            if self.code_point.isprintable():
                return f"char {self.code_point}"
            return f"char 0x{ord(self.code_point):04x}"
        if self.op == OpCode.ANY:
            return "any"
        if self.op == OpCode.HEAD:
            return "head"
        if self.op == OpCode.MATCH_END:
            return "match_end"
        if self.op == OpCode.JUMP:
            return f"jump {self.target1:04}"
        if self.op == OpCode.SPLIT:
            return f"split {self.target1:04}, {self.target2:04}"
        return "match"

    @classmethod
    def char(cls, c: str) -> "Inst":
        return cls(OpCode.CHAR, code_point=c)

    @classmethod
    def any_char(cls) -> "Inst":
        return cls(OpCode.ANY)

    @classmethod
    def head(cls) -> "Inst":
        return cls(OpCode.HEAD)

    @classmethod
    def match_end(cls) -> "Inst":
        return cls(OpCode.MATCH_END)

    @classmethod
    def jump(cls, target: int) -> "Inst":
        return cls(OpCode.JUMP, target1=target)

    @classmethod
    def split(cls, target1: int, target2: int) -> "Inst":
        return cls(OpCode.SPLIT, target1=target1, target2=target2)

    @classmethod
    def match(cls) -> "Inst":
        return cls(OpCode.MATCH)
