"""Compiled VM program."""

from dataclasses import dataclass
from typing import Iterator, Tuple

from bytere.vm.inst import Inst, OpCode


@dataclass(frozen=True)
class Program:
    """An immutable sequence of instructions.

    The index of an instruction is its address. A program produced by
    the builder ends with its only MATCH instruction and every JUMP and
    SPLIT target is a valid address.

    Attributes:
        instructions: The instructions in address order.
    """

    instructions: Tuple[Inst, ...] = ()

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, addr: int) -> Inst:
        return self.instructions[addr]

    def __iter__(self) -> Iterator[Inst]:
        return iter(self.instructions)

    def is_valid(self) -> bool:
        """Check that every jump target is in bounds."""
        size = len(self.instructions)
        for inst in self.instructions:
            if inst.op in (OpCode.JUMP, OpCode.SPLIT):
                if not 0 <= inst.target1 < size:
                    return False
            if inst.op == OpCode.SPLIT:
                if not 0 <= inst.target2 < size:
                    return False
        return True

    def dump(self) -> str:
        """Return a human-readable listing of the program."""
        return "\n".join(f"{addr:04}: {inst}" for addr, inst in enumerate(self.instructions))


def disassemble(program: Program) -> str:
    """Render a program one instruction per line as ``0000: mnemonic``."""
    return program.dump()
