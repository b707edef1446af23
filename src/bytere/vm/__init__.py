"""VM module: bytecode generation and backtracking evaluation."""

from bytere.vm.inst import Inst, OpCode
from bytere.vm.program import Program, disassemble
from bytere.vm.normalize import normalize
from bytere.vm.builder import ProgramBuilder, build_program
from bytere.vm.interpreter import Interpreter, EvalResult, run

__all__ = [
    "Inst",
    "OpCode",
    "Program",
    "disassemble",
    "normalize",
    "ProgramBuilder",
    "build_program",
    "Interpreter",
    "EvalResult",
    "run",
]
