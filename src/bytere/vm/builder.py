"""Build VM program from regex AST."""

import logging
from dataclasses import replace
from typing import List

from bytere._checked import checked_add
from bytere.config import Config
from bytere.exceptions import CodeGenError, CodeGenErrorKind
from bytere.parser.ast import (
    Node,
    Disjunction,
    Sequence,
    Star,
    Plus,
    Question,
    Char,
    Dot,
    LineStart,
    LineEnd,
    has_content_after_end,
    has_end_anchor,
    has_start_anchor,
    size,
)
from bytere.vm.inst import Inst, OpCode
from bytere.vm.normalize import normalize
from bytere.vm.program import Program

logger = logging.getLogger(__name__)


class ProgramBuilder:
    """Builds a VM program from a regex AST.

    Code is generated in one pass. Targets that are not known yet are
    emitted as 0 and patched once the target address has been reached.
    """

    def __init__(self, config: Config = None):
        self.config = config or Config.default()
        self.pc = 0
        self.insts: List[Inst] = []

    def build(self, node: Node) -> Program:
        """Build a program from a parsed pattern."""
        node = normalize(node)
        if self.config.warn_unreachable_end and has_content_after_end(node):
            logger.warning("pattern has content after '$' that can never match: %r", node)

        self._compile(node)
        self._emit(Inst.match())

        program = Program(tuple(self.insts))
        logger.debug(
            "generated %d instructions from %d nodes (head anchor: %s, end anchor: %s)",
            len(program),
            size(node),
            has_start_anchor(node),
            has_end_anchor(node),
        )
        return program

    def _inc_pc(self) -> None:
        self.pc = checked_add(
            self.pc,
            1,
            self.config.max_address,
            lambda: CodeGenError(CodeGenErrorKind.PC_OVERFLOW),
        )

    def _emit(self, inst: Inst) -> int:
        """Emit an instruction and return its address."""
        addr = self.pc
        self._inc_pc()
        self.insts.append(inst)
        return addr

    def _patch(self, addr: int, op: OpCode, kind: CodeGenErrorKind, **targets: int) -> None:
        """Fill in the targets of an already emitted JUMP or SPLIT."""
        if not 0 <= addr < len(self.insts) or self.insts[addr].op != op:
            raise CodeGenError(kind)
        self.insts[addr] = replace(self.insts[addr], **targets)

    def _compile(self, node: Node) -> None:
        """Compile a node."""
        if isinstance(node, Char):
            self._emit(Inst.char(node.char))

        elif isinstance(node, Dot):
            self._emit(Inst.any_char())

        elif isinstance(node, LineStart):
            self._emit(Inst.head())

        elif isinstance(node, LineEnd):
            self._emit(Inst.match_end())

        elif isinstance(node, Sequence):
            for child in node.nodes:
                self._compile(child)

        elif isinstance(node, Disjunction):
            self._compile_disjunction(node)

        elif isinstance(node, Plus):
            self._compile_plus(node)

        elif isinstance(node, Star):
            self._compile_star(node)

        elif isinstance(node, Question):
            self._compile_question(node)

        else:
            raise TypeError(f"cannot compile {node!r}")

    def _compile_disjunction(self, node: Disjunction) -> None:
        """Compile alternation.

        ::

                split L1, L2
            L1: <left>
                jump L3
            L2: <right>
            L3:
        """
        split_idx = self._emit(Inst.split(self.pc + 1, 0))
        self._compile(node.left)
        jump_idx = self._emit(Inst.jump(0))
        self._patch(split_idx, OpCode.SPLIT, CodeGenErrorKind.FAIL_OR, target2=self.pc)
        self._compile(node.right)
        self._patch(jump_idx, OpCode.JUMP, CodeGenErrorKind.FAIL_OR, target1=self.pc)

    def _compile_plus(self, node: Plus) -> None:
        """Compile + (one or more).

        ::

            L1: <child>
                split L1, L2
            L2:
        """
        loop_start = self.pc
        self._compile(node.child)
        self._emit(Inst.split(loop_start, self.pc + 1))

    def _compile_star(self, node: Star) -> None:
        """Compile * (zero or more).

        ::

            L1: split L2, L3
            L2: <child>
                jump L1
            L3:
        """
        loop_start = self._emit(Inst.split(self.pc + 1, 0))
        self._compile(node.child)
        self._emit(Inst.jump(loop_start))
        self._patch(loop_start, OpCode.SPLIT, CodeGenErrorKind.FAIL_STAR, target2=self.pc)

    def _compile_question(self, node: Question) -> None:
        """Compile ? (zero or one).

        ::

                split L1, L2
            L1: <child>
            L2:
        """
        split_idx = self._emit(Inst.split(self.pc + 1, 0))
        self._compile(node.child)
        self._patch(split_idx, OpCode.SPLIT, CodeGenErrorKind.FAIL_QUESTION, target2=self.pc)


def build_program(node: Node, config: Config = None) -> Program:
    """Build a VM program from a parsed pattern.

    Args:
        node: The root of the parsed pattern.
        config: Optional configuration.

    Returns:
        The compiled program.

    Raises:
        CodeGenError: If the program would not fit in the address space.
    """
    builder = ProgramBuilder(config)
    return builder.build(node)
