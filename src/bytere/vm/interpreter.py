"""Backtracking VM interpreter.

Two strategies execute the same instruction semantics:

* depth-first recursion explores both sides of every SPLIT and merges
  the results, so a match that does not rely on ``^`` wins over one that
  does;
* breadth-first keeps pending SPLIT alternatives on an explicit LIFO
  stack and stops at the first path that reaches a match.

Both agree on whether the input matches. They can disagree on
``requires_head`` when a head-anchored path is found first by the
breadth-first strategy.
"""

import logging
import sys
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, NamedTuple, Optional, Sequence, Set, Tuple, TypeVar

from bytere._checked import checked_add
from bytere.config import Config, Strategy
from bytere.exceptions import EvalError, EvalErrorKind
from bytere.vm.inst import Inst, OpCode
from bytere.vm.program import Program

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Depths up to this run on the caller's stack.
INLINE_DEPTH = 256
# Frames kept free above the evaluation depth for helper calls.
FRAME_MARGIN = 64
# Stack reserved for a worker thread that evaluates deep inputs.
WORKER_STACK_SIZE = 256 * 1024 * 1024

_room = threading.local()
_room_lock = threading.Lock()


def with_depth_room(depth: int, func: Callable[[], T]) -> T:
    """Call ``func`` where ``depth`` nested evaluation frames fit.

    Small depths, and calls made from a worker thread, run inline.
    Otherwise ``func`` runs in a worker thread with a large stack while
    the interpreter recursion limit is raised to fit. Deep calls are
    serialized because the recursion limit is process-wide.
    """
    if depth <= INLINE_DEPTH or getattr(_room, "depth", 0):
        return func()

    outcome = {}

    def target() -> None:
        _room.depth = depth
        try:
            outcome["result"] = func()
        except Exception as e:
            outcome["error"] = e

    with _room_lock:
        old_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(old_limit, depth + FRAME_MARGIN))
        try:
            old_size = threading.stack_size(WORKER_STACK_SIZE)
            try:
                worker = threading.Thread(target=target, name="bytere-depth-first")
                worker.start()
            finally:
                threading.stack_size(old_size)
            worker.join()
        finally:
            sys.setrecursionlimit(old_limit)

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


@dataclass(frozen=True)
class EvalResult:
    """Outcome of one evaluation.

    Attributes:
        matched: Whether some path reached a match.
        requires_head: Whether that match depended on ``^`` holding, which
            is only true at the real start of a line.
    """

    matched: bool
    requires_head: bool = False

    @classmethod
    def match(cls) -> "EvalResult":
        return cls(True, False)

    @classmethod
    def match_if_head(cls) -> "EvalResult":
        return cls(True, True)

    @classmethod
    def no_match(cls) -> "EvalResult":
        return cls(False, False)

    @classmethod
    def accept(cls, requires_head: bool) -> "EvalResult":
        return cls.match_if_head() if requires_head else cls.match()

    def merge(self, other: "EvalResult") -> "EvalResult":
        """Combine the results of two alternative paths.

        A match beats no match. Of two matches, the merged result only
        requires the head anchor if both do.
        """
        if not self.matched:
            return other
        if not other.matched:
            return self
        return EvalResult(True, self.requires_head and other.requires_head)


class Action(Enum):
    """What a single instruction step asks the strategy to do."""

    ADVANCE = auto()
    FAIL = auto()
    ACCEPT = auto()
    FORK = auto()


class Step(NamedTuple):
    action: Action
    pc: int
    sp: int
    requires_head: bool


Context = Tuple[int, int, bool]


class Interpreter:
    """Runs a program against input text.

    An interpreter keeps no state between calls, so one instance (and
    the program it holds) can be shared freely.
    """

    def __init__(self, program: Program, config: Config = None):
        self.program = program
        self.config = config or Config.default()

    def run(self, text: Sequence[str], strategy: Optional[Strategy] = None) -> EvalResult:
        """Evaluate the program from offset 0 of ``text``.

        Args:
            text: The input, indexed by code point.
            strategy: Evaluation strategy; defaults to the configured one.

        Returns:
            The evaluation result.

        Raises:
            EvalError: If a counter overflows, the program is malformed or
                depth-first evaluation nests deeper than ``max_depth``.
        """
        strategy = strategy or self.config.strategy
        if strategy == Strategy.BREADTH_FIRST:
            result = self._run_breadth(text)
        else:
            try:
                result = with_depth_room(
                    self.depth_bound(len(text)),
                    lambda: self._run_depth(text, 0, 0, False, set()),
                )
            except RecursionError as e:
                raise EvalError(EvalErrorKind.RECURSION_LIMIT) from e
        logger.debug("%s run over %d code points: %s", strategy.value, len(text), result)
        return result

    def depth_bound(self, length: int) -> int:
        """Deepest depth-first recursion possible on ``length`` code points.

        A path never holds the same SPLIT twice at one offset, so it nests
        at most once per SPLIT per offset. The result is capped at
        ``Config.max_depth``.
        """
        splits = sum(1 for inst in self.program if inst.op == OpCode.SPLIT)
        return min((length + 1) * splits, self.config.max_depth)

    def _fetch(self, pc: int) -> Inst:
        if not 0 <= pc < len(self.program):
            raise EvalError(EvalErrorKind.INVALID_PC, pc)
        return self.program[pc]

    def _next_pc(self, pc: int) -> int:
        return checked_add(
            pc, 1, self.config.max_address, lambda: EvalError(EvalErrorKind.PC_OVERFLOW, pc)
        )

    def _next_sp(self, pc: int, sp: int) -> int:
        return checked_add(
            sp, 1, self.config.max_offset, lambda: EvalError(EvalErrorKind.SP_OVERFLOW, pc)
        )

    def _step(self, inst: Inst, text: Sequence[str], pc: int, sp: int, requires_head: bool) -> Step:
        """Interpret one instruction."""
        op = inst.op

        if op == OpCode.CHAR:
            if sp < len(text) and text[sp] == inst.code_point:
                return Step(Action.ADVANCE, self._next_pc(pc), self._next_sp(pc, sp), requires_head)
            return Step(Action.FAIL, pc, sp, requires_head)

        if op == OpCode.ANY:
            if sp < len(text):
                return Step(Action.ADVANCE, self._next_pc(pc), self._next_sp(pc, sp), requires_head)
            return Step(Action.FAIL, pc, sp, requires_head)

        if op == OpCode.HEAD:
            if sp == 0:
                return Step(Action.ADVANCE, self._next_pc(pc), sp, True)
            return Step(Action.FAIL, pc, sp, requires_head)

        if op == OpCode.MATCH_END:
            if sp >= len(text):
                return Step(Action.ACCEPT, pc, sp, requires_head)
            return Step(Action.FAIL, pc, sp, requires_head)

        if op == OpCode.JUMP:
            return Step(Action.ADVANCE, inst.target1, sp, requires_head)

        if op == OpCode.SPLIT:
            return Step(Action.FORK, inst.target1, sp, requires_head)

        return Step(Action.ACCEPT, pc, sp, requires_head)

    def _run_depth(
        self,
        text: Sequence[str],
        pc: int,
        sp: int,
        requires_head: bool,
        active: Set[Tuple[int, int]],
    ) -> EvalResult:
        """Depth-first evaluation using the call stack.

        ``active`` holds the (pc, sp) of every SPLIT on the current
        recursion path. Reaching one of them again means a loop body
        matched the empty string, and that thread is dropped. Its size is
        the recursion depth.
        """
        while True:
            inst = self._fetch(pc)
            step = self._step(inst, text, pc, sp, requires_head)

            if step.action == Action.FAIL:
                return EvalResult.no_match()

            if step.action == Action.ACCEPT:
                return EvalResult.accept(requires_head)

            if step.action == Action.FORK:
                key = (pc, sp)
                if key in active:
                    return EvalResult.no_match()
                if len(active) >= self.config.max_depth:
                    raise EvalError(EvalErrorKind.RECURSION_LIMIT, pc)
                active.add(key)
                first = self._run_depth(text, inst.target1, sp, requires_head, active)
                second = self._run_depth(text, inst.target2, sp, requires_head, active)
                active.discard(key)
                return first.merge(second)

            pc, sp, requires_head = step.pc, step.sp, step.requires_head

    def _run_breadth(self, text: Sequence[str]) -> EvalResult:
        """Backtracking evaluation with an explicit continuation stack.

        A SPLIT seen again at the same offset was either fully explored
        without a match or is an enclosing empty loop, so it fails.
        """
        stack: List[Context] = []
        visited: Set[Tuple[int, int]] = set()
        pc, sp, requires_head = 0, 0, False

        while True:
            inst = self._fetch(pc)
            step = self._step(inst, text, pc, sp, requires_head)
            action = step.action

            if action == Action.ACCEPT:
                return EvalResult.accept(requires_head)

            if action == Action.FORK:
                key = (pc, sp)
                if key in visited:
                    action = Action.FAIL
                else:
                    visited.add(key)
                    stack.append((inst.target2, sp, requires_head))

            if action == Action.FAIL:
                if not stack:
                    return EvalResult.no_match()
                pc, sp, requires_head = pop_context(stack)
                continue

            pc, sp, requires_head = step.pc, step.sp, step.requires_head


def pop_context(stack: List[Context]) -> Context:
    """Pop the most recent saved continuation."""
    if not stack:
        raise EvalError(EvalErrorKind.INVALID_CONTEXT)
    return stack.pop()


def run(
    program: Program,
    text: Sequence[str],
    strategy: Optional[Strategy] = None,
    config: Config = None,
) -> EvalResult:
    """Evaluate a program against text from offset 0.

    Args:
        program: The compiled program.
        text: The input, indexed by code point.
        strategy: Evaluation strategy; defaults to the configured one.
        config: Optional configuration.

    Returns:
        The evaluation result.
    """
    return Interpreter(program, config).run(text, strategy)
