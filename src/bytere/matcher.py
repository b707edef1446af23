"""Compiling patterns and matching them against lines."""

import logging
from typing import Optional, Sequence

from bytere.config import Config, Strategy
from bytere.parser.ast import Node
from bytere.parser.parser import parse
from bytere.vm.builder import build_program
from bytere.vm.interpreter import EvalResult, Interpreter, with_depth_room
from bytere.vm.program import Program

logger = logging.getLogger(__name__)


def compile(pattern: str, config: Config = None) -> Program:
    """Compile a pattern string into a program.

    Args:
        pattern: The regex pattern.
        config: Optional configuration.

    Returns:
        The compiled program.

    Raises:
        ParseError: If the pattern is malformed.
        CodeGenError: If the program does not fit in the address space.
    """
    return build_program(parse(pattern), config)


def match_line(
    program: Program,
    line: str,
    strategy: Optional[Strategy] = None,
    config: Config = None,
) -> bool:
    """Check whether a program matches anywhere in a line.

    Evaluation is retried at every offset, including the empty suffix at
    the end. ``^`` is checked against the start of each retried suffix,
    so a result that relied on it only counts at offset 0.

    Raises:
        EvalError: If evaluation fails at some offset.
    """
    interpreter = Interpreter(program, config)
    strategy = strategy or interpreter.config.strategy

    def scan() -> bool:
        for i in range(len(line) + 1):
            result = interpreter.run(line[i:], strategy)
            if result.matched and (not result.requires_head or i == 0):
                logger.debug("matched at offset %d", i)
                return True
        return False

    if strategy == Strategy.BREADTH_FIRST:
        return scan()
    # One worker for the whole line instead of one per offset.
    return with_depth_room(interpreter.depth_bound(len(line)), scan)


def is_match(pattern: str, text: Sequence[str], strategy: Optional[Strategy] = None) -> bool:
    """Compile a pattern and evaluate it once from the start of ``text``."""
    return Interpreter(compile(pattern)).run(text, strategy).matched


class Regex:
    """A compiled pattern.

    Example:
        >>> regex = Regex("^ab*c")
        >>> regex.match_line("abbbc")
        True
        >>> regex.match_line("xabc")
        False
    """

    def __init__(self, pattern: str, config: Config = None):
        self.pattern = pattern
        self.config = config or Config.default()
        self.ast: Node = parse(pattern)
        self.program: Program = build_program(self.ast, self.config)

    def run(self, text: Sequence[str], strategy: Optional[Strategy] = None) -> EvalResult:
        """Evaluate once from the start of ``text``."""
        return Interpreter(self.program, self.config).run(text, strategy)

    def match_line(self, line: str, strategy: Optional[Strategy] = None) -> bool:
        """Check whether the pattern matches anywhere in ``line``."""
        return match_line(self.program, line, strategy, self.config)

    def dump(self) -> str:
        """Return the AST and disassembly as text."""
        return f"expr: {self.pattern}\nAST: {self.ast!r}\n\ncode:\n{self.program.dump()}"

    def __repr__(self) -> str:
        return f"Regex({self.pattern!r})"
