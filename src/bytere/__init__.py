"""
bytere - A small regular expression engine built on a backtracking VM.

Patterns are parsed into an AST, compiled into bytecode and executed by a
virtual machine that supports literals, ``.``, ``^``, ``$``, grouping,
alternation and the ``*``, ``+`` and ``?`` quantifiers.

Example usage:
    >>> from bytere import compile, match_line
    >>> program = compile(r"(a|^b)c")
    >>> match_line(program, "123ac")
    True
    >>> match_line(program, "123bc")
    False

For more control:
    >>> from bytere import run, Strategy
    >>> run(compile("ab*"), "abbb", Strategy.BREADTH_FIRST).matched
    True
"""

from bytere.matcher import compile, match_line, is_match, Regex
from bytere.config import Config, Strategy
from bytere.parser.parser import parse
from bytere.vm.program import Program, disassemble
from bytere.vm.interpreter import EvalResult, run
from bytere.exceptions import (
    BytereError,
    ParseError,
    ParseErrorKind,
    CodeGenError,
    CodeGenErrorKind,
    EvalError,
    EvalErrorKind,
)

__version__ = "0.1.0"

__all__ = [
    # Main API
    "compile",
    "run",
    "match_line",
    "is_match",
    "disassemble",
    "parse",
    "Regex",
    "Program",
    "EvalResult",
    # Configuration
    "Config",
    "Strategy",
    # Exceptions
    "BytereError",
    "ParseError",
    "ParseErrorKind",
    "CodeGenError",
    "CodeGenErrorKind",
    "EvalError",
    "EvalErrorKind",
    # Version
    "__version__",
]
