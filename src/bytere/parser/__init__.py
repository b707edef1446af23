"""Pattern parsing: text to AST."""

from bytere.parser.parser import parse, Parser
from bytere.parser.ast import (
    Node,
    Disjunction,
    Sequence,
    Repeat,
    Star,
    Plus,
    Question,
    Char,
    Dot,
    LineStart,
    LineEnd,
)

__all__ = [
    "parse",
    "Parser",
    "Node",
    "Disjunction",
    "Sequence",
    "Repeat",
    "Star",
    "Plus",
    "Question",
    "Char",
    "Dot",
    "LineStart",
    "LineEnd",
]
