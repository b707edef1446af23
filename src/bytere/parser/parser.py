"""Regex pattern parser.

Grammar (informal)::

    pattern  := branch ('|' branch)*
    branch   := atom quantifier*
    atom     := char | '.' | '^' | '$' | '\\' escapable | '(' pattern ')'

The parser is a single left-to-right scan over code points. It keeps the
sequence being built, the alternatives already closed at the current
nesting level, and a stack of saved states for open groups.
"""

from typing import List, Optional, Tuple

from bytere.exceptions import ParseError, ParseErrorKind
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
)

ESCAPABLE = frozenset("\\()|+*?.^$")

QUANTIFIERS = {
    "+": Plus,
    "*": Star,
    "?": Question,
}


class Parser:
    """Parses a pattern string into an AST."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.seq: List[Node] = []
        self.branches: List[Node] = []
        self.stack: List[Tuple[List[Node], List[Node]]] = []

    def parse(self) -> Node:
        """Parse the whole pattern.

        Returns:
            The root node.

        Raises:
            ParseError: If the pattern is malformed.
        """
        escape_pos = -1
        for pos, c in enumerate(self.pattern):
            if escape_pos >= 0:
                self._parse_escape(pos, c)
                escape_pos = -1
            elif c == "\\":
                escape_pos = pos
            elif c in QUANTIFIERS:
                self._parse_quantifier(pos, c)
            elif c == "(":
                self._open_group()
            elif c == ")":
                self._close_group(pos)
            elif c == "|":
                self._parse_bar(pos)
            elif c == ".":
                self.seq.append(Dot())
            elif c == "^":
                self.seq.append(LineStart())
            elif c == "$":
                self.seq.append(LineEnd())
            else:
                self.seq.append(Char(c))

        if escape_pos >= 0:
            raise ParseError(ParseErrorKind.TRAILING_ESCAPE, escape_pos)
        if self.stack:
            raise ParseError(ParseErrorKind.NO_RIGHT_PAREN)

        self._close_branch()
        node = fold_or(self.branches)
        if node is None:
            raise ParseError(ParseErrorKind.EMPTY)
        return node

    def _parse_escape(self, pos: int, c: str) -> None:
        if c not in ESCAPABLE:
            raise ParseError(ParseErrorKind.INVALID_ESCAPE, pos, c)
        self.seq.append(Char(c))

    def _parse_quantifier(self, pos: int, c: str) -> None:
        if not self.seq:
            raise ParseError(ParseErrorKind.NO_PREV, pos)
        prev = self.seq.pop()
        self.seq.append(QUANTIFIERS[c](prev))

    def _parse_bar(self, pos: int) -> None:
        if not self.seq:
            raise ParseError(ParseErrorKind.NO_PREV, pos)
        self._close_branch()

    def _open_group(self) -> None:
        self.stack.append((self.seq, self.branches))
        self.seq = []
        self.branches = []

    def _close_group(self, pos: int) -> None:
        if not self.stack:
            raise ParseError(ParseErrorKind.INVALID_RIGHT_PAREN, pos)
        self._close_branch()
        node = fold_or(self.branches)
        self.seq, self.branches = self.stack.pop()
        if node is not None:
            self.seq.append(node)

    def _close_branch(self) -> None:
        if self.seq:
            self.branches.append(Sequence(tuple(self.seq)))
            self.seq = []


def fold_or(branches: List[Node]) -> Optional[Node]:
    """Fold alternatives into nested two-way disjunctions.

    ``[a, b, c]`` becomes ``Disjunction(a, Disjunction(b, c))`` so the
    first alternative is always tried first.
    """
    if not branches:
        return None
    node = branches[-1]
    for branch in reversed(branches[:-1]):
        node = Disjunction(branch, node)
    return node


def parse(pattern: str) -> Node:
    """Parse a regex pattern string.

    Args:
        pattern: The regex pattern.

    Returns:
        The root AST node.

    Raises:
        ParseError: If the pattern is malformed.
    """
    return Parser(pattern).parse()
