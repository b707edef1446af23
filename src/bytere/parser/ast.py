"""AST node definitions for regex patterns."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Tuple


class Node(ABC):
    """Base class for all AST nodes."""

    @abstractmethod
    def children(self) -> "List[Node]":
        """Return child nodes."""
        ...

    @abstractmethod
    def __repr__(self) -> str:
        ...

    def walk(self) -> "Iterator[Node]":
        """Yield this node and all descendants."""
        yield self
        for child in self.children():
            yield from child.walk()


# ============================================================================
# Structural nodes
# ============================================================================


@dataclass(frozen=True)
class Disjunction(Node):
    """Alternation (|) between two alternatives.

    The left alternative is always tried first. Patterns with more than
    two alternatives nest to the right: ``a|b|c`` is
    ``Disjunction(a, Disjunction(b, c))``.

    Attributes:
        left: The preferred alternative.
        right: The fallback alternative.
    """

    left: "Node"
    right: "Node"

    def children(self) -> "List[Node]":
        return [self.left, self.right]

    def __repr__(self) -> str:
        return f"Disjunction({self.left!r}, {self.right!r})"


@dataclass(frozen=True)
class Sequence(Node):
    """Sequence of nodes (concatenation).

    Attributes:
        nodes: Nodes in match order.
    """

    nodes: "Tuple[Node, ...]"

    def children(self) -> "List[Node]":
        return list(self.nodes)

    def __repr__(self) -> str:
        return f"Sequence({list(self.nodes)!r})"


# ============================================================================
# Quantifiers
# ============================================================================


@dataclass(frozen=True)
class Repeat(Node):
    """Base class for repetition.

    Attributes:
        child: The pattern to repeat.
    """

    child: "Node"

    def children(self) -> "List[Node]":
        return [self.child]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.child!r})"


@dataclass(frozen=True, repr=False)
class Star(Repeat):
    """Zero or more repetition (*)."""

    pass


@dataclass(frozen=True, repr=False)
class Plus(Repeat):
    """One or more repetition (+)."""

    pass


@dataclass(frozen=True, repr=False)
class Question(Repeat):
    """Zero or one (?)."""

    pass


# ============================================================================
# Character matching
# ============================================================================


@dataclass(frozen=True)
class Char(Node):
    """Single character literal.

    Attributes:
        char: A one code point string.
    """

    char: str

    def children(self) -> "List[Node]":
        return []

    def __repr__(self) -> str:
        if self.char.isprintable():
            return f"Char({self.char!r})"
        return f"Char(0x{ord(self.char):04x})"


@dataclass(frozen=True)
class Dot(Node):
    """Dot (.) - matches any single code point."""

    def children(self) -> "List[Node]":
        return []

    def __repr__(self) -> str:
        return "Dot()"


# ============================================================================
# Assertions
# ============================================================================


@dataclass(frozen=True)
class LineStart(Node):
    """^ - start of the line being scanned."""

    def children(self) -> "List[Node]":
        return []

    def __repr__(self) -> str:
        return "LineStart()"


@dataclass(frozen=True)
class LineEnd(Node):
    """$ - end of input."""

    def children(self) -> "List[Node]":
        return []

    def __repr__(self) -> str:
        return "LineEnd()"


# ============================================================================
# Helper functions
# ============================================================================


def size(node: Node) -> int:
    """Count the nodes in a tree."""
    return sum(1 for _ in node.walk())


def has_start_anchor(node: Node) -> bool:
    """Check if a pattern contains a ^ anchor."""
    for n in node.walk():
        if isinstance(n, LineStart):
            return True
    return False


def has_end_anchor(node: Node) -> bool:
    """Check if a pattern contains a $ anchor."""
    for n in node.walk():
        if isinstance(n, LineEnd):
            return True
    return False


def has_content_after_end(node: Node) -> bool:
    """Check if a character or wildcard can follow a $ anchor.

    The VM treats $ as a match terminal, so input consumed after it is
    dead code. ``a$b``, ``a$b*`` and ``(a$)+`` all contain such content;
    ``a$``, ``(a|$)`` and ``$|b`` do not.
    """
    return _after_end(node, False)[0]


def _after_end(node: Node, end_seen: bool) -> "Tuple[bool, bool]":
    # Returns (found, end_after): end_after tells whether some path
    # through ``node`` leaves a $ behind it.
    if isinstance(node, (Char, Dot)):
        return end_seen, False
    if isinstance(node, LineEnd):
        return False, True
    if isinstance(node, LineStart):
        return False, end_seen
    if isinstance(node, Sequence):
        found = False
        for child in node.nodes:
            child_found, end_seen = _after_end(child, end_seen)
            found = found or child_found
        return found, end_seen
    if isinstance(node, Disjunction):
        left_found, left_end = _after_end(node.left, end_seen)
        right_found, right_end = _after_end(node.right, end_seen)
        return left_found or right_found, left_end or right_end
    if isinstance(node, Repeat):
        found, child_end = _after_end(node.child, end_seen)
        if child_end and not end_seen and not isinstance(node, Question):
            # A later iteration runs after the $ left by an earlier one.
            found = found or _after_end(node.child, True)[0]
        if isinstance(node, Plus):
            return found, child_end
        return found, end_seen or child_end
    raise TypeError(f"unknown node: {node!r}")
