"""AST normalization run before code generation.

Nested stars such as ``((a*)*)*`` describe the same language as ``a*``
but generate one extra loop per level, and every extra loop that can
match the empty string multiplies the work of a backtracking VM. This
pass collapses them so that generated code and generator recursion stay
proportional to the normalized tree.
"""

from bytere.parser.ast import (
    Node,
    Disjunction,
    Sequence,
    Star,
    Plus,
    Question,
)


def normalize(node: Node) -> Node:
    """Return an equivalent tree with nested stars collapsed.

    ``Star(Star(x))`` and ``Star(Sequence([Star(x)]))`` both become
    ``Star(x)``. Children are normalized first, so a single bottom-up
    pass reaches the fixed point.
    """
    if isinstance(node, Sequence):
        return Sequence(tuple(normalize(child) for child in node.nodes))
    if isinstance(node, Disjunction):
        return Disjunction(normalize(node.left), normalize(node.right))
    if isinstance(node, Star):
        child = normalize(node.child)
        inner = _unwrap(child)
        if isinstance(inner, Star):
            return inner
        return Star(child)
    if isinstance(node, Plus):
        return Plus(normalize(node.child))
    if isinstance(node, Question):
        return Question(normalize(node.child))
    return node


def _unwrap(node: Node) -> Node:
    # A group holding a single element parses as a one-element Sequence.
    while isinstance(node, Sequence) and len(node.nodes) == 1:
        node = node.nodes[0]
    return node
