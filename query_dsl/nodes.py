"""
Node model for query documents.

The parser builds these immutable nodes from source text. Every node keeps the
character offsets it spans in the document so diagnostics can be mapped back
to lines and columns. The set of node classes is closed: `children()` and
`print_node()` handle each of them explicitly.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Union


class TokenType(Enum):
    OR = "OR"
    UNKNOWN = "unknown"


# ------------------------------------------------------------------------------
# Node classes

@dataclass(frozen=True, eq=False)
class Literal:
    start: int
    end: int
    value: str


@dataclass(frozen=True, eq=False)
class Number:
    start: int
    end: int
    value: str


@dataclass(frozen=True, eq=False)
class Date:
    start: int
    end: int
    value: str


@dataclass(frozen=True, eq=False)
class VariableName:
    start: int
    end: int
    value: str


@dataclass(frozen=True, eq=False)
class Any:
    """A single token carried as-is, e.g. the OR operator."""
    start: int
    end: int
    token_type: TokenType


@dataclass(frozen=True, eq=False)
class Missing:
    """Placeholder the parser inserts where the input is incomplete or invalid."""
    start: int
    end: int
    message: str


@dataclass(frozen=True, eq=False)
class Range:
    start: int
    end: int
    open: Optional["Node"] = None
    close: Optional["Node"] = None


@dataclass(frozen=True, eq=False)
class Compare:
    start: int
    end: int
    cmp: str
    value: "Node"


@dataclass(frozen=True, eq=False)
class QualifiedValue:
    start: int
    end: int
    qualifier: Literal
    value: "Node"
    not_: bool = False


@dataclass(frozen=True, eq=False)
class SortBy:
    start: int
    end: int
    keyword: Literal
    criteria: "Node"


@dataclass(frozen=True, eq=False)
class Query:
    start: int
    end: int
    nodes: tuple = ()


@dataclass(frozen=True, eq=False)
class VariableDefinition:
    start: int
    end: int
    name: VariableName
    value: "Node"


@dataclass(frozen=True, eq=False)
class QueryDocumentNode:
    start: int
    end: int
    nodes: tuple
    text: str


Node = Union[
    QueryDocumentNode,
    Query,
    QualifiedValue,
    VariableName,
    VariableDefinition,
    Literal,
    Date,
    Number,
    Range,
    SortBy,
    Compare,
    Any,
    Missing,
]

_LEAVES = (Literal, Number, Date, VariableName, Any, Missing)


# ------------------------------------------------------------------------------
# Traversal

def children(node: Node) -> tuple:
    """Return the direct child nodes of `node` in source order."""
    if isinstance(node, _LEAVES):
        return ()
    if isinstance(node, (QueryDocumentNode, Query)):
        return tuple(node.nodes)
    if isinstance(node, QualifiedValue):
        return (node.qualifier, node.value)
    if isinstance(node, VariableDefinition):
        return (node.name, node.value)
    if isinstance(node, Range):
        return tuple(n for n in (node.open, node.close) if n is not None)
    if isinstance(node, Compare):
        return (node.value,)
    if isinstance(node, SortBy):
        return (node.keyword, node.criteria)
    raise TypeError(f"Not a query node: {node!r}")


def iter_nodes(root: Node) -> Iterator[Node]:
    """
    Depth-first, pre-order iteration over `root` and all of its descendants.
    Each node is yielded exactly once; the tree is never modified.
    """
    stack = deque([root])
    while stack:
        node = stack.pop()
        yield node
        # reversed so the leftmost child is popped first
        stack.extend(reversed(children(node)))


def walk(root: Node, visitor: Callable[[Node], object]) -> None:
    """Call `visitor` once for every node under `root` (root included), pre-order."""
    for node in iter_nodes(root):
        visitor(node)


# ------------------------------------------------------------------------------
# Printing

def print_node(
    node: Node,
    text: str,
    lookup: Callable[[str], Optional[str]] = lambda name: None,
) -> str:
    """
    Render `node` back to query text.

    Leaf tokens are sliced from `text`, the document source. Variable
    references are replaced by `lookup(name)`; a reference `lookup` cannot
    resolve renders as an empty string.
    """
    def _print(n) -> str:
        if isinstance(n, (Literal, Number, Date, Any)):
            return text[n.start:n.end]
        if isinstance(n, VariableName):
            return lookup(n.value) or ""
        if isinstance(n, Missing):
            return ""
        if isinstance(n, QualifiedValue):
            return f"{'-' if n.not_ else ''}{_print(n.qualifier)}:{_print(n.value)}"
        if isinstance(n, Range):
            open_ = _print(n.open) if n.open is not None else ""
            close = _print(n.close) if n.close is not None else ""
            return f"{open_}..{close}"
        if isinstance(n, Compare):
            return f"{n.cmp}{_print(n.value)}"
        if isinstance(n, SortBy):
            return f"{_print(n.keyword)}:{_print(n.criteria)}"
        if isinstance(n, VariableDefinition):
            return f"{n.name.value}={_print(n.value)}"
        if isinstance(n, Query):
            return " ".join(_print(item) for item in n.nodes)
        if isinstance(n, QueryDocumentNode):
            return "\n".join(_print(item) for item in n.nodes)
        raise TypeError(f"Not a query node: {n!r}")

    return _print(node)
