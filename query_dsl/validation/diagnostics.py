"""
Diagnostics produced by query validation.

A diagnostic pairs the offending node with a message. Mutual-exclusion
conflicts also carry the earlier node the current one conflicts with.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from query_dsl.nodes import Node


class DiagnosticKind(Enum):
    UNKNOWN_NAME = "unknown-name"
    TYPE_MISMATCH = "type-mismatch"
    MUTUAL_EXCLUSION = "mutual-exclusion"
    STRUCTURAL = "structural"
    SYNTAX = "syntax"


@dataclass(frozen=True)
class Diagnostic:
    node: Node
    message: str
    conflict_node: Optional[Node] = None
    kind: DiagnosticKind = DiagnosticKind.STRUCTURAL

    @property
    def start(self) -> int:
        return self.node.start

    @property
    def end(self) -> int:
        return self.node.end


def position_of(text: str, offset: int) -> tuple[int, int]:
    """
    Convert a character offset in `text` to a 1-based (line, column) pair.

    Node offsets point into the whole document while textX parses one line at
    a time, so no parser holds the text needed for its own pos_to_linecol.
    """
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column
