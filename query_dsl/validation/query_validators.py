"""
Semantic validation of query documents.

`validate_document` walks the whole document once and collects every finding
as a Diagnostic. Each Query is checked with `validate_query`, each variable
definition with `validate_variable_definition`. Nothing here raises: parse
problems reach the validator as Missing nodes and are reported like any other
finding.
"""

from __future__ import annotations

from typing import Type

from query_dsl.dsl_logging import get_logger
from query_dsl.nodes import (
    Compare,
    Date,
    Literal,
    Missing,
    Node,
    Number,
    Query,
    QueryDocumentNode,
    QualifiedValue,
    Range,
    SortBy,
    VariableDefinition,
    VariableName,
    walk,
)
from query_dsl.symbols import SORT_VALUES, StaticSymbol, SymbolTable, UserSymbol, ValueType
from query_dsl.validation.definition_validators import validate_variable_definition
from query_dsl.validation.diagnostics import Diagnostic, DiagnosticKind

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Document

def validate_document(document: QueryDocumentNode, symbols: SymbolTable) -> list[Diagnostic]:
    """Validate every query and variable definition of `document`."""
    result: list[Diagnostic] = []

    def visit(node):
        if isinstance(node, Query):
            validate_query(node, result, symbols)
        elif isinstance(node, VariableDefinition):
            validate_variable_definition(node, result)

    walk(document, visit)
    logger.debug(f"Validated {len(document.nodes)} line(s): {len(result)} diagnostic(s)")
    return result


# ------------------------------------------------------------------------------
# Query

def validate_query(query: Query, bucket: list[Diagnostic], symbols: SymbolTable) -> None:
    """
    Check one query, appending findings to `bucket`.

    Rules per node kind:
    - QualifiedValue: known qualifier, value in one of its value sets (and not
      excluded by an earlier value of the same query), or a value of the
      expected type.
    - VariableName outside a qualifier value: must name a declared variable.
    - Range: both boundaries of the same kind.
    - SortBy: a known sort criteria.
    - Missing: report the parser's message.
    """
    # value -> node that excluded it, scoped to this query
    mutual: dict[str, Node] = {}
    qualified_refs: set[int] = set()

    def visit(node):
        if isinstance(node, QualifiedValue):
            if isinstance(node.value, VariableName):
                qualified_refs.add(id(node.value))
            _check_qualified_value(node, bucket, symbols, mutual)
            return

        if isinstance(node, VariableName):
            if id(node) in qualified_refs:
                return
            info = symbols.get_first(node.value)
            if not isinstance(info, UserSymbol):
                bucket.append(Diagnostic(node, "Unknown variable", kind=DiagnosticKind.UNKNOWN_NAME))
            return

        # unbalanced range
        if isinstance(node, Range):
            if node.open is not None and node.close is not None and type(node.open) is not type(node.close):
                bucket.append(Diagnostic(node, "Range must start and end with equals types"))
            return

        if isinstance(node, SortBy):
            if isinstance(node.criteria, Literal) and node.criteria.value not in SORT_VALUES:
                bucket.append(Diagnostic(
                    node.criteria,
                    f"Unknown value, must be one of: {', '.join(SORT_VALUES)}",
                    kind=DiagnosticKind.TYPE_MISMATCH,
                ))
            return

        if isinstance(node, Missing):
            bucket.append(Diagnostic(node, node.message, kind=DiagnosticKind.SYNTAX))

    walk(query, visit)


def _check_qualified_value(node: QualifiedValue, bucket, symbols, mutual) -> None:
    info = symbols.get_first(node.qualifier.value)
    if not isinstance(info, StaticSymbol):
        bucket.append(Diagnostic(
            node.qualifier,
            f"Unknown qualifier: '{node.qualifier.value}'",
            kind=DiagnosticKind.UNKNOWN_NAME,
        ))
        return

    value_sets = info.value_sets
    if value_sets is not None:
        value = node.value.value if isinstance(node.value, Literal) else ""
        if value in mutual:
            bucket.append(Diagnostic(
                node,
                "Conflicts with mutual exclusive expression",
                conflict_node=mutual[value],
                kind=DiagnosticKind.MUTUAL_EXCLUSION,
            ))
            return

        for value_set in value_sets:
            if value in value_set:
                for candidate in value_set:
                    if candidate != value:
                        mutual[candidate] = node
                break
        else:
            allowed = ", ".join(", ".join(value_set) for value_set in value_sets)
            bucket.append(Diagnostic(
                node.value,
                f"Unknown value, must be one of: {allowed}",
                kind=DiagnosticKind.TYPE_MISMATCH,
            ))

    elif isinstance(node.value, VariableName):
        symbol = symbols.get_first(node.value.value)
        if not isinstance(symbol, UserSymbol) or symbol.type is not info.value:
            bucket.append(Diagnostic(
                node.value,
                f"Invalid value, expected {info.value.value}",
                kind=DiagnosticKind.TYPE_MISMATCH,
            ))

    elif info.value is ValueType.DATE and not _is_like(node.value, Date):
        bucket.append(Diagnostic(node.value, "Invalid value, expected date", kind=DiagnosticKind.TYPE_MISMATCH))

    elif info.value is ValueType.NUMBER and not _is_like(node.value, Number):
        bucket.append(Diagnostic(node.value, "Invalid value, expected number", kind=DiagnosticKind.TYPE_MISMATCH))

    # TODO: check that a range's lower boundary does not exceed its upper boundary


def _is_like(node: Node, what: Type) -> bool:
    """True for a `what` node, or a Compare/Range with a `what` operand."""
    if isinstance(node, what):
        return True
    if isinstance(node, Compare) and isinstance(node.value, what):
        return True
    if isinstance(node, Range) and (isinstance(node.open, what) or isinstance(node.close, what)):
        return True
    return False
