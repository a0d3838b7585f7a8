"""
Metamodel and document builders for the query language.

This module provides the entry points that turn query text into the node tree
used by validation and extraction. Each line of a document is parsed on its
own with the textX grammar in grammar/query.tx, so a broken line never hides
the lines around it. Missing parts (`is:` with no value, `sort:` with no
criteria, ...) become Missing nodes carrying the message to report.
"""

from os.path import join, dirname, abspath
from pathlib import Path
from typing import Optional

from textx import metamodel_from_file
from textx.exceptions import TextXSyntaxError

from query_dsl.dsl_logging import get_logger
from query_dsl.nodes import (
    Any,
    Compare,
    Date,
    Literal,
    Missing,
    Number,
    Query,
    QueryDocumentNode,
    QualifiedValue,
    Range,
    SortBy,
    TokenType,
    VariableDefinition,
    VariableName,
)
from query_dsl.symbols import SymbolTable

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Constants
THIS_DIR = dirname(abspath(__file__))
GRAMMAR_DIR = join(THIS_DIR, "grammar")
COMMENT_PREFIX = "//"


# ------------------------------------------------------------------------------
# Public document builders

def build_document(document_path: str) -> QueryDocumentNode:
    """Parse a query document from a file path."""
    path = Path(document_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return build_document_str(path.read_text(encoding="utf-8"))


def build_document_str(text: str) -> QueryDocumentNode:
    """Parse a query document from a string. Never raises on malformed input."""
    nodes = []
    offset = 0
    for line in text.splitlines(keepends=True):
        content = line.rstrip("\r\n")
        stripped = content.strip()
        if stripped and not stripped.startswith(COMMENT_PREFIX):
            nodes.append(_parse_line(content, offset))
        offset += len(line)

    logger.debug(f"Parsed {len(nodes)} line(s)")
    return QueryDocumentNode(0, len(text), tuple(nodes), text)


def load_document(text: str, symbols: Optional[SymbolTable] = None):
    """
    Parse `text` and register its variable definitions.

    Returns:
        (document, symbols) where `symbols` is the given table, or a new table
        built from the qualifier catalog.
    """
    if symbols is None:
        symbols = SymbolTable.from_catalog()
    document = build_document_str(text)
    symbols.update(document)
    return document, symbols


# ------------------------------------------------------------------------------
# Line parsing

def _parse_line(content: str, base: int):
    try:
        model = QueryMetaModel.model_from_str(content)
    except TextXSyntaxError as e:
        logger.debug(f"Syntax error at offset {base}: {e.message}")
        # col is 1-based within the line
        start = base + max(0, (e.col or 1) - 1)
        missing = Missing(start, base + len(content), e.message)
        return Query(base, base + len(content), (missing,))
    return _to_node(model, base)


def _to_node(obj, base: int):
    """Convert a textX model object to a query node, shifting offsets by `base`."""
    cname = obj.__class__.__name__
    start = base + obj._tx_position
    end = base + obj._tx_position_end

    if cname == "Query":
        return Query(start, end, tuple(_to_node(item, base) for item in obj.items))

    if cname == "VariableDefinition":
        name = _to_node(obj.name, base)
        value = _to_node(obj.value, base) if obj.value is not None else None
        # `$a=` leaves no Query behind, or an empty one
        if value is None or not value.nodes:
            value = Query(end, end, (Missing(end, end, "Expected value"),))
        return VariableDefinition(start, end, name=name, value=value)

    if cname == "QualifiedValue":
        qualifier = Literal(
            base + obj.qualifier._tx_position,
            base + obj.qualifier._tx_position_end,
            obj.qualifier.value,
        )
        return QualifiedValue(
            start,
            end,
            qualifier=qualifier,
            value=_to_node_or_missing(obj.value, base, end, "Expected value"),
            not_=obj.negated,
        )

    if cname == "SortBy":
        keyword = Literal(
            base + obj.keyword._tx_position,
            base + obj.keyword._tx_position_end,
            obj.keyword.value,
        )
        criteria = _to_node_or_missing(obj.criteria, base, end, "Expected sort criteria")
        return SortBy(start, end, keyword=keyword, criteria=criteria)

    if cname == "Range":
        return Range(start, end, open=_boundary(obj.open, base), close=_boundary(obj.close, base))

    if cname == "Compare":
        return Compare(start, end, cmp=obj.cmp, value=_to_node_or_missing(obj.value, base, end, "Expected value"))

    if cname == "OrKeyword":
        return Any(start, end, TokenType.OR)

    if cname == "Date":
        return Date(start, end, obj.value)

    if cname == "Number":
        return Number(start, end, obj.value)

    if cname == "VariableName":
        return VariableName(start, end, obj.value)

    if cname == "Literal":
        return Literal(start, end, _unquote(obj.value))

    raise TypeError(f"Unexpected model element '{cname}'")


def _to_node_or_missing(obj, base, end, message):
    if obj is None:
        return Missing(end, end, message)
    return _to_node(obj, base)


def _boundary(obj, base):
    # `*` marks an open-ended boundary
    if obj is None or obj.__class__.__name__ == "Star":
        return None
    return _to_node(obj, base)


def _unquote(value: str) -> str:
    if value.startswith('"'):
        return value[1:-1] if len(value) > 1 and value.endswith('"') else value[1:]
    return value


# ------------------------------------------------------------------------------
# Metamodel creation

def get_metamodel(debug: bool = False):
    """Load the textX metamodel from grammar/query.tx."""
    return metamodel_from_file(
        join(GRAMMAR_DIR, "query.tx"),
        auto_init_attributes=True,
        debug=debug,
    )


# Create the global metamodel instance
QueryMetaModel = get_metamodel(debug=False)
