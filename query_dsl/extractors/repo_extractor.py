"""
Extract owner/repo pairs from `repo:` qualifiers.

Works on any parsed document, validated or not. Values that do not split into
an owner and a repository are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from query_dsl.config import settings
from query_dsl.dsl_logging import get_logger
from query_dsl.nodes import QualifiedValue, QueryDocumentNode, VariableName, print_node, walk
from query_dsl.symbols import SymbolTable, UserSymbol

logger = get_logger(__name__)


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    repo: str


def get_repo_infos(
    document: QueryDocumentNode,
    symbols: SymbolTable,
    qualifier: Optional[str] = None,
    separator: Optional[str] = None,
) -> Iterator[RepoInfo]:
    """
    Yield a RepoInfo for every `repo:owner/name` value, in document order.

    Variable values are resolved through `symbols`. Each call walks the
    document again, so the generator can simply be recreated to start over.
    """
    qualifier = qualifier or settings.REPO_QUALIFIER
    separator = separator or settings.REPO_SEPARATOR

    def lookup(name: str) -> Optional[str]:
        symbol = symbols.get_first(name)
        return symbol.value if isinstance(symbol, UserSymbol) else None

    repo_strings: list[str] = []

    def visit(node):
        if not isinstance(node, QualifiedValue) or node.qualifier.value != qualifier:
            return
        if isinstance(node.value, VariableName):
            value = lookup(node.value.value)
        else:
            value = print_node(node.value, document.text, lookup)
        if value:
            repo_strings.append(_unquote(value))

    walk(document, visit)
    logger.debug(f"Found {len(repo_strings)} '{qualifier}' value(s)")

    for string in repo_strings:
        idx = string.find(separator)
        if idx > 0:
            yield RepoInfo(owner=string[:idx], repo=string[idx + len(separator):])


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value
