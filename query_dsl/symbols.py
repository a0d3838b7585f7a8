"""
Symbols of the query language.

Two kinds of symbols share one table:

- StaticSymbol: a built-in qualifier. It either expects a scalar value type
  or lists groups of mutually exclusive values (e.g. `is:pr` / `is:issue`).
- UserSymbol: a variable declared in the document (`$name=...`), with the type
  inferred from its definition and its printed value.

Static symbols come from the YAML qualifier catalog shipped in
`query_dsl/data/qualifiers.yaml`, or from the file named by the
QDSL_CATALOG_PATH setting.

Resolution: static symbols are bound before user symbols and `get_first`
returns the earliest binding. Qualifier names never start with `$` and
variable names always do, so the two kinds do not collide through the grammar.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from os.path import join, dirname, abspath
from pathlib import Path
from typing import Optional, Union

import yaml

from query_dsl.config import settings
from query_dsl.dsl_logging import get_logger
from query_dsl.exceptions import CatalogError
from query_dsl.nodes import (
    Compare,
    Date,
    Literal,
    Node,
    Number,
    Query,
    QueryDocumentNode,
    Range,
    VariableDefinition,
    VariableName,
    print_node,
)

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Constants
THIS_DIR = dirname(abspath(__file__))
DEFAULT_CATALOG = join(THIS_DIR, "data", "qualifiers.yaml")

SORT_VALUES = (
    "comments-asc",
    "comments-desc",
    "created-asc",
    "created-desc",
    "updated-asc",
    "updated-desc",
    "reactions-+1-asc",
    "reactions-+1-desc",
    "reactions--1-asc",
    "reactions--1-desc",
    "reactions-smile-asc",
    "reactions-smile-desc",
    "reactions-heart-asc",
    "reactions-heart-desc",
    "reactions-tada-asc",
    "reactions-tada-desc",
    "interactions-asc",
    "interactions-desc",
)


class ValueType(Enum):
    LITERAL = "string"
    NUMBER = "number"
    DATE = "date"
    UNKNOWN = "unknown"


ValueSets = tuple  # tuple[tuple[str, ...], ...], ordered and disjoint


@dataclass(frozen=True)
class StaticSymbol:
    name: str
    value: Union[ValueType, ValueSets]

    @property
    def value_sets(self) -> Optional[ValueSets]:
        return self.value if isinstance(self.value, tuple) else None


@dataclass(frozen=True)
class UserSymbol:
    name: str
    type: ValueType
    value: str
    definition: Optional[VariableDefinition] = None


Symbol = Union[StaticSymbol, UserSymbol]


# ------------------------------------------------------------------------------
# Symbol table

class SymbolTable:
    """Name -> symbols mapping with first-match lookup."""

    def __init__(self, symbols=()):
        self._data: dict[str, list[Symbol]] = {}
        for symbol in symbols:
            self.add(symbol)

    @classmethod
    def from_catalog(cls, path: Optional[str] = None) -> "SymbolTable":
        return cls(load_catalog(path))

    def add(self, symbol: Symbol) -> None:
        self._data.setdefault(symbol.name, []).append(symbol)

    def get_first(self, name: str) -> Optional[Symbol]:
        bound = self._data.get(name)
        return bound[0] if bound else None

    def get_all(self, name: str) -> list[Symbol]:
        return list(self._data.get(name, ()))

    def update(self, document: QueryDocumentNode) -> None:
        """Replace all user symbols with the variable definitions of `document`."""
        for name in list(self._data):
            kept = [s for s in self._data[name] if not isinstance(s, UserSymbol)]
            if kept:
                self._data[name] = kept
            else:
                del self._data[name]

        for node in document.nodes:
            if not isinstance(node, VariableDefinition):
                continue
            symbol = UserSymbol(
                name=node.name.value,
                type=infer_value_type(node.value, self),
                value=print_node(node.value, document.text, self._user_value),
                definition=node,
            )
            self.add(symbol)
            logger.debug(f"Variable {symbol.name}: {symbol.type.value} = {symbol.value!r}")

    def _user_value(self, name: str) -> Optional[str]:
        symbol = self.get_first(name)
        return symbol.value if isinstance(symbol, UserSymbol) else None

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __len__(self) -> int:
        return sum(len(bound) for bound in self._data.values())


# ------------------------------------------------------------------------------
# Type inference

def infer_value_type(node: Node, symbols: SymbolTable) -> ValueType:
    """Best-effort scalar type of a value subtree."""
    if isinstance(node, Number):
        return ValueType.NUMBER
    if isinstance(node, Date):
        return ValueType.DATE
    if isinstance(node, Literal):
        return ValueType.LITERAL
    if isinstance(node, Compare):
        return infer_value_type(node.value, symbols)
    if isinstance(node, Range):
        boundary = node.open if node.open is not None else node.close
        return infer_value_type(boundary, symbols) if boundary is not None else ValueType.UNKNOWN
    if isinstance(node, VariableName):
        symbol = symbols.get_first(node.value)
        return symbol.type if isinstance(symbol, UserSymbol) else ValueType.UNKNOWN
    if isinstance(node, Query) and len(node.nodes) == 1:
        return infer_value_type(node.nodes[0], symbols)
    return ValueType.UNKNOWN


# ------------------------------------------------------------------------------
# Qualifier catalog

def load_catalog(path: Optional[str] = None) -> list[StaticSymbol]:
    """
    Load the built-in qualifiers from a YAML catalog.

    The catalog maps each qualifier name either to a scalar type name
    (`string`, `number`, `date`) or to `{sets: [[...], ...]}`, the ordered
    groups of mutually exclusive values.

    Raises:
        CatalogError: When the file cannot be read or an entry is malformed.
    """
    path = path or settings.CATALOG_PATH or DEFAULT_CATALOG
    catalog_file = Path(path)
    try:
        raw = yaml.safe_load(catalog_file.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"cannot read catalog ({e.strerror})", path) from e
    except yaml.YAMLError as e:
        raise CatalogError(f"invalid YAML: {e}", path) from e

    if not isinstance(raw, dict) or not isinstance(raw.get("qualifiers"), dict):
        raise CatalogError("expected a top-level 'qualifiers' mapping", path)

    symbols = []
    for name, entry in raw["qualifiers"].items():
        symbols.append(StaticSymbol(str(name), _parse_qualifier(str(name), entry, path)))

    logger.debug(f"Loaded {len(symbols)} qualifiers from {catalog_file.name}")
    return symbols


def _parse_qualifier(name, entry, path) -> Union[ValueType, ValueSets]:
    if isinstance(entry, str):
        try:
            value_type = ValueType(entry)
        except ValueError:
            raise CatalogError(f"qualifier '{name}' has unknown type '{entry}'", path) from None
        if value_type is ValueType.UNKNOWN:
            raise CatalogError(f"qualifier '{name}' has unknown type '{entry}'", path)
        return value_type

    sets = entry.get("sets") if isinstance(entry, dict) else None
    if not isinstance(sets, list) or not sets:
        raise CatalogError(f"qualifier '{name}' needs a type or a non-empty 'sets' list", path)

    value_sets = []
    seen: set[str] = set()
    for group in sets:
        if not isinstance(group, list) or not group:
            raise CatalogError(f"qualifier '{name}' has an empty or invalid value set", path)
        values = tuple(dict.fromkeys(str(v) for v in group))
        overlap = seen.intersection(values)
        if overlap:
            raise CatalogError(
                f"qualifier '{name}' lists {', '.join(sorted(overlap))} in more than one set", path
            )
        seen.update(values)
        value_sets.append(values)
    return tuple(value_sets)
