"""
Pytest configuration and shared fixtures for the query-dsl test suite.
"""

import pytest
import tempfile
import shutil
from pathlib import Path

from query_dsl.language import build_document_str
from query_dsl.symbols import SymbolTable, StaticSymbol, ValueType
from query_dsl.validation import validate_document


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def temp_dir():
    """Create a temporary directory for query documents."""
    temp_dir = tempfile.mkdtemp(prefix="qdsl_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def catalog_symbols():
    """Return a symbol table built from the packaged qualifier catalog."""
    return SymbolTable.from_catalog()


@pytest.fixture
def small_symbols():
    """
    Return a hand-made symbol table with one qualifier of each shape.

    `label` is deliberately absent so it can be used as an unknown qualifier.
    """
    return SymbolTable([
        StaticSymbol("is", (("open", "closed"), ("pr", "issue"))),
        StaticSymbol("repo", ValueType.LITERAL),
        StaticSymbol("created", ValueType.DATE),
        StaticSymbol("comments", ValueType.NUMBER),
    ])


@pytest.fixture
def write_query_file(temp_dir):
    """Factory fixture to write query text to a temporary file."""
    def _write(content: str, filename: str = "queries.txt") -> Path:
        file_path = temp_dir / filename
        file_path.write_text(content, encoding="utf-8")
        return file_path
    return _write


@pytest.fixture
def check(catalog_symbols):
    """Factory fixture: parse text, register its variables, return the diagnostics."""
    def _check(text: str, symbols=None):
        symbols = symbols if symbols is not None else catalog_symbols
        document = build_document_str(text)
        symbols.update(document)
        return validate_document(document, symbols)
    return _check
