"""
Exceptions raised by query-dsl.

Validation findings are never raised; they are returned as diagnostics.
These exceptions cover setup problems such as an unreadable qualifier catalog.
"""


class QueryDslError(Exception):
    """Base class for query-dsl errors."""


class CatalogError(QueryDslError):
    """The qualifier catalog is missing or malformed."""

    def __init__(self, message: str, path=None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
