"""Semantic validation for a search-query language."""

__version__ = "0.1.0"
