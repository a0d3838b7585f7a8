"""
Validation module for query documents.

- query_validators: document and query rules (qualifiers, values, ranges, sort)
- definition_validators: variable-definition rules
- diagnostics: the Diagnostic record returned by validation
"""

from query_dsl.validation.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    position_of,
)

from query_dsl.validation.definition_validators import (
    validate_variable_definition,
)

from query_dsl.validation.query_validators import (
    validate_document,
    validate_query,
)

__all__ = [
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "position_of",
    # Validators
    "validate_document",
    "validate_query",
    "validate_variable_definition",
]
