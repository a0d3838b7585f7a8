"""
Variable-definition validation.

A definition (`$name=...`) must denote a single value: it may not contain OR
and may not reference the variable it defines. Only direct self-references
are detected; cycles through other definitions are not.
"""

from query_dsl.nodes import Any, TokenType, VariableDefinition, VariableName, walk
from query_dsl.validation.diagnostics import Diagnostic, DiagnosticKind


def validate_variable_definition(definition: VariableDefinition, bucket: list) -> None:
    def visit(node):
        if isinstance(node, Any) and node.token_type is TokenType.OR:
            bucket.append(Diagnostic(node, "OR is not supported when defining a variable"))
        if isinstance(node, VariableName) and node.value == definition.name.value:
            bucket.append(Diagnostic(
                node,
                "Cannot reference a variable from its definition",
                kind=DiagnosticKind.STRUCTURAL,
            ))

    walk(definition.value, visit)
