from query_dsl.nodes import (
    Any,
    Compare,
    Missing,
    QualifiedValue,
    Query,
    QueryDocumentNode,
    Range,
    SortBy,
    VariableDefinition,
    children,
    print_node,
)
from query_dsl.symbols import UserSymbol


def print_document_debug(document: QueryDocumentNode, symbols=None):
    text = document.text

    # -------- helpers --------
    def label(node):
        """One-line description of a node: kind, offsets and the interesting field."""
        cls = type(node).__name__
        span = f"{node.start}-{node.end}"
        if isinstance(node, QualifiedValue):
            return f"{cls} {span} {'-' if node.not_ else ''}{node.qualifier.value}"
        if isinstance(node, Compare):
            return f"{cls} {span} {node.cmp}"
        if isinstance(node, Any):
            return f"{cls} {span} {node.token_type.value}"
        if isinstance(node, Missing):
            return f"{cls} {span} {node.message!r}"
        if isinstance(node, (Query, VariableDefinition, Range, SortBy, QueryDocumentNode)):
            return f"{cls} {span}"
        return f"{cls} {span} {node.value!r}"

    def dump(node, depth):
        print("  " * depth + label(node))
        for child in children(node):
            dump(child, depth + 1)

    # -------- tree --------
    print("=== Document ===")
    for line in document.nodes:
        print(f"> {print_node(line, text, lambda name: name)}")
        dump(line, 1)

    # -------- variables --------
    if symbols is None:
        return
    variables = []
    for line in document.nodes:
        if isinstance(line, VariableDefinition):
            symbol = symbols.get_first(line.name.value)
            if isinstance(symbol, UserSymbol) and symbol.definition is line:
                variables.append(symbol)

    print("=== Variables ===")
    if not variables:
        print("  (none)")
    for symbol in variables:
        print(f"  {symbol.name}: {symbol.type.value} = {symbol.value!r}")
