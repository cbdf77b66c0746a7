"""
Symbol factory for OpenAPI Symbol Graph.

This module builds canonical symbol records and the member-of relationship
that ties each one to its parent.
"""

from typing import Any, Dict, Optional, Sequence, Tuple

from openapi_symbolgraph.schema.symbol_types import Relationship, RelationshipKind, Symbol, SymbolKind

# Identifier prefix per symbol kind; operations and their parts use "f"
IDENTIFIER_PREFIXES: Dict[SymbolKind, str] = {
    SymbolKind.NAMESPACE: "s",
    SymbolKind.ENDPOINT: "f",
    SymbolKind.PARAMETER: "f",
    SymbolKind.REQUEST_BODY: "f",
    SymbolKind.RESPONSE: "f",
    SymbolKind.SCHEMA: "s",
    SymbolKind.PROPERTY: "s",
    SymbolKind.SECURITY_SCHEME: "s",
    SymbolKind.SERVER: "s",
    SymbolKind.TAG: "s",
    SymbolKind.ENUM_CASE: "s",
    SymbolKind.TYPE_ALIAS: "s",
}


def make_identifier(identifier_prefix: str, module_name: str, local_identifier: str) -> str:
    """
    Build a precise identifier.

    Args:
        identifier_prefix: Prefix such as "s" or "f"
        module_name: Sanitized module name
        local_identifier: Local part; empty for the namespace itself

    Returns:
        "{prefix}:{module}.{local}", or "{prefix}:{module}" when local is empty
    """
    identifier = f"{identifier_prefix}:{module_name}.{local_identifier}"
    if not local_identifier:
        identifier = identifier.rstrip(".")
    return identifier


def create_symbol(
    kind: SymbolKind,
    identifier_prefix: str,
    module_name: str,
    local_identifier: str,
    title: str,
    description: Optional[str],
    path_components: Sequence[str],
    parent_identifier: Optional[str] = None,
    mixins: Optional[Dict[str, Dict[str, Any]]] = None
) -> Tuple[Symbol, Optional[Relationship]]:
    """
    Create a symbol and, when it has a parent, its member-of relationship.

    The caller appends the relationship to the graph.

    Args:
        kind: Kind of API concept
        identifier_prefix: Identifier prefix, usually IDENTIFIER_PREFIXES[kind]
        module_name: Sanitized module name
        local_identifier: Local part of the identifier
        title: Display title
        description: Main documentation text; the title is used when absent
        path_components: Navigation path including the module name
        parent_identifier: Identifier of the owning symbol
        mixins: Compiler-specific annotations

    Returns:
        Tuple of (symbol, relationship or None)
    """
    identifier = make_identifier(identifier_prefix, module_name, local_identifier)

    documentation = description or title

    symbol = Symbol(
        identifier=identifier,
        kind=kind,
        title=title,
        documentation=documentation,
        path_components=tuple(path_components),
        parent_identifier=parent_identifier,
        mixins=mixins or {},
    )

    relationship = None
    if parent_identifier is not None:
        relationship = Relationship(
            source=parent_identifier,
            target=identifier,
            kind=RelationshipKind.MEMBER_OF,
        )
    return symbol, relationship
