"""
Graph validator for OpenAPI Symbol Graph.

This module checks assembled symbols and relationships against the graph
invariants: identifiers are unique, relationships never dangle, and every
member-of edge agrees with the member's recorded parent.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from openapi_symbolgraph.errors import GraphConsistencyError
from openapi_symbolgraph.schema.symbol_types import Relationship, Symbol, SymbolKind


def find_graph_violations(
    symbols: Sequence[Symbol],
    relationships: Iterable[Relationship]
) -> List[str]:
    """
    Collect every invariant violation in a symbol graph.

    Args:
        symbols: All symbols of the graph
        relationships: All relationships of the graph

    Returns:
        Human readable violation messages, empty when the graph is consistent
    """
    violations = []
    seen = set()
    for symbol in symbols:
        if symbol.identifier in seen:
            violations.append(f"Duplicate symbol identifier: {symbol.identifier}")
        seen.add(symbol.identifier)

    namespaces = [symbol for symbol in symbols if symbol.kind == SymbolKind.NAMESPACE]
    if len(namespaces) != 1:
        violations.append(f"Expected exactly one namespace symbol, found {len(namespaces)}")
    elif namespaces[0].identifier.endswith("."):
        violations.append(f"Namespace identifier has a trailing separator: {namespaces[0].identifier}")

    parents = {symbol.identifier: symbol.parent_identifier for symbol in symbols}
    for rel in relationships:
        if rel.source not in seen:
            violations.append(f"Relationship source does not exist: {rel.source} -> {rel.target}")
        if rel.target not in seen:
            violations.append(f"Relationship target does not exist: {rel.source} -> {rel.target}")
        elif parents[rel.target] != rel.source:
            violations.append(
                f"Relationship {rel.source} -> {rel.target} disagrees with recorded parent "
                f"{parents[rel.target]}"
            )
    return violations


class GraphValidator:
    """
    Graph validator for OpenAPI Symbol Graph.

    This class provides methods for validating assembled symbols and
    relationships against the graph invariants.
    """

    def __init__(self, enabled: bool = True):
        """
        Initialize graph validator.

        Args:
            enabled: Whether validation is enabled
        """
        self.enabled = enabled

    def validate_graph(
        self,
        symbols: Sequence[Symbol],
        relationships: Sequence[Relationship]
    ) -> None:
        """
        Validate a graph, raising on the first inconsistency report.

        Args:
            symbols: All symbols of the graph
            relationships: All relationships of the graph

        Raises:
            GraphConsistencyError: If validation is enabled and an invariant is violated
        """
        if not self.enabled:
            logger.debug("Graph validation disabled, skipping consistency checks")
            return

        violations = find_graph_violations(symbols, relationships)
        if violations:
            for violation in violations:
                logger.error(f"Graph consistency error: {violation}")
            module = symbols[0].identifier if symbols else "<empty graph>"
            raise GraphConsistencyError(module, "; ".join(violations))

    def check_graph_consistency(
        self,
        symbols: Sequence[Symbol],
        relationships: Sequence[Relationship]
    ) -> Tuple[bool, Optional[str]]:
        """
        Check graph invariants without raising exceptions.

        Args:
            symbols: All symbols of the graph
            relationships: All relationships of the graph

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not self.enabled:
            return True, None

        violations = find_graph_violations(symbols, relationships)
        if violations:
            return False, "; ".join(violations)
        return True, None
