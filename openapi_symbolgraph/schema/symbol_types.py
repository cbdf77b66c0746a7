"""
Symbol graph types for OpenAPI Symbol Graph.

This module defines the symbols and relationships of the documentation graph,
the fixed presentation table used to label symbols for the documentation
compiler, and the serialized graph envelope.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Define symbol kinds
class SymbolKind(str, Enum):
    """Kinds of API concepts a symbol can represent."""

    NAMESPACE = "namespace"  # Module root, one per graph
    ENDPOINT = "endpoint"  # Operation on a path
    PARAMETER = "parameter"  # Operation parameter
    REQUEST_BODY = "requestBody"  # Operation request body
    RESPONSE = "response"  # Operation response for one status code
    SCHEMA = "schema"  # Reusable schema definition
    PROPERTY = "property"  # Property of an object schema
    SECURITY_SCHEME = "securityScheme"  # Security scheme definition
    SERVER = "server"  # Server definition
    TAG = "tag"  # Operation grouping tag
    ENUM_CASE = "enumCase"  # Allowed value of an enumerated schema
    TYPE_ALIAS = "typeAlias"  # Alias for another type

# Define relationship kinds
class RelationshipKind(str, Enum):
    """Kinds of edges between symbols."""

    MEMBER_OF = "memberOf"  # Child belongs to parent

# Base model for graph records
class GraphModel(BaseModel):
    """Base model for serialized graph records."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

class Presentation(GraphModel):
    """How the documentation compiler labels a symbol."""

    identifier: str = Field(..., description="Raw kind identifier understood by the compiler")
    display_name: str = Field(..., description="Human readable kind name")

# Fixed kind-to-presentation table
SYMBOL_PRESENTATIONS: Dict[SymbolKind, Presentation] = {
    SymbolKind.NAMESPACE: Presentation(identifier="swift.module", display_name="Module"),
    SymbolKind.ENDPOINT: Presentation(identifier="swift.func", display_name="Function"),
    SymbolKind.PARAMETER: Presentation(identifier="swift.var", display_name="Parameter"),
    SymbolKind.REQUEST_BODY: Presentation(identifier="swift.struct", display_name="Structure"),
    SymbolKind.RESPONSE: Presentation(identifier="swift.enum", display_name="Enumeration"),
    SymbolKind.SCHEMA: Presentation(identifier="swift.struct", display_name="Structure"),
    SymbolKind.PROPERTY: Presentation(identifier="swift.property", display_name="Property"),
    SymbolKind.SECURITY_SCHEME: Presentation(identifier="swift.protocol", display_name="Protocol"),
    SymbolKind.SERVER: Presentation(identifier="swift.struct", display_name="Structure"),
    SymbolKind.TAG: Presentation(identifier="swift.enum", display_name="Enumeration"),
    SymbolKind.ENUM_CASE: Presentation(identifier="swift.enum.case", display_name="Case"),
    SymbolKind.TYPE_ALIAS: Presentation(identifier="swift.typealias", display_name="Type Alias"),
}

# Symbol
class Symbol(GraphModel):
    """
    Documentation symbol.

    Represents one API concept. ``path_components`` mirrors the ancestor chain
    from the namespace down to this symbol.
    """

    identifier: str = Field(..., description="Unique precise identifier")
    kind: SymbolKind = Field(..., description="Kind of API concept")
    title: str = Field(..., description="Display title")
    documentation: str = Field(..., description="Documentation text")
    path_components: Tuple[str, ...] = Field(..., description="Navigation path including the module name")
    parent_identifier: Optional[str] = Field(None, description="Identifier of the owning symbol")
    mixins: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Compiler-specific annotations")

    @property
    def presentation(self) -> Presentation:
        """Presentation label for this symbol's kind."""
        return SYMBOL_PRESENTATIONS[self.kind]

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize for the symbol-graph file."""
        data = {
            "identifier": self.identifier,
            "kind": self.kind.value,
            "title": self.title,
            "documentation": self.documentation,
            "pathComponents": list(self.path_components),
            "presentation": self.presentation.model_dump(by_alias=True),
        }
        if self.mixins:
            data["mixins"] = self.mixins
        return data

# Relationship
class Relationship(GraphModel):
    """Directed edge from a parent symbol to one of its members."""

    source: str = Field(..., description="Identifier of the parent symbol")
    target: str = Field(..., description="Identifier of the member symbol")
    kind: RelationshipKind = Field(RelationshipKind.MEMBER_OF, description="Relationship kind")

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize for the symbol-graph file."""
        return {"source": self.source, "target": self.target, "kind": self.kind.value}

# Graph envelope
class FormatVersion(GraphModel):
    """Semantic version of the symbol-graph file format."""

    major: int = Field(0, description="Major version")
    minor: int = Field(6, description="Minor version")
    patch: int = Field(0, description="Patch version")

class GraphMetadata(GraphModel):
    """Symbol-graph file metadata."""

    format_version: FormatVersion = Field(default_factory=FormatVersion, description="File format version")
    generator: str = Field("openapi-symbolgraph", description="Name of the producing tool")

class GraphModule(GraphModel):
    """Module the symbols belong to."""

    name: str = Field(..., description="Module name")
    platform: Dict[str, Any] = Field(default_factory=lambda: {"vendor": "OpenAPI"}, description="Target platform")

class SymbolGraph(GraphModel):
    """
    Symbol graph.

    Immutable result of one conversion run.
    """

    metadata: GraphMetadata = Field(default_factory=GraphMetadata, description="File metadata")
    module: GraphModule = Field(..., description="Module description")
    symbols: Tuple[Symbol, ...] = Field(default_factory=tuple, description="All symbols, namespace first")
    relationships: Tuple[Relationship, ...] = Field(default_factory=tuple, description="All relationships")

    @property
    def namespace(self) -> Symbol:
        """The module root symbol."""
        return self.symbols[0]

    def get_symbol(self, identifier: str) -> Optional[Symbol]:
        """Find a symbol by identifier."""
        for symbol in self.symbols:
            if symbol.identifier == identifier:
                return symbol
        return None

    def symbols_of_kind(self, kind: SymbolKind) -> List[Symbol]:
        """All symbols of the given kind, in graph order."""
        return [symbol for symbol in self.symbols if symbol.kind == kind]

    def members_of(self, identifier: str) -> List[Symbol]:
        """Symbols linked to ``identifier`` by a member-of relationship."""
        targets = [rel.target for rel in self.relationships if rel.source == identifier]
        by_id = {symbol.identifier: symbol for symbol in self.symbols}
        return [by_id[target] for target in targets if target in by_id]

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize the whole graph for the symbol-graph file."""
        return {
            "metadata": self.metadata.model_dump(by_alias=True),
            "module": self.module.model_dump(by_alias=True),
            "symbols": [symbol.to_json_dict() for symbol in self.symbols],
            "relationships": [rel.to_json_dict() for rel in self.relationships],
        }
