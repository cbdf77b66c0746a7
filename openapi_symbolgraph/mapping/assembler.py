"""
Graph assembler for OpenAPI Symbol Graph.

This module walks a normalized document and produces the complete symbol
graph: the module namespace, one endpoint per operation (with its parameters,
request body and responses), one schema per reusable schema (with its
properties and enumeration cases), and the security schemes, servers and
tags declared by the document.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from loguru import logger

from openapi_symbolgraph.mapping.symbol_factory import IDENTIFIER_PREFIXES, create_symbol, make_identifier
from openapi_symbolgraph.mapping.type_mapper import array_item_type, format_value, map_schema_type
from openapi_symbolgraph.schema.document_types import (
    Document,
    ObjectSchema,
    Operation,
    Parameter,
    RequestBody,
    Response,
    SecurityScheme,
    UndecodableSchema,
)
from openapi_symbolgraph.schema.symbol_types import (
    GraphMetadata,
    GraphModule,
    Relationship,
    Symbol,
    SymbolGraph,
    SymbolKind,
)
from openapi_symbolgraph.schema.validator import GraphValidator

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9]+")

ENDPOINT_MIXIN = "httpEndpoint"
PARAMETER_SOURCE_MIXIN = "httpParameterSource"
MEDIA_TYPE_MIXIN = "httpMediaType"


def sanitize_path(path: str) -> str:
    """
    Turn a path template into an identifier fragment.

    Runs of non-alphanumeric characters become a single underscore and
    leading or trailing underscores are dropped.

    Args:
        path: Path template such as /users/{id}

    Returns:
        Fragment such as users_id, or "root" when nothing is left
    """
    sanitized = _NON_IDENTIFIER.sub("_", path).strip("_")
    return sanitized or "root"


def derive_operation_title(operation: Operation) -> str:
    """Explicit operationId, or the lowercase verb joined to the sanitized path."""
    if operation.operation_id:
        return operation.operation_id
    return f"{operation.method.value}_{sanitize_path(operation.path)}"


def operation_documentation(operation: Operation) -> str:
    """Build the documentation text of an endpoint symbol."""
    documentation = ""
    if operation.summary:
        documentation += f"{operation.summary}\n\n"
    if operation.description:
        documentation += f"{operation.description}\n\n"
    documentation += f"Path: {operation.path}\n"
    documentation += f"Method: {operation.method.value.upper()}\n"
    if operation.tags:
        documentation += f"\nTags: {', '.join(operation.tags)}\n"
    if operation.deprecated:
        documentation += "\n⚠️ This endpoint is deprecated.\n"
    return documentation


def schema_documentation(name: str, node: Any) -> str:
    """Build the documentation text of a reusable schema symbol."""
    descriptor = map_schema_type(node)
    documentation = node.description or f"Schema for {name}"
    if descriptor.documentation:
        documentation += f"\n\nType Information:\n{descriptor.documentation}"
    return documentation


def property_documentation(name: str, node: Any, required: bool) -> str:
    """Build the documentation text of a property symbol."""
    descriptor = map_schema_type(node)
    documentation = node.description or f"Property {name}"
    documentation += f"\n\nType: {descriptor.canonical_type}\n"
    if required:
        documentation += "Required: yes\n"
    if descriptor.documentation:
        documentation += descriptor.documentation
    item_type = array_item_type(node)
    if item_type is not None:
        documentation += f"Item type: {item_type}\n"
    return documentation


def _schema_summary(node: Any) -> str:
    if node is None:
        return ""
    descriptor = map_schema_type(node)
    summary = f"Type: {descriptor.canonical_type}\n"
    if descriptor.documentation:
        summary += descriptor.documentation
    return summary


class _GraphBuilder:
    """
    Per-run symbol accumulator.

    Keeps symbols in insertion order and hands out unique identifiers,
    suffixing colliding local identifiers with _2, _3 and so on.
    """

    def __init__(self, module_name: str):
        self.module_name = module_name
        self.symbols: List[Symbol] = []
        self.relationships: List[Relationship] = []
        self.identifiers: Set[str] = set()

    def claim(self, kind: SymbolKind, local_identifier: str) -> str:
        """
        Reserve a unique local identifier for a symbol of ``kind``.

        Args:
            kind: Kind of the symbol about to be created
            local_identifier: Preferred local identifier

        Returns:
            The preferred local identifier, or a suffixed variant when taken
        """
        prefix = IDENTIFIER_PREFIXES[kind]
        candidate = local_identifier
        counter = 1
        while make_identifier(prefix, self.module_name, candidate) in self.identifiers:
            counter += 1
            candidate = f"{local_identifier}_{counter}"
        if candidate != local_identifier:
            logger.warning(
                f"Identifier collision for {make_identifier(prefix, self.module_name, local_identifier)}, "
                f"using {candidate}"
            )
        self.identifiers.add(make_identifier(prefix, self.module_name, candidate))
        return candidate

    def add(
        self,
        kind: SymbolKind,
        local_identifier: str,
        title: str,
        description: Optional[str],
        path_components: Sequence[str],
        parent: Optional[Symbol] = None,
        mixins: Optional[Dict[str, Dict[str, Any]]] = None
    ) -> Symbol:
        """Create a symbol for an already claimed local identifier and record it."""
        symbol, relationship = create_symbol(
            kind=kind,
            identifier_prefix=IDENTIFIER_PREFIXES[kind],
            module_name=self.module_name,
            local_identifier=local_identifier,
            title=title,
            description=description,
            path_components=path_components,
            parent_identifier=parent.identifier if parent else None,
            mixins=mixins,
        )
        self.symbols.append(symbol)
        if relationship is not None:
            self.relationships.append(relationship)
        return symbol


class GraphAssembler:
    """
    Graph assembler for OpenAPI Symbol Graph.

    This class turns a normalized document into a validated symbol graph.
    Instances hold configuration only, so one assembler can be reused across
    documents.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        validator: Optional[GraphValidator] = None,
        metadata: Optional[GraphMetadata] = None
    ):
        """
        Initialize graph assembler.

        Args:
            base_url: Base URL for endpoint mixins; the first server URL is used when None
            validator: Graph validator; a default enabled validator when None
            metadata: Graph file metadata; defaults when None
        """
        self.base_url = base_url
        self.validator = validator or GraphValidator()
        self.metadata = metadata or GraphMetadata()

    def assemble(self, document: Document, module_name: str) -> SymbolGraph:
        """
        Assemble a symbol graph.

        Args:
            document: Normalized document
            module_name: Sanitized module name

        Returns:
            SymbolGraph with the namespace as its first symbol

        Raises:
            GraphConsistencyError: If the assembled graph violates an invariant
        """
        symbols, relationships = self.assemble_symbols(document, module_name)
        logger.info(
            f"Assembled module {module_name}: {len(symbols)} symbols, {len(relationships)} relationships"
        )
        return SymbolGraph(
            metadata=self.metadata,
            module=GraphModule(name=module_name),
            symbols=tuple(symbols),
            relationships=tuple(relationships),
        )

    def assemble_symbols(
        self,
        document: Document,
        module_name: str
    ) -> Tuple[List[Symbol], List[Relationship]]:
        """
        Assemble and validate the symbols and relationships of a document.

        Args:
            document: Normalized document
            module_name: Sanitized module name

        Returns:
            Tuple of (symbols, relationships)

        Raises:
            GraphConsistencyError: If the assembled graph violates an invariant
        """
        builder = _GraphBuilder(module_name)

        namespace = builder.add(
            SymbolKind.NAMESPACE,
            builder.claim(SymbolKind.NAMESPACE, ""),
            title=module_name,
            description=document.info.description or document.info.title,
            path_components=[module_name],
        )

        base_url = self.base_url or (document.servers[0].url if document.servers else None)
        for operation in document.sorted_operations():
            self._add_operation(builder, namespace, operation, base_url)

        for name, node in document.sorted_schemas():
            self._add_schema(builder, namespace, name, node)

        for name in sorted(document.security_schemes):
            self._add_security_scheme(builder, namespace, name, document.security_schemes[name])

        for index, server in enumerate(document.servers, start=1):
            local = builder.claim(SymbolKind.SERVER, f"server{index}")
            builder.add(
                SymbolKind.SERVER,
                local,
                title=server.url,
                description=server.description,
                path_components=[module_name, local],
                parent=namespace,
            )

        for tag in document.tags:
            local = builder.claim(SymbolKind.TAG, f"tag.{tag.name}")
            builder.add(
                SymbolKind.TAG,
                local,
                title=tag.name,
                description=tag.description,
                path_components=[module_name, tag.name],
                parent=namespace,
            )

        self.validator.validate_graph(builder.symbols, builder.relationships)
        return builder.symbols, builder.relationships

    def _add_operation(
        self,
        builder: _GraphBuilder,
        namespace: Symbol,
        operation: Operation,
        base_url: Optional[str]
    ) -> None:
        title = builder.claim(SymbolKind.ENDPOINT, derive_operation_title(operation))
        mixins = {}
        if base_url:
            mixins[ENDPOINT_MIXIN] = {
                "method": operation.method.value.upper(),
                "baseURL": base_url,
                "path": operation.path,
            }

        endpoint = builder.add(
            SymbolKind.ENDPOINT,
            title,
            title=title,
            description=operation_documentation(operation),
            path_components=[builder.module_name, title],
            parent=namespace,
            mixins=mixins,
        )

        for parameter in operation.parameters:
            self._add_parameter(builder, endpoint, title, parameter)
        if operation.request_body is not None:
            self._add_request_body(builder, endpoint, title, operation.request_body)
        for status_code in sorted(operation.responses):
            self._add_response(builder, endpoint, title, status_code, operation.responses[status_code])

    def _add_parameter(
        self,
        builder: _GraphBuilder,
        endpoint: Symbol,
        endpoint_local: str,
        parameter: Parameter
    ) -> None:
        documentation = parameter.description or f"Parameter {parameter.name}"
        documentation += f"\n\nLocation: {parameter.location}\n"
        if parameter.required:
            documentation += "Required: yes\n"
        if parameter.deprecated:
            documentation += "Deprecated: yes\n"
        documentation += _schema_summary(parameter.schema_node)

        local = builder.claim(SymbolKind.PARAMETER, f"{endpoint_local}.{parameter.name}")
        builder.add(
            SymbolKind.PARAMETER,
            local,
            title=parameter.name,
            description=documentation,
            path_components=[*endpoint.path_components, parameter.name],
            parent=endpoint,
            mixins={PARAMETER_SOURCE_MIXIN: {"value": parameter.location}},
        )

    def _add_request_body(
        self,
        builder: _GraphBuilder,
        endpoint: Symbol,
        endpoint_local: str,
        request_body: RequestBody
    ) -> None:
        documentation = request_body.description or "Request body"
        documentation += "\n\n"
        if request_body.required:
            documentation += "Required: yes\n"
        for media_type in sorted(request_body.content):
            documentation += f"Content type: {media_type}\n"
            documentation += _schema_summary(request_body.content[media_type].schema_node)

        mixins = {}
        if request_body.content:
            mixins[MEDIA_TYPE_MIXIN] = {"value": sorted(request_body.content)[0]}

        local = builder.claim(SymbolKind.REQUEST_BODY, f"{endpoint_local}.requestBody")
        builder.add(
            SymbolKind.REQUEST_BODY,
            local,
            title="Request Body",
            description=documentation.rstrip("\n") + "\n",
            path_components=[*endpoint.path_components, "RequestBody"],
            parent=endpoint,
            mixins=mixins,
        )

    def _add_response(
        self,
        builder: _GraphBuilder,
        endpoint: Symbol,
        endpoint_local: str,
        status_code: str,
        response: Response
    ) -> None:
        documentation = response.description or f"Response {status_code}"
        documentation += f"\n\nStatus code: {status_code}\n"
        for media_type in sorted(response.content):
            documentation += f"Content type: {media_type}\n"
            documentation += _schema_summary(response.content[media_type].schema_node)

        local = builder.claim(SymbolKind.RESPONSE, f"{endpoint_local}.Response{status_code}")
        builder.add(
            SymbolKind.RESPONSE,
            local,
            title=f"Response {status_code}",
            description=documentation,
            path_components=[*endpoint.path_components, f"Response{status_code}"],
            parent=endpoint,
        )

    def _add_schema(self, builder: _GraphBuilder, namespace: Symbol, name: str, node: Any) -> None:
        if isinstance(node, UndecodableSchema):
            logger.warning(f"Schema {name} could not be decoded, emitting basic symbol: {node.error}")

        local = builder.claim(SymbolKind.SCHEMA, name)
        schema = builder.add(
            SymbolKind.SCHEMA,
            local,
            title=name,
            description=schema_documentation(name, node),
            path_components=[builder.module_name, name],
            parent=namespace,
        )

        if isinstance(node, ObjectSchema):
            for prop_name in sorted(node.properties):
                prop = node.properties[prop_name]
                prop_local = builder.claim(SymbolKind.PROPERTY, f"{local}.{prop_name}")
                builder.add(
                    SymbolKind.PROPERTY,
                    prop_local,
                    title=prop_name,
                    description=property_documentation(prop_name, prop, prop_name in node.required),
                    path_components=[builder.module_name, name, prop_name],
                    parent=schema,
                )

        enum_values = getattr(node, "enum_values", None)
        if isinstance(enum_values, list):
            for value in enum_values:
                case = format_value(value)
                case_local = builder.claim(SymbolKind.ENUM_CASE, f"{local}.{case}")
                builder.add(
                    SymbolKind.ENUM_CASE,
                    case_local,
                    title=case,
                    description=f"Allowed value {case} of {name}",
                    path_components=[builder.module_name, name, case],
                    parent=schema,
                )

    def _add_security_scheme(
        self,
        builder: _GraphBuilder,
        namespace: Symbol,
        name: str,
        scheme: SecurityScheme
    ) -> None:
        documentation = scheme.description or f"Security scheme {name}"
        documentation += f"\n\nType: {scheme.type}\n"
        if scheme.scheme:
            documentation += f"Scheme: {scheme.scheme}\n"
        if scheme.bearer_format:
            documentation += f"Bearer format: {scheme.bearer_format}\n"
        if scheme.parameter_name:
            documentation += f"Parameter: {scheme.parameter_name} ({scheme.location or 'header'})\n"
        if scheme.open_id_connect_url:
            documentation += f"OpenID Connect URL: {scheme.open_id_connect_url}\n"
        for flow_name in sorted(scheme.flows):
            flow = scheme.flows[flow_name]
            documentation += f"Flow: {flow_name}\n"
            if flow.scopes:
                documentation += f"Scopes: {', '.join(sorted(flow.scopes))}\n"

        local = builder.claim(SymbolKind.SECURITY_SCHEME, f"security.{name}")
        builder.add(
            SymbolKind.SECURITY_SCHEME,
            local,
            title=name,
            description=documentation,
            path_components=[builder.module_name, name],
            parent=namespace,
        )
