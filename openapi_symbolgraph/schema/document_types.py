"""
Document types for OpenAPI Symbol Graph.

This module defines the internal document model that every mapping and assembly
step works on. Schema nodes are tagged variants discriminated on ``kind`` so the
type mapper never has to inspect raw dictionaries.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# HTTP verbs that may appear as operations inside a path item
class HttpMethod(str, Enum):
    """HTTP methods valid in a path item."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"

# Base model for schema nodes
class SchemaBase(BaseModel):
    """Fields shared by every schema node variant."""

    model_config = ConfigDict(frozen=True)

    description: Optional[str] = Field(None, description="Schema description")
    format: Optional[str] = Field(None, description="Format hint such as date-time or int64")
    enum_values: Optional[List[Any]] = Field(None, description="Explicit list of allowed values")
    default: Optional[Any] = Field(None, description="Default value")
    example: Optional[Any] = Field(None, description="Example value")
    nullable: bool = Field(False, description="Whether null is accepted in addition to the type")

# Numeric bound with exclusivity flag
class NumericBound(BaseModel):
    """A minimum or maximum constraint."""

    model_config = ConfigDict(frozen=True)

    value: Union[int, float] = Field(..., description="Bound value")
    exclusive: bool = Field(False, description="Whether the bound itself is excluded")

class StringSchema(SchemaBase):
    """String schema with length and pattern constraints."""

    kind: Literal["string"] = "string"
    pattern: Optional[str] = Field(None, description="Regular expression the value must match")
    min_length: int = Field(0, description="Minimum length")
    max_length: Optional[int] = Field(None, description="Maximum length")

class NumberSchema(SchemaBase):
    """Floating point number schema."""

    kind: Literal["number"] = "number"
    minimum: Optional[NumericBound] = Field(None, description="Lower bound")
    maximum: Optional[NumericBound] = Field(None, description="Upper bound")
    multiple_of: Optional[Union[int, float]] = Field(None, description="Value must be a multiple of this")

class IntegerSchema(SchemaBase):
    """Integer schema."""

    kind: Literal["integer"] = "integer"
    minimum: Optional[NumericBound] = Field(None, description="Lower bound")
    maximum: Optional[NumericBound] = Field(None, description="Upper bound")
    multiple_of: Optional[Union[int, float]] = Field(None, description="Value must be a multiple of this")

class BooleanSchema(SchemaBase):
    """Boolean schema."""

    kind: Literal["boolean"] = "boolean"

class ArraySchema(SchemaBase):
    """Array schema with an optional item schema."""

    kind: Literal["array"] = "array"
    items: Optional["SchemaNode"] = Field(None, description="Schema of each item")
    min_items: int = Field(0, description="Minimum number of items")
    max_items: Optional[int] = Field(None, description="Maximum number of items")

class ObjectSchema(SchemaBase):
    """
    Object schema.

    Properties keep their declaration order. ``additional_properties`` is only
    set when the document declares a value schema for free-form keys.
    """

    kind: Literal["object"] = "object"
    properties: Dict[str, "SchemaNode"] = Field(default_factory=dict, description="Declared properties")
    required: List[str] = Field(default_factory=list, description="Names of required properties")
    additional_properties: Optional["SchemaNode"] = Field(None, description="Schema for undeclared keys")

class ReferenceSchema(SchemaBase):
    """Reference to another schema by JSON pointer."""

    kind: Literal["reference"] = "reference"
    ref: str = Field(..., description="Reference string, e.g. #/components/schemas/Pet")

    @property
    def name(self) -> str:
        """Last component of the reference."""
        return self.ref.rstrip("/").split("/")[-1] or self.ref

class CompositionSchema(SchemaBase):
    """
    Composition schema.

    Covers ``allOf``, ``anyOf`` and ``oneOf``; the variant is carried by ``kind``.
    """

    kind: Literal["allOf", "anyOf", "oneOf"]
    members: List["SchemaNode"] = Field(default_factory=list, description="Composed schemas")

class NotSchema(SchemaBase):
    """Schema that a value must not match."""

    kind: Literal["not"] = "not"
    negated: "SchemaNode" = Field(..., description="Schema the value must not match")

class NullSchema(SchemaBase):
    """Schema whose only value is null."""

    kind: Literal["null"] = "null"

class UnknownSchema(SchemaBase):
    """Schema without a recognisable type."""

    kind: Literal["unknown"] = "unknown"
    declared_type: Optional[str] = Field(None, description="Type string as written in the document, if any")

class UndecodableSchema(SchemaBase):
    """Placeholder for a schema node that failed to decode."""

    kind: Literal["undecodable"] = "undecodable"
    error: str = Field(..., description="Why decoding failed")

SchemaNode = Annotated[
    Union[
        StringSchema,
        NumberSchema,
        IntegerSchema,
        BooleanSchema,
        ArraySchema,
        ObjectSchema,
        ReferenceSchema,
        CompositionSchema,
        NotSchema,
        NullSchema,
        UnknownSchema,
        UndecodableSchema,
    ],
    Field(discriminator="kind"),
]

for _model in (ArraySchema, ObjectSchema, CompositionSchema, NotSchema):
    _model.model_rebuild()

# Document-level models
class Contact(BaseModel):
    """Contact information from the info object."""

    name: Optional[str] = Field(None, description="Contact name")
    email: Optional[str] = Field(None, description="Contact email")
    url: Optional[str] = Field(None, description="Contact URL")

class Info(BaseModel):
    """Document metadata."""

    title: str = Field("API", description="API title")
    version: Optional[str] = Field(None, description="API version")
    description: Optional[str] = Field(None, description="API description")
    contact: Optional[Contact] = Field(None, description="Contact information")

class Server(BaseModel):
    """Server the API is served from."""

    url: str = Field(..., description="Server URL")
    description: Optional[str] = Field(None, description="Server description")

class Tag(BaseModel):
    """Tag used to group operations."""

    name: str = Field(..., description="Tag name")
    description: Optional[str] = Field(None, description="Tag description")

class Example(BaseModel):
    """Named example of a parameter or payload."""

    summary: Optional[str] = Field(None, description="Short summary")
    description: Optional[str] = Field(None, description="Long description")
    value: Optional[Any] = Field(None, description="Literal example value")
    external_value: Optional[str] = Field(None, description="URL of an external example")

class MediaType(BaseModel):
    """Payload description for one media type."""

    schema_node: Optional[SchemaNode] = Field(None, description="Payload schema")
    example: Optional[Any] = Field(None, description="Single example value")
    examples: Dict[str, Example] = Field(default_factory=dict, description="Named examples")

class Parameter(BaseModel):
    """Operation parameter."""

    name: str = Field(..., description="Parameter name")
    location: str = Field(..., description="Location: path, query, header or cookie")
    description: Optional[str] = Field(None, description="Parameter description")
    required: bool = Field(False, description="Whether the parameter is required")
    deprecated: bool = Field(False, description="Whether the parameter is deprecated")
    schema_node: Optional[SchemaNode] = Field(None, description="Parameter schema")
    example: Optional[Any] = Field(None, description="Example value")
    examples: Dict[str, Example] = Field(default_factory=dict, description="Named examples")

class RequestBody(BaseModel):
    """Operation request body."""

    description: Optional[str] = Field(None, description="Request body description")
    required: bool = Field(False, description="Whether a body is required")
    content: Dict[str, MediaType] = Field(default_factory=dict, description="Payload per media type")

class Response(BaseModel):
    """Operation response for one status code."""

    description: str = Field("", description="Response description")
    content: Dict[str, MediaType] = Field(default_factory=dict, description="Payload per media type")

class Operation(BaseModel):
    """
    API operation.

    One instance per (path, method) pair. ``security`` is the effective
    requirement list, with the document-level default already applied.
    """

    path: str = Field(..., description="Path template")
    method: HttpMethod = Field(..., description="HTTP method")
    operation_id: Optional[str] = Field(None, description="Explicit operation identifier")
    summary: Optional[str] = Field(None, description="Short summary")
    description: Optional[str] = Field(None, description="Long description")
    tags: List[str] = Field(default_factory=list, description="Tags")
    deprecated: bool = Field(False, description="Whether the operation is deprecated")
    parameters: List[Parameter] = Field(default_factory=list, description="Parameters, path-level ones merged in")
    request_body: Optional[RequestBody] = Field(None, description="Request body")
    responses: Dict[str, Response] = Field(default_factory=dict, description="Responses by status code")
    security: List[Dict[str, List[str]]] = Field(default_factory=list, description="Security requirements")

class OAuthFlow(BaseModel):
    """OAuth2 flow definition."""

    authorization_url: Optional[str] = Field(None, description="Authorization URL")
    token_url: Optional[str] = Field(None, description="Token URL")
    refresh_url: Optional[str] = Field(None, description="Refresh URL")
    scopes: Dict[str, str] = Field(default_factory=dict, description="Available scopes")

class SecurityScheme(BaseModel):
    """Security scheme definition."""

    type: str = Field(..., description="Scheme type: http, apiKey, oauth2 or openIdConnect")
    description: Optional[str] = Field(None, description="Scheme description")
    scheme: Optional[str] = Field(None, description="HTTP authentication scheme")
    bearer_format: Optional[str] = Field(None, description="Bearer token format")
    parameter_name: Optional[str] = Field(None, description="API key parameter name")
    location: Optional[str] = Field(None, description="API key location")
    open_id_connect_url: Optional[str] = Field(None, description="OpenID Connect discovery URL")
    flows: Dict[str, OAuthFlow] = Field(default_factory=dict, description="OAuth2 flows by name")

class Document(BaseModel):
    """Normalized API description."""

    openapi: Optional[str] = Field(None, description="OpenAPI version string")
    info: Info = Field(default_factory=Info, description="Document metadata")
    servers: List[Server] = Field(default_factory=list, description="Servers")
    tags: List[Tag] = Field(default_factory=list, description="Declared tags")
    operations: List[Operation] = Field(default_factory=list, description="Operations in document order")
    schemas: Dict[str, SchemaNode] = Field(default_factory=dict, description="Reusable schemas by name")
    security_schemes: Dict[str, SecurityScheme] = Field(default_factory=dict, description="Security schemes by name")
    security: List[Dict[str, List[str]]] = Field(default_factory=list, description="Document-level security")

    def sorted_operations(self) -> List[Operation]:
        """Operations ordered by path, then method."""
        return sorted(self.operations, key=lambda op: (op.path, op.method.value))

    def sorted_schemas(self) -> List[Tuple[str, SchemaNode]]:
        """Reusable schemas as (name, node) pairs ordered by name."""
        return sorted(self.schemas.items(), key=lambda item: item[0])
