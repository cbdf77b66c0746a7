"""
Document adapter for OpenAPI Symbol Graph.

This module converts the raw mapping produced by the document parser into the
typed document model. It is the only place that looks at raw keys; everything
downstream works on ``Document`` and schema-node variants.
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from openapi_symbolgraph.errors import ParsingError, SchemaDecodingFailure, UnsupportedInputFormat
from openapi_symbolgraph.schema.document_types import (
    ArraySchema,
    BooleanSchema,
    CompositionSchema,
    Contact,
    Document,
    Example,
    HttpMethod,
    Info,
    IntegerSchema,
    MediaType,
    NotSchema,
    NullSchema,
    NumberSchema,
    NumericBound,
    OAuthFlow,
    ObjectSchema,
    Operation,
    Parameter,
    ReferenceSchema,
    RequestBody,
    Response,
    SchemaNode,
    SecurityScheme,
    Server,
    StringSchema,
    Tag,
    UndecodableSchema,
    UnknownSchema,
)

HTTP_METHODS = {method.value for method in HttpMethod}
COMPOSITION_KEYWORDS = ("allOf", "anyOf", "oneOf")
MAX_REFERENCE_DEPTH = 16


def escape_pointer_token(token: str) -> str:
    """Escape a key for use inside a JSON pointer."""
    return token.replace("~", "~0").replace("/", "~1")


def _unescape_pointer_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _flag(value: Any, default: bool) -> bool:
    """Boolean keyword value; anything but a real boolean yields ``default``."""
    if isinstance(value, bool):
        return value
    return default


class DocumentAdapter:
    """
    Adapter from raw parsed documents to the typed document model.

    This class normalizes one document at a time. Schema decoding failures are
    isolated per schema: the failing node becomes an ``UndecodableSchema``
    placeholder and the rest of the document is still converted.
    """

    def __init__(self, source: str = "<document>"):
        """
        Initialize document adapter.

        Args:
            source: Name of the input (usually its file path), used in error messages
        """
        self.source = source
        self._raw: Dict[str, Any] = {}

    def normalize(self, raw: Any) -> Document:
        """
        Normalize a raw parsed document.

        Args:
            raw: Mapping produced by the JSON/YAML parser

        Returns:
            Typed document

        Raises:
            ParsingError: If the document structure is malformed
            UnsupportedInputFormat: If the document is not OpenAPI 3.x
        """
        if not isinstance(raw, dict):
            raise ParsingError(self.source, f"document root must be a mapping, got {type(raw).__name__}")
        self._raw = raw

        version = self._check_version(raw)
        components = self._mapping(raw.get("components"), "#/components")
        raw_schemas = self._mapping(components.get("schemas"), "#/components/schemas")
        paths = self._mapping(raw.get("paths"), "#/paths")

        document_security = self._security(raw.get("security"))
        operations = []
        for path, path_item in paths.items():
            operations.extend(self._path_operations(str(path), path_item, document_security))

        schemas = {}
        for name, raw_schema in raw_schemas.items():
            pointer = f"#/components/schemas/{escape_pointer_token(str(name))}"
            schemas[str(name)] = self.decode_schema_or_placeholder(raw_schema, pointer)

        document = Document(
            openapi=version,
            info=self._info(raw.get("info")),
            servers=self._servers(raw.get("servers")),
            tags=self._tags(raw.get("tags")),
            operations=operations,
            schemas=schemas,
            security_schemes=self._security_schemes(components.get("securitySchemes")),
            security=document_security,
        )
        logger.debug(
            f"Normalized {self.source}: {len(document.operations)} operations, "
            f"{len(document.schemas)} schemas"
        )
        return document

    # Document structure

    def _check_version(self, raw: Dict[str, Any]) -> Optional[str]:
        if "swagger" in raw:
            raise UnsupportedInputFormat(
                self.source, f"Swagger {raw['swagger']} documents are not supported, convert to OpenAPI 3.x"
            )
        version = _optional_str(raw.get("openapi"))
        if version is not None and not version.startswith("3."):
            raise UnsupportedInputFormat(self.source, f"unsupported OpenAPI version {version}")
        return version

    def _mapping(self, value: Any, pointer: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ParsingError(self.source, f"{pointer} must be a mapping, got {type(value).__name__}")
        return value

    def _list(self, value: Any, pointer: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning(f"Ignoring {pointer} in {self.source}: expected a list, got {type(value).__name__}")
            return []
        return value

    def _info(self, raw: Any) -> Info:
        raw = self._mapping(raw, "#/info")
        contact = None
        raw_contact = raw.get("contact")
        if isinstance(raw_contact, dict):
            contact = Contact(
                name=_optional_str(raw_contact.get("name")),
                email=_optional_str(raw_contact.get("email")),
                url=_optional_str(raw_contact.get("url")),
            )
        return Info(
            title=_optional_str(raw.get("title")) or "API",
            version=_optional_str(raw.get("version")),
            description=_optional_str(raw.get("description")),
            contact=contact,
        )

    def _servers(self, raw: Any) -> List[Server]:
        servers = []
        for entry in self._list(raw, "#/servers"):
            if isinstance(entry, dict) and entry.get("url"):
                servers.append(Server(url=str(entry["url"]), description=_optional_str(entry.get("description"))))
            else:
                logger.warning(f"Skipping malformed server entry in {self.source}: {entry!r}")
        return servers

    def _tags(self, raw: Any) -> List[Tag]:
        tags = []
        for entry in self._list(raw, "#/tags"):
            if isinstance(entry, dict) and entry.get("name"):
                tags.append(Tag(name=str(entry["name"]), description=_optional_str(entry.get("description"))))
            else:
                logger.warning(f"Skipping malformed tag entry in {self.source}: {entry!r}")
        return tags

    def _security(self, raw: Any) -> List[Dict[str, List[str]]]:
        requirements = []
        for entry in self._list(raw, "security"):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping malformed security requirement in {self.source}: {entry!r}")
                continue
            requirements.append({
                str(name): [str(scope) for scope in scopes] if isinstance(scopes, list) else []
                for name, scopes in entry.items()
            })
        return requirements

    def _security_schemes(self, raw: Any) -> Dict[str, SecurityScheme]:
        schemes = {}
        for name, entry in self._mapping(raw, "#/components/securitySchemes").items():
            entry = self._resolve(entry)
            if not isinstance(entry, dict) or not entry.get("type"):
                logger.warning(f"Skipping malformed security scheme '{name}' in {self.source}")
                continue
            flows = {}
            raw_flows = entry.get("flows")
            for flow_name, flow in (raw_flows.items() if isinstance(raw_flows, dict) else []):
                if isinstance(flow, dict):
                    scopes = flow.get("scopes")
                    flows[str(flow_name)] = OAuthFlow(
                        authorization_url=_optional_str(flow.get("authorizationUrl")),
                        token_url=_optional_str(flow.get("tokenUrl")),
                        refresh_url=_optional_str(flow.get("refreshUrl")),
                        scopes={str(k): str(v) for k, v in scopes.items()} if isinstance(scopes, dict) else {},
                    )
            schemes[str(name)] = SecurityScheme(
                type=str(entry["type"]),
                description=_optional_str(entry.get("description")),
                scheme=_optional_str(entry.get("scheme")),
                bearer_format=_optional_str(entry.get("bearerFormat")),
                parameter_name=_optional_str(entry.get("name")),
                location=_optional_str(entry.get("in")),
                open_id_connect_url=_optional_str(entry.get("openIdConnectUrl")),
                flows=flows,
            )
        return schemes

    # Operations

    def _path_operations(
        self,
        path: str,
        path_item: Any,
        document_security: List[Dict[str, List[str]]]
    ) -> List[Operation]:
        path_item = self._resolve(path_item)
        if not isinstance(path_item, dict):
            logger.warning(f"Skipping path '{path}' in {self.source}: path item is not a mapping")
            return []

        shared_parameters = self._parameters(path_item.get("parameters"), path)
        operations = []
        for method, raw_operation in path_item.items():
            method = str(method).lower()
            if method not in HTTP_METHODS:
                continue
            if not isinstance(raw_operation, dict):
                logger.warning(f"Skipping {method.upper()} {path} in {self.source}: operation is not a mapping")
                continue

            parameters = {(p.name, p.location): p for p in shared_parameters}
            for parameter in self._parameters(raw_operation.get("parameters"), path):
                parameters[(parameter.name, parameter.location)] = parameter

            security = document_security
            if raw_operation.get("security") is not None:
                security = self._security(raw_operation.get("security"))

            tags = raw_operation.get("tags") or []
            operations.append(Operation(
                path=path,
                method=HttpMethod(method),
                operation_id=_optional_str(raw_operation.get("operationId")),
                summary=_optional_str(raw_operation.get("summary")),
                description=_optional_str(raw_operation.get("description")),
                tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
                deprecated=_flag(raw_operation.get("deprecated"), False),
                parameters=list(parameters.values()),
                request_body=self._request_body(raw_operation.get("requestBody"), path, method),
                responses=self._responses(raw_operation.get("responses"), path, method),
                security=security,
            ))
        return operations

    def _parameters(self, raw: Any, path: str) -> List[Parameter]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"Ignoring parameters of '{path}' in {self.source}: expected a list")
            return []

        parameters = []
        for index, entry in enumerate(raw):
            entry = self._resolve(entry)
            if not isinstance(entry, dict) or not entry.get("name") or not entry.get("in"):
                logger.warning(f"Skipping parameter #{index} of '{path}' in {self.source}: missing name or location")
                continue
            location = str(entry["in"])
            pointer = f"#/paths/{escape_pointer_token(path)}/parameters/{index}/schema"
            schema_node = None
            if entry.get("schema") is not None:
                schema_node = self.decode_schema_or_placeholder(entry["schema"], pointer)
            parameters.append(Parameter(
                name=str(entry["name"]),
                location=location,
                description=_optional_str(entry.get("description")),
                required=_flag(entry.get("required"), location == "path"),
                deprecated=_flag(entry.get("deprecated"), False),
                schema_node=schema_node,
                example=entry.get("example"),
                examples=self._examples(entry.get("examples")),
            ))
        return parameters

    def _request_body(self, raw: Any, path: str, method: str) -> Optional[RequestBody]:
        raw = self._resolve(raw)
        if raw is None:
            return None
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring request body of {method.upper()} {path} in {self.source}: not a mapping")
            return None
        pointer = f"#/paths/{escape_pointer_token(path)}/{method}/requestBody/content"
        return RequestBody(
            description=_optional_str(raw.get("description")),
            required=_flag(raw.get("required"), False),
            content=self._content(raw.get("content"), pointer),
        )

    def _responses(self, raw: Any, path: str, method: str) -> Dict[str, Response]:
        if not isinstance(raw, dict):
            return {}
        responses = {}
        for status_code, entry in raw.items():
            status_code = str(status_code)
            entry = self._resolve(entry)
            if not isinstance(entry, dict):
                logger.warning(f"Skipping response {status_code} of {method.upper()} {path} in {self.source}")
                continue
            pointer = (
                f"#/paths/{escape_pointer_token(path)}/{method}/responses/"
                f"{escape_pointer_token(status_code)}/content"
            )
            responses[status_code] = Response(
                description=_optional_str(entry.get("description")) or "",
                content=self._content(entry.get("content"), pointer),
            )
        return responses

    def _content(self, raw: Any, pointer: str) -> Dict[str, MediaType]:
        if not isinstance(raw, dict):
            return {}
        content = {}
        for media_type, entry in raw.items():
            if not isinstance(entry, dict):
                entry = {}
            schema_node = None
            if entry.get("schema") is not None:
                schema_pointer = f"{pointer}/{escape_pointer_token(str(media_type))}/schema"
                schema_node = self.decode_schema_or_placeholder(entry["schema"], schema_pointer)
            content[str(media_type)] = MediaType(
                schema_node=schema_node,
                example=entry.get("example"),
                examples=self._examples(entry.get("examples")),
            )
        return content

    def _examples(self, raw: Any) -> Dict[str, Example]:
        if not isinstance(raw, dict):
            return {}
        examples = {}
        for name, entry in raw.items():
            entry = self._resolve(entry)
            if not isinstance(entry, dict):
                continue
            examples[str(name)] = Example(
                summary=_optional_str(entry.get("summary")),
                description=_optional_str(entry.get("description")),
                value=entry.get("value"),
                external_value=_optional_str(entry.get("externalValue")),
            )
        return examples

    def _resolve(self, value: Any) -> Any:
        """
        Follow local ``$ref`` chains for non-schema objects.

        Unresolvable references, including references into other documents,
        resolve to None.
        """
        depth = 0
        while isinstance(value, dict) and "$ref" in value:
            ref = value["$ref"]
            if depth >= MAX_REFERENCE_DEPTH:
                logger.warning(f"Reference chain too deep at {ref} in {self.source}")
                return None
            if not isinstance(ref, str) or not ref.startswith("#/"):
                logger.warning(f"Cannot resolve reference {ref!r} in {self.source}: only local references are followed")
                return None
            target: Any = self._raw
            for token in ref[2:].split("/"):
                token = _unescape_pointer_token(token)
                if isinstance(target, dict) and token in target:
                    target = target[token]
                elif isinstance(target, list) and token.isdigit() and int(token) < len(target):
                    target = target[int(token)]
                else:
                    logger.warning(f"Cannot resolve reference {ref} in {self.source}: target does not exist")
                    return None
            value = target
            depth += 1
        return value

    # Schemas

    def decode_schema_or_placeholder(self, raw: Any, pointer: str) -> SchemaNode:
        """
        Decode a schema, degrading to a placeholder node on failure.

        Args:
            raw: Raw schema value
            pointer: JSON pointer of the schema, for diagnostics

        Returns:
            Decoded schema node, or an ``UndecodableSchema`` carrying the failure reason
        """
        try:
            return self.decode_schema(raw, pointer)
        except SchemaDecodingFailure as e:
            logger.warning(f"Schema decoding failed in {self.source}: {e}")
            description = raw.get("description") if isinstance(raw, dict) else None
            return UndecodableSchema(
                error=str(e),
                description=description if isinstance(description, str) else None,
            )

    def decode_schema(self, raw: Any, pointer: str) -> SchemaNode:
        """
        Decode one raw schema node into its typed variant.

        Args:
            raw: Raw schema value
            pointer: JSON pointer of the schema, for diagnostics

        Returns:
            Decoded schema node

        Raises:
            SchemaDecodingFailure: If the node, or any nested node, has an invalid shape
        """
        if not isinstance(raw, dict):
            raise SchemaDecodingFailure(pointer, f"expected a schema mapping, got {type(raw).__name__}")
        try:
            return self._decode(raw, pointer)
        except ValidationError as e:
            raise SchemaDecodingFailure(pointer, f"invalid schema value: {e.errors()[0].get('msg', str(e))}")

    def _decode(self, raw: Dict[str, Any], pointer: str) -> SchemaNode:
        common = self._common_fields(raw, pointer)

        if "$ref" in raw:
            ref = raw["$ref"]
            if not isinstance(ref, str):
                raise SchemaDecodingFailure(pointer, "$ref must be a string")
            return ReferenceSchema(ref=ref, **common)

        for keyword in COMPOSITION_KEYWORDS:
            if keyword in raw:
                members = raw[keyword]
                if not isinstance(members, list):
                    raise SchemaDecodingFailure(pointer, f"{keyword} must be a list")
                return CompositionSchema(
                    kind=keyword,
                    members=[
                        self.decode_schema(member, f"{pointer}/{keyword}/{index}")
                        for index, member in enumerate(members)
                    ],
                    **common,
                )

        if "not" in raw:
            return NotSchema(negated=self.decode_schema(raw["not"], f"{pointer}/not"), **common)

        schema_type = self._schema_type(raw, pointer)
        if schema_type == "string":
            return StringSchema(
                pattern=_optional_str(raw.get("pattern")),
                min_length=raw.get("minLength") or 0,
                max_length=raw.get("maxLength"),
                **common,
            )
        if schema_type in ("number", "integer"):
            model = NumberSchema if schema_type == "number" else IntegerSchema
            return model(
                minimum=self._bound(raw, "minimum", "exclusiveMinimum", pointer),
                maximum=self._bound(raw, "maximum", "exclusiveMaximum", pointer),
                multiple_of=raw.get("multipleOf"),
                **common,
            )
        if schema_type == "boolean":
            return BooleanSchema(**common)
        if schema_type == "array":
            items = raw.get("items")
            return ArraySchema(
                items=self.decode_schema(items, f"{pointer}/items") if items is not None else None,
                min_items=raw.get("minItems") or 0,
                max_items=raw.get("maxItems"),
                **common,
            )
        if schema_type == "object":
            return self._decode_object(raw, pointer, common)
        if schema_type == "null":
            return NullSchema(**common)
        return UnknownSchema(declared_type=schema_type, **common)

    def _decode_object(self, raw: Dict[str, Any], pointer: str, common: Dict[str, Any]) -> ObjectSchema:
        raw_properties = raw.get("properties") or {}
        if not isinstance(raw_properties, dict):
            raise SchemaDecodingFailure(pointer, "properties must be a mapping")
        required = raw.get("required") or []
        if not isinstance(required, list):
            raise SchemaDecodingFailure(pointer, "required must be a list of property names")

        properties = {
            str(name): self.decode_schema(value, f"{pointer}/properties/{escape_pointer_token(str(name))}")
            for name, value in raw_properties.items()
        }
        additional = raw.get("additionalProperties")
        additional_properties = None
        if isinstance(additional, dict):
            additional_properties = self.decode_schema(additional, f"{pointer}/additionalProperties")
        return ObjectSchema(
            properties=properties,
            required=[str(name) for name in required],
            additional_properties=additional_properties,
            **common,
        )

    def _common_fields(self, raw: Dict[str, Any], pointer: str) -> Dict[str, Any]:
        enum_values = raw.get("enum")
        if enum_values is not None and not isinstance(enum_values, list):
            raise SchemaDecodingFailure(pointer, "enum must be a list")
        description = raw.get("description")
        if description is not None and not isinstance(description, str):
            raise SchemaDecodingFailure(pointer, "description must be a string")
        schema_format = raw.get("format")
        if schema_format is not None and not isinstance(schema_format, str):
            raise SchemaDecodingFailure(pointer, "format must be a string")

        nullable = _flag(raw.get("nullable"), False)
        raw_type = raw.get("type")
        if isinstance(raw_type, list) and "null" in raw_type:
            nullable = True
        return {
            "description": description,
            "format": schema_format,
            "enum_values": enum_values,
            "default": raw.get("default"),
            "example": raw.get("example"),
            "nullable": nullable,
        }

    def _schema_type(self, raw: Dict[str, Any], pointer: str) -> Optional[str]:
        raw_type = raw.get("type")
        if isinstance(raw_type, list):
            concrete = [str(entry) for entry in raw_type if entry != "null"]
            if concrete:
                return concrete[0]
            return "null" if raw_type else None
        if raw_type is None:
            if "properties" in raw or "additionalProperties" in raw:
                return "object"
            if "items" in raw:
                return "array"
            return None
        if not isinstance(raw_type, str):
            raise SchemaDecodingFailure(pointer, f"type must be a string or list, got {type(raw_type).__name__}")
        return raw_type

    def _bound(self, raw: Dict[str, Any], key: str, exclusive_key: str, pointer: str) -> Optional[NumericBound]:
        value = raw.get(key)
        exclusive = raw.get(exclusive_key)
        if exclusive is None or isinstance(exclusive, bool):
            if value is None:
                return None
            return NumericBound(value=value, exclusive=bool(exclusive))
        if not isinstance(exclusive, (int, float)):
            raise SchemaDecodingFailure(pointer, f"{exclusive_key} must be a boolean or a number")
        return NumericBound(value=exclusive, exclusive=True)
