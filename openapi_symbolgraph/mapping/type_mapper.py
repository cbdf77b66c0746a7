"""
Type and schema mapper for OpenAPI Symbol Graph.

This module maps one schema node to a canonical type description plus the
constraint documentation shown on its symbol. The mapping is total: every
node, including placeholders and unrecognised shapes, produces a type.
"""

from typing import Any, List, NamedTuple, Optional

from openapi_symbolgraph.schema.document_types import (
    ArraySchema,
    BooleanSchema,
    CompositionSchema,
    IntegerSchema,
    NotSchema,
    NullSchema,
    NumberSchema,
    NumericBound,
    ObjectSchema,
    ReferenceSchema,
    StringSchema,
    UndecodableSchema,
    UnknownSchema,
)

FALLBACK_TYPE = "Any"
UNKNOWN_TYPE_NOTE = "Unknown or unspecified schema type."

# Canonical types selected by format
STRING_FORMAT_TYPES = {
    "date": "Date",
    "date-time": "Date",
    "uri": "URL",
    "uuid": "UUID",
    "byte": "Data",
    "binary": "Data",
}
NUMBER_FORMAT_TYPES = {"float": "Float", "double": "Double"}
INTEGER_FORMAT_TYPES = {"int32": "Int32", "int64": "Int64"}


class TypeDescriptor(NamedTuple):
    """Canonical type and constraint documentation for one schema node."""

    canonical_type: str
    documentation: str


def format_number(value: Any) -> str:
    """Render a numeric constraint, dropping the decimal point for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_value(value: Any) -> str:
    """Render an allowed value the way it appears in the document."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _bound_line(label: str, bound: Optional[NumericBound]) -> Optional[str]:
    if bound is None:
        return None
    suffix = " (exclusive)" if bound.exclusive else ""
    return f"{label}: {format_number(bound.value)}{suffix}"


def _combine(types: List[str], separator: str) -> str:
    if not types:
        return FALLBACK_TYPE
    if len(types) == 1:
        return types[0]
    return "(" + separator.join(types) + ")"


def _map_string(node: StringSchema, lines: List[str]) -> str:
    if node.pattern:
        lines.append(f"Pattern: {node.pattern}")
    if node.min_length > 0:
        lines.append(f"Minimum length: {node.min_length}")
    if node.max_length is not None:
        lines.append(f"Maximum length: {node.max_length}")
    return STRING_FORMAT_TYPES.get(node.format or "", "String")


def _map_numeric(node: Any, lines: List[str]) -> None:
    for line in (_bound_line("Minimum value", node.minimum), _bound_line("Maximum value", node.maximum)):
        if line:
            lines.append(line)
    if node.multiple_of is not None:
        lines.append(f"Must be multiple of: {format_number(node.multiple_of)}")


def _map_array(node: ArraySchema, lines: List[str]) -> str:
    if node.min_items > 0:
        lines.append(f"Minimum items: {node.min_items}")
    if node.max_items is not None:
        lines.append(f"Maximum items: {node.max_items}")
    if node.items is None:
        return f"[{FALLBACK_TYPE}]"

    item = map_schema_type(node.items)
    lines.append("Array items:")
    lines.append(f"type: {item.canonical_type}")
    lines.extend(item.documentation.splitlines())
    return f"[{item.canonical_type}]"


def _map_object(node: ObjectSchema, lines: List[str]) -> str:
    if node.required:
        lines.append(f"Required properties: {', '.join(node.required)}")

    if not node.properties:
        if node.additional_properties is not None:
            value = map_schema_type(node.additional_properties)
            return f"[String: {value.canonical_type}]"
        return f"[String: {FALLBACK_TYPE}]"

    members = []
    for name, prop in node.properties.items():
        mapped = map_schema_type(prop)
        members.append(f"{name}: {mapped.canonical_type}")
        if mapped.documentation:
            lines.append(f"{name}:")
            lines.extend(mapped.documentation.splitlines())
    return "(" + ", ".join(members) + ")"


def _map_composition(node: CompositionSchema, lines: List[str]) -> str:
    types = [map_schema_type(member).canonical_type for member in node.members]
    listed = ", ".join(types) if types else FALLBACK_TYPE
    if node.kind == "allOf":
        lines.append(f"Includes all properties of: {listed}")
        return _combine(types, " & ")
    if node.kind == "anyOf":
        lines.append(f"Could be any of: {listed}")
    else:
        lines.append(f"Must be exactly one of: {listed}")
    return _combine(types, " | ")


def map_schema_type(node: Any) -> TypeDescriptor:
    """
    Map a schema node to its canonical type and constraint documentation.

    Args:
        node: Any schema node variant

    Returns:
        TypeDescriptor with a non-empty canonical type; documentation lines are
        newline-terminated and may be empty
    """
    lines: List[str] = []
    schema_format = getattr(node, "format", None)
    if isinstance(schema_format, str) and schema_format:
        lines.append(f"Format: {schema_format}")

    if isinstance(node, StringSchema):
        canonical = _map_string(node, lines)
    elif isinstance(node, NumberSchema):
        _map_numeric(node, lines)
        canonical = NUMBER_FORMAT_TYPES.get(node.format or "", "Double")
    elif isinstance(node, IntegerSchema):
        _map_numeric(node, lines)
        canonical = INTEGER_FORMAT_TYPES.get(node.format or "", "Int")
    elif isinstance(node, BooleanSchema):
        canonical = "Bool"
    elif isinstance(node, ArraySchema):
        canonical = _map_array(node, lines)
    elif isinstance(node, ObjectSchema):
        canonical = _map_object(node, lines)
    elif isinstance(node, ReferenceSchema):
        canonical = node.name or FALLBACK_TYPE
        lines.append(f"Reference to `{node.name}`")
    elif isinstance(node, CompositionSchema):
        canonical = _map_composition(node, lines)
    elif isinstance(node, NotSchema):
        canonical = FALLBACK_TYPE
        lines.append(f"Must not be: {map_schema_type(node.negated).canonical_type}")
    elif isinstance(node, NullSchema):
        canonical = "Null"
        lines.append("Null schema type.")
    elif isinstance(node, UndecodableSchema):
        canonical = FALLBACK_TYPE
        lines.append(f"Schema decoding failed: {node.error}")
    else:
        canonical = FALLBACK_TYPE
        lines.append(UNKNOWN_TYPE_NOTE)
        if isinstance(node, UnknownSchema) and node.declared_type:
            lines.append(f"Declared type: {node.declared_type}")

    enum_values = getattr(node, "enum_values", None)
    if isinstance(enum_values, list) and enum_values:
        lines.append(f"Allowed values: {', '.join(format_value(value) for value in enum_values)}")
    if getattr(node, "nullable", False) is True and not isinstance(node, NullSchema):
        lines.append("Nullable: yes")

    return TypeDescriptor(canonical, "".join(f"{line}\n" for line in lines))


def array_item_type(node: Any) -> Optional[str]:
    """Canonical type of an array schema's items, or None for non-arrays."""
    if not isinstance(node, ArraySchema):
        return None
    if node.items is None:
        return FALLBACK_TYPE
    return map_schema_type(node.items).canonical_type
