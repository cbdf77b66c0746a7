"""
Markdown page rendering for documentation catalogs.

This module renders the module landing page, one page per endpoint and one
page per reusable schema. Rendering is pure; the writer decides where pages
go on disk.
"""

import json
import re
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openapi_symbolgraph.mapping.type_mapper import format_value, map_schema_type
from openapi_symbolgraph.schema.document_types import (
    Document,
    Example,
    MediaType,
    ObjectSchema,
    Operation,
    Parameter,
    ReferenceSchema,
)

UNTAGGED_TOPIC = "Other"
_UNSAFE_FILE_CHARACTERS = re.compile(r"[^A-Za-z0-9_.-]+")


def page_file_name(title: str) -> str:
    """File name for a page, with path separators and braces removed."""
    sanitized = title.replace("{", "").replace("}", "")
    sanitized = _UNSAFE_FILE_CHARACTERS.sub("_", sanitized).strip("_")
    return f"{sanitized or 'page'}.md"


def format_example_value(value: Any) -> str:
    """Render an example value as pretty-printed JSON, or as plain text when it is a string."""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, sort_keys=True, default=str)


def _format_allowed(values: Optional[List[Any]]) -> Optional[str]:
    if not isinstance(values, list) or not values:
        return None
    return ", ".join(format_value(value) for value in values)


def _schema_label(node: Any) -> str:
    if isinstance(node, ReferenceSchema):
        return f"``{node.name}``"
    return map_schema_type(node).canonical_type


def _render_example(example: Any) -> str:
    return f"## Example\n\n```json\n{format_example_value(example)}\n```\n\n"


def _render_examples(examples: Dict[str, Example]) -> str:
    content = "## Examples\n\n"
    for name in sorted(examples):
        example = examples[name]
        content += f"### {name}\n\n"
        if example.summary:
            content += f"{example.summary}\n\n"
        if example.description:
            content += f"{example.description}\n\n"
        if example.external_value:
            content += f"External value: {example.external_value}\n\n"
        elif example.value is not None:
            content += f"```json\n{format_example_value(example.value)}\n```\n\n"
    return content


def _render_media_type(media_type: MediaType, include_examples: bool) -> str:
    content = ""
    node = media_type.schema_node
    if isinstance(node, ReferenceSchema):
        content += f"Schema: ``{node.name}``\n\n"
    elif node is not None:
        content += f"Schema type: {map_schema_type(node).canonical_type}\n\n"

    if include_examples:
        if media_type.examples:
            content += _render_examples(media_type.examples)
        elif media_type.example is not None:
            content += _render_example(media_type.example)
    return content


def _render_parameter(parameter: Parameter, include_examples: bool) -> str:
    content = f"### {parameter.name}\n\n"
    if parameter.description:
        content += f"{parameter.description}\n\n"
    content += f"- In: {parameter.location}\n"
    content += f"- Required: {'Yes' if parameter.required else 'No'}\n"
    if parameter.deprecated:
        content += "- Deprecated: Yes\n"

    node = parameter.schema_node
    if node is not None:
        content += f"- Type: {_schema_label(node)}\n"
        if node.format:
            content += f"- Format: {node.format}\n"
        if node.default is not None:
            content += f"- Default: {format_value(node.default)}\n"
        allowed = _format_allowed(node.enum_values)
        if allowed:
            content += f"- Allowed values: {allowed}\n"
    content += "\n"

    if include_examples:
        example = parameter.example
        if example is None and node is not None:
            example = node.example
        if example is not None:
            content += f"#### Example\n\n```\n{format_example_value(example)}\n```\n\n"
        if parameter.examples:
            content += "#### Examples\n\n"
            for name in sorted(parameter.examples):
                item = parameter.examples[name]
                content += f"##### {name}\n\n"
                if item.summary:
                    content += f"{item.summary}\n\n"
                if item.description:
                    content += f"{item.description}\n\n"
                if item.value is not None:
                    content += f"```\n{format_example_value(item.value)}\n```\n\n"
    return content


def render_module_page(
    document: Document,
    module_name: str,
    endpoints: Sequence[Tuple[Operation, str]]
) -> str:
    """
    Render the catalog landing page.

    Args:
        document: Normalized document
        module_name: Module name used as the page title
        endpoints: Pairs of (operation, endpoint symbol title) in graph order

    Returns:
        Markdown text
    """
    content = f"# {module_name}\n\n"
    if document.info.description:
        content += f"{document.info.description}\n\n"

    content += "## Overview\n\n"
    counts: Dict[str, int] = defaultdict(int)
    links: Dict[str, List[str]] = defaultdict(list)
    for operation, title in endpoints:
        link = f"- ``{title}``"
        if operation.tags:
            for tag in operation.tags:
                counts[tag] += 1
                links[tag].append(link)
        else:
            counts[UNTAGGED_TOPIC] += 1
            links[UNTAGGED_TOPIC].append(link)
    for tag in sorted(counts):
        content += f"- {tag}: {counts[tag]} endpoints\n"
    content += "\n"
    if document.schemas:
        content += f"- {len(document.schemas)} data models\n\n"

    content += "## Topics\n\n"
    for tag in sorted(links):
        content += f"### {tag}\n\n"
        content += "\n".join(links[tag]) + "\n\n"
    if document.schemas:
        content += "### Data Models\n\n"
        for name in sorted(document.schemas):
            content += f"- ``{name}``\n"
        content += "\n"

    if document.servers:
        content += "## Servers\n\n"
        for server in document.servers:
            line = f"- {server.url}"
            if server.description:
                line += f": {server.description}"
            content += f"{line}\n"
        content += "\n"

    if document.info.version:
        content += "## Version\n\n"
        content += f"Current version: {document.info.version}\n\n"

    contact = document.info.contact
    if contact is not None:
        content += "## Contact\n\n"
        if contact.name:
            content += f"- Name: {contact.name}\n"
        if contact.email:
            content += f"- Email: {contact.email}\n"
        if contact.url:
            content += f"- URL: {contact.url}\n"
        content += "\n"
    return content


def render_endpoint_page(operation: Operation, include_examples: bool = True) -> str:
    """
    Render the page for one endpoint.

    Args:
        operation: Operation to document
        include_examples: Whether example values are rendered

    Returns:
        Markdown text
    """
    content = f"# {operation.method.value.upper()} {operation.path}\n\n"
    if operation.summary:
        content += f"{operation.summary}\n\n"
    if operation.description:
        content += f"{operation.description}\n\n"
    if operation.deprecated:
        content += "> Warning: This endpoint is deprecated.\n\n"

    if operation.parameters:
        content += "## Parameters\n\n"
        for parameter in operation.parameters:
            content += _render_parameter(parameter, include_examples)

    body = operation.request_body
    if body is not None:
        content += "## Request Body\n\n"
        if body.description:
            content += f"{body.description}\n\n"
        content += f"Required: {'Yes' if body.required else 'No'}\n\n"
        for media_type in sorted(body.content):
            content += f"### Media Type: {media_type}\n\n"
            content += _render_media_type(body.content[media_type], include_examples)

    if operation.responses:
        content += "## Responses\n\n"
        for status_code in sorted(operation.responses):
            response = operation.responses[status_code]
            content += f"### {status_code}\n\n"
            if response.description:
                content += f"{response.description}\n\n"
            for media_type in sorted(response.content):
                content += f"Media Type: {media_type}\n\n"
                content += _render_media_type(response.content[media_type], include_examples)

    if operation.security:
        content += "## Security\n\n"
        for requirement in operation.security:
            for scheme in sorted(requirement):
                content += f"### {scheme}\n\n"
                scopes = requirement[scheme]
                if scopes:
                    content += "Required scopes:\n\n"
                    content += "".join(f"- {scope}\n" for scope in scopes)
                    content += "\n"
    return content


def render_schema_page(name: str, node: Any, include_examples: bool = True) -> str:
    """
    Render the page for one reusable schema.

    Args:
        name: Schema name
        node: Schema node
        include_examples: Whether example values are rendered

    Returns:
        Markdown text
    """
    content = f"# {name}\n\n"
    if node.description:
        content += f"{node.description}\n\n"

    content += "## Type Information\n\n"
    content += f"- Type: {node.kind}\n"
    if node.format:
        content += f"- Format: {node.format}\n"
    if isinstance(node, ObjectSchema) and node.required:
        content += f"- Required properties: {', '.join(node.required)}\n"
    allowed = _format_allowed(node.enum_values)
    if allowed:
        content += f"- Allowed values: {allowed}\n"
    content += "\n"

    if isinstance(node, ObjectSchema) and node.properties:
        content += "## Properties\n\n"
        for prop_name in sorted(node.properties):
            prop = node.properties[prop_name]
            content += f"### {prop_name}\n\n"
            if prop.description:
                content += f"{prop.description}\n\n"
            content += f"- Type: {_schema_label(prop)}\n"
            if prop.format:
                content += f"- Format: {prop.format}\n"
            if prop.default is not None:
                content += f"- Default: {format_value(prop.default)}\n"
            prop_allowed = _format_allowed(prop.enum_values)
            if prop_allowed:
                content += f"- Allowed values: {prop_allowed}\n"
            content += "\n"
            if include_examples and prop.example is not None:
                content += f"Example:\n```\n{format_example_value(prop.example)}\n```\n\n"

    if include_examples and node.example is not None:
        content += _render_example(node.example)
    return content
