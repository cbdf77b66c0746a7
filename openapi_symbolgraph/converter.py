"""
Conversion entry points for OpenAPI Symbol Graph.

This module wires the loader, adapter, assembler and catalog writer together.
Parameters left as None fall back to the values in ``Settings``.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from openapi_symbolgraph.catalog.writer import CatalogWriter, make_directory, serialize_graph, write_text
from openapi_symbolgraph.config import Settings, get_settings
from openapi_symbolgraph.loader import load_document
from openapi_symbolgraph.mapping.assembler import GraphAssembler
from openapi_symbolgraph.schema.adapter import DocumentAdapter
from openapi_symbolgraph.schema.document_types import Document
from openapi_symbolgraph.schema.symbol_types import FormatVersion, GraphMetadata, SymbolGraph
from openapi_symbolgraph.schema.validator import GraphValidator

_NON_MODULE_CHARACTERS = re.compile(r"[^A-Za-z0-9_]")


def default_module_name(title: str) -> str:
    """
    Derive a module name from a document title.

    Args:
        title: Document title such as "Pet Store API"

    Returns:
        Title with everything but letters, digits and underscores removed,
        or "API" when nothing is left
    """
    return _NON_MODULE_CHARACTERS.sub("", title or "") or "API"


def graph_metadata(settings: Settings) -> GraphMetadata:
    """Build graph file metadata from settings."""
    parts = [int(part) for part in settings.format_version.split(".") if part.isdigit()]
    parts += [0] * (3 - len(parts))
    return GraphMetadata(
        format_version=FormatVersion(major=parts[0], minor=parts[1], patch=parts[2]),
        generator=settings.generator_name,
    )


def _assemble(
    document: Document,
    module_name: Optional[str],
    base_url: Optional[str],
    settings: Settings
) -> SymbolGraph:
    requested = module_name or settings.module_name
    if requested:
        name = default_module_name(requested)
        if name != requested:
            logger.warning(f"Module name {requested!r} is not a valid identifier, using {name!r}")
    else:
        name = default_module_name(document.info.title)
    assembler = GraphAssembler(
        base_url=base_url or settings.base_url,
        validator=GraphValidator(enabled=settings.validation_enabled),
        metadata=graph_metadata(settings),
    )
    return assembler.assemble(document, name)


def convert_document(
    raw: Dict[str, Any],
    module_name: Optional[str] = None,
    base_url: Optional[str] = None
) -> SymbolGraph:
    """
    Convert a parsed document into a symbol graph.

    Args:
        raw: Parsed document mapping
        module_name: Module name, reduced to letters, digits and underscores;
            derived from the document title when None
        base_url: Base URL for endpoint mixins; the first server URL when None

    Returns:
        Assembled symbol graph

    Raises:
        ParsingError: If the document is malformed
        UnsupportedInputFormat: If the document version is not supported
    """
    document = DocumentAdapter().normalize(raw)
    return _assemble(document, module_name, base_url, get_settings())


def convert_file(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    module_name: Optional[str] = None,
    base_url: Optional[str] = None
) -> SymbolGraph:
    """
    Convert a document file and write the symbol-graph JSON.

    Args:
        input_path: Path to a .json, .yaml or .yml document
        output_path: Target file; ``{module lowercased}.symbols.json`` in the
            configured output directory when None
        module_name: Module name, reduced to letters, digits and underscores;
            derived from the document title when None
        base_url: Base URL for endpoint mixins

    Returns:
        Assembled symbol graph

    Raises:
        ParsingError: If the document cannot be read or is malformed
        UnsupportedInputFormat: If the file or document version is not supported
        FileWriteFailure: If the output file cannot be written
    """
    settings = get_settings()
    document = DocumentAdapter(source=str(input_path)).normalize(load_document(input_path))
    graph = _assemble(document, module_name, base_url, settings)

    if output_path is None:
        output_path = Path(settings.output_directory) / f"{graph.module.name.lower()}.symbols.json"
    output_path = Path(output_path)
    make_directory(output_path.parent)
    write_text(output_path, serialize_graph(graph))
    logger.info(f"Wrote symbol graph for {graph.module.name} to {output_path}")
    return graph


def generate_catalog(
    input_path: Union[str, Path],
    output_directory: Optional[Union[str, Path]] = None,
    module_name: Optional[str] = None,
    base_url: Optional[str] = None,
    include_examples: Optional[bool] = None,
    overwrite: Optional[bool] = None
) -> Path:
    """
    Convert a document file and write a documentation catalog.

    Args:
        input_path: Path to a .json, .yaml or .yml document
        output_directory: Directory the catalog is created in
        module_name: Module name, reduced to letters, digits and underscores;
            derived from the document title when None
        base_url: Base URL for endpoint mixins
        include_examples: Whether example values are rendered into pages
        overwrite: Whether an existing catalog is replaced

    Returns:
        Path of the catalog directory

    Raises:
        ParsingError: If the document cannot be read or is malformed
        UnsupportedInputFormat: If the file or document version is not supported
        CatalogAlreadyExists: If the catalog exists and overwrite is disabled
        DirectoryCreationFailure: If a directory cannot be created
        FileWriteFailure: If a file cannot be written
    """
    settings = get_settings()
    document = DocumentAdapter(source=str(input_path)).normalize(load_document(input_path))
    graph = _assemble(document, module_name, base_url, settings)

    writer = CatalogWriter(
        output_directory=output_directory if output_directory is not None else settings.output_directory,
        include_examples=include_examples if include_examples is not None else settings.include_examples,
        overwrite=overwrite if overwrite is not None else settings.overwrite,
    )
    return writer.write(document, graph)
