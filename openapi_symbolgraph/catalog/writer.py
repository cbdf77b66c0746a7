"""
Catalog writer for OpenAPI Symbol Graph.

This module lays out a documentation catalog directory on disk: the module
landing page, the serialized symbol graph, and one page per endpoint and
per reusable schema.
"""

import json
import shutil
from pathlib import Path
from typing import Set, Union

from loguru import logger

from openapi_symbolgraph.catalog.pages import (
    page_file_name,
    render_endpoint_page,
    render_module_page,
    render_schema_page,
)
from openapi_symbolgraph.errors import CatalogAlreadyExists, DirectoryCreationFailure, FileWriteFailure
from openapi_symbolgraph.schema.document_types import Document
from openapi_symbolgraph.schema.symbol_types import SymbolGraph, SymbolKind

CATALOG_SUFFIX = ".catalog"


def serialize_graph(graph: SymbolGraph) -> str:
    """Serialize a symbol graph as pretty-printed JSON with sorted keys."""
    return json.dumps(graph.to_json_dict(), indent=2, sort_keys=True, ensure_ascii=False, default=str)


def write_text(path: Path, content: str) -> None:
    """
    Write a UTF-8 text file.

    Args:
        path: Target file
        content: File content

    Raises:
        FileWriteFailure: If the file cannot be written
    """
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write {path}: {str(e)}")
        raise FileWriteFailure(str(path), str(e)) from e


def make_directory(path: Path) -> None:
    """
    Create a directory and its parents.

    Raises:
        DirectoryCreationFailure: If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {str(e)}")
        raise DirectoryCreationFailure(str(path), str(e)) from e


def claim_file_name(used: Set[str], title: str) -> str:
    """
    Claim a unique page file name within one directory.

    Names are compared case-insensitively. A colliding name gets ``_2``,
    ``_3``, ... appended to its stem.

    Args:
        used: Lowercased file names already taken in the directory
        title: Page title the file name is derived from

    Returns:
        The claimed file name
    """
    file_name = page_file_name(title)
    stem = file_name[:-len(".md")]
    candidate = file_name
    counter = 1
    while candidate.lower() in used:
        counter += 1
        candidate = f"{stem}_{counter}.md"
    if candidate != file_name:
        logger.warning(f"Page file name {file_name} for {title!r} already used, writing {candidate}")
    used.add(candidate.lower())
    return candidate


class CatalogWriter:
    """
    Catalog writer for OpenAPI Symbol Graph.

    This class writes a ``{Module}.catalog`` directory. Writes are sequential
    and the first failure aborts the rest.
    """

    def __init__(
        self,
        output_directory: Union[str, Path],
        include_examples: bool = True,
        overwrite: bool = False
    ):
        """
        Initialize catalog writer.

        Args:
            output_directory: Directory the catalog directory is created in
            include_examples: Whether example values are rendered into pages
            overwrite: Whether an existing catalog directory is replaced
        """
        self.output_directory = Path(output_directory)
        self.include_examples = include_examples
        self.overwrite = overwrite

    def catalog_path(self, module_name: str) -> Path:
        """Location of the catalog directory for ``module_name``."""
        return self.output_directory / f"{module_name}{CATALOG_SUFFIX}"

    def write(self, document: Document, graph: SymbolGraph) -> Path:
        """
        Write a documentation catalog.

        Args:
            document: Normalized document the graph was assembled from
            graph: Assembled symbol graph

        Returns:
            Path of the catalog directory

        Raises:
            CatalogAlreadyExists: If the catalog exists and overwrite is disabled
            DirectoryCreationFailure: If a directory cannot be created or replaced
            FileWriteFailure: If a file cannot be written
        """
        module_name = graph.module.name
        catalog = self.catalog_path(module_name)
        self._prepare(catalog)

        make_directory(catalog)

        endpoints = list(zip(document.sorted_operations(), graph.symbols_of_kind(SymbolKind.ENDPOINT)))
        write_text(
            catalog / f"{module_name}.md",
            render_module_page(document, module_name, [(operation, symbol.title) for operation, symbol in endpoints]),
        )
        write_text(catalog / f"{module_name.lower()}.symbols.json", serialize_graph(graph))

        if endpoints:
            endpoints_directory = catalog / "Endpoints"
            make_directory(endpoints_directory)
            used: Set[str] = set()
            for operation, symbol in endpoints:
                write_text(
                    endpoints_directory / claim_file_name(used, symbol.title),
                    render_endpoint_page(operation, self.include_examples),
                )

        if document.schemas:
            schemas_directory = catalog / "Schemas"
            make_directory(schemas_directory)
            used = set()
            for name, node in document.sorted_schemas():
                write_text(
                    schemas_directory / claim_file_name(used, name),
                    render_schema_page(name, node, self.include_examples),
                )

        logger.info(f"Wrote catalog {catalog}: {len(endpoints)} endpoint pages, {len(document.schemas)} schema pages")
        return catalog

    def _prepare(self, catalog: Path) -> None:
        if not catalog.exists():
            return
        if not self.overwrite:
            logger.error(f"Catalog already exists: {catalog}")
            raise CatalogAlreadyExists(str(catalog))

        logger.info(f"Replacing existing catalog {catalog}")
        try:
            if catalog.is_dir():
                shutil.rmtree(catalog)
            else:
                catalog.unlink()
        except OSError as e:
            logger.error(f"Failed to remove existing catalog {catalog}: {str(e)}")
            raise DirectoryCreationFailure(str(catalog), str(e)) from e
