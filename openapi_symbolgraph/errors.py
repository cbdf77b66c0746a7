"""
Error types for OpenAPI Symbol Graph.

Document-level parsing and filesystem operations are the only steps that can
fail a conversion. Schema decoding failures are recoverable: the adapter turns
them into placeholder nodes and the run continues.
"""

from typing import Optional


class SymbolGraphError(RuntimeError):
    """Base exception for conversion and catalog failures."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class ParsingError(SymbolGraphError):
    """Raised when the input document is malformed and cannot be converted."""


class UnsupportedInputFormat(SymbolGraphError):
    """Raised for input files or document versions the converter does not read."""


class SchemaDecodingFailure(SymbolGraphError):
    """
    Raised when a single schema node cannot be decoded into the document model.

    ``path`` is the JSON pointer of the offending node.
    """


class GraphConsistencyError(SymbolGraphError):
    """Raised when an assembled graph violates identifier or relationship invariants."""


class CatalogAlreadyExists(SymbolGraphError):
    """Raised when the target catalog directory exists and overwrite was not requested."""

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(
            path,
            message or "catalog directory already exists (pass overwrite=True to replace it)",
        )


class DirectoryCreationFailure(SymbolGraphError):
    """Raised when a catalog directory cannot be created."""


class FileWriteFailure(SymbolGraphError):
    """Raised when a catalog file cannot be written."""
