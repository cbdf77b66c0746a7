"""
OpenAPI Symbol Graph

Converts OpenAPI 3.x documents into documentation symbol graphs and writes
documentation catalogs from them.
"""

from openapi_symbolgraph.converter import convert_document, convert_file, default_module_name, generate_catalog
from openapi_symbolgraph.loader import load_document
from openapi_symbolgraph.utils.logging import setup_logging

__version__ = "0.1.0"

__all__ = [
    "convert_document",
    "convert_file",
    "default_module_name",
    "generate_catalog",
    "load_document",
    "setup_logging",
]
