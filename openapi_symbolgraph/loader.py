"""
Document loader for OpenAPI Symbol Graph.

Reads a document file into plain mappings. JSON files are read with ``json``
and YAML files with PyYAML's safe loader.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from loguru import logger

from openapi_symbolgraph.errors import ParsingError, UnsupportedInputFormat

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


def parse_document_text(text: str, suffix: str, source: str = "<document>") -> Dict[str, Any]:
    """
    Parse document text by file suffix.

    Args:
        text: Raw file content
        suffix: Lowercase file suffix including the dot
        source: Name used in error messages

    Returns:
        Parsed root mapping

    Raises:
        UnsupportedInputFormat: If the suffix is neither JSON nor YAML
        ParsingError: If the text is malformed or its root is not a mapping
    """
    try:
        if suffix in JSON_SUFFIXES:
            data = json.loads(text)
        elif suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            raise UnsupportedInputFormat(source, f"unsupported file extension '{suffix}', expected .json, .yaml or .yml")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error(f"Failed to parse {source}: {str(e)}")
        raise ParsingError(source, f"malformed document: {str(e)}") from e

    if not isinstance(data, dict):
        raise ParsingError(source, f"document root must be a mapping, got {type(data).__name__}")
    return data


def load_document(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a document file.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        Parsed root mapping

    Raises:
        UnsupportedInputFormat: If the file extension is not supported
        ParsingError: If the file cannot be read or parsed
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in JSON_SUFFIXES + YAML_SUFFIXES:
        raise UnsupportedInputFormat(str(path), f"unsupported file extension '{suffix}', expected .json, .yaml or .yml")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read {path}: {str(e)}")
        raise ParsingError(str(path), f"cannot read file: {str(e)}") from e

    logger.debug(f"Loaded {len(text)} characters from {path}")
    return parse_document_text(text, suffix, str(path))
