"""
Logging setup for OpenAPI Symbol Graph.
"""

import sys
from typing import Optional

from loguru import logger

from openapi_symbolgraph.config import get_settings

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Route loguru output to stderr at the given level.

    Args:
        level: Minimum level name, e.g. DEBUG or INFO. Defaults to the
            configured ``log_level`` setting.
    """
    if level is None:
        level = get_settings().log_level
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
