"""
Configuration module for OpenAPI Symbol Graph.

This module handles loading configuration from environment variables and provides
a settings object that can be used throughout the application.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
load_dotenv()

class Settings(BaseSettings):
    """Application settings loaded from OPENAPI_SYMBOLGRAPH_* environment variables."""

    # Conversion Configuration
    module_name: Optional[str] = None
    base_url: Optional[str] = None

    # Catalog Configuration
    output_directory: str = "."
    include_examples: bool = True
    overwrite: bool = False

    # Logging Configuration
    log_level: str = "INFO"

    # Graph Configuration
    validation_enabled: bool = True
    generator_name: str = "openapi-symbolgraph"
    format_version: str = "0.6.0"

    model_config = SettingsConfigDict(env_prefix="OPENAPI_SYMBOLGRAPH_", env_file=".env", extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings.

    Returns:
        Settings object with configuration values
    """
    return Settings()
