"""Configuration settings using Pydantic Settings.

Provides typed loader configuration with environment variable support.

Usage:
    from typeloader.config import LoaderSettings

    # Load from environment variables (TYPELOADER_*)
    settings = LoaderSettings()

    # Or override with explicit values
    settings = LoaderSettings(default_property_type="string")
"""

from __future__ import annotations

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for the config module. Install with: pip install typeloader"
    ) from e


class LoaderSettings(BaseSettings):  # type: ignore[misc]
    """Configuration of type resolution defaults.

    Attributes:
        default_base_type: Base of generic specifications without a `base`.
        default_property_type: Value type of properties without a `value_type`.
        list_base_type: Base of list shorthand specifications (`[element]`).

    Environment Variables:
        TYPELOADER_DEFAULT_BASE_TYPE
        TYPELOADER_DEFAULT_PROPERTY_TYPE
        TYPELOADER_LIST_BASE_TYPE
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPELOADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_base_type: str = "complex"
    default_property_type: str = "value"
    list_base_type: str = "list"
