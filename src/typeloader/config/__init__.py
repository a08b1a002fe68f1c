"""Configuration module using Pydantic Settings.

Usage:
    from typeloader.config import LoaderSettings

    settings = LoaderSettings(default_base_type="complex")
"""

from typeloader.config.settings import LoaderSettings

__all__ = [
    "LoaderSettings",
]
