"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .interchange import InterchangeConfig, get_interchange_config
from .logging import configure_logging
from .registry import MAX_ID, MIN_ID, RegistryConfig, get_registry_config

__all__ = [
    "MAX_ID",
    "MIN_ID",
    "ConfigurationError",
    "InterchangeConfig",
    "RegistryConfig",
    "configure_logging",
    "get_interchange_config",
    "get_registry_config",
]
