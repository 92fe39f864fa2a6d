"""Public API for Mirage core configuration utilities."""

from .loader import get_settings, load_config, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    HttpSettings,
    LoggingSettings,
    MirageSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "HttpSettings",
    "LoggingSettings",
    "MirageSettings",
    "get_settings",
    "load_config",
    "load_settings",
]
