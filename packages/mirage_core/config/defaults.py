"""Built-in default configuration values for Mirage core.

These defaults are the final fallback in the configuration cascade:
CLI params > ENV vars > config file > built-in defaults.
"""

from __future__ import annotations

from typing import Any

BUILTIN_DEFAULTS: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "json_output": True,
        "service": "mirage",
        "environment": "dev",
    },
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": False,
        "log_options": [],
        "headers": {},
    },
}
