"""Public logging API for Mirage core.

Standard-library ``logging`` with stdout emission, a ``NOTICE`` level and
``contextvars``-based correlation fields.
"""

from .config import (
    NOTICE,
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    configure_logging,
    configure_logging_from_settings,
)
from .context import bind_context, clear_context, exchange_context, get_context, log_context
from .sink import Log

__all__ = [
    "NOTICE",
    "ContextFilter",
    "JsonFormatter",
    "Log",
    "PlainFormatter",
    "bind_context",
    "clear_context",
    "configure_logging",
    "configure_logging_from_settings",
    "exchange_context",
    "get_context",
    "log_context",
]
