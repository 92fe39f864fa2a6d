"""Stdout logging for applications embedding Mirage core.

``configure_logging`` installs one stdout handler on the root logger with
either newline-delimited JSON or a plain one-line format. Both formats carry
the bound correlation context and, for records raised from a Mirage error,
the error code, kind and diagnostics.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, TYPE_CHECKING, Any

from packages.mirage_core.errors.types import MirageError
from . import fields
from .context import bind_context, get_context

if TYPE_CHECKING:
    from packages.mirage_core.config import LoggingSettings

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")


class ContextFilter(logging.Filter):
    """Copy the current correlation context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


def _mirage_error(record: logging.LogRecord) -> MirageError | None:
    if record.exc_info and isinstance(record.exc_info[1], MirageError):
        return record.exc_info[1]
    return None


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            fields.CALL_SITE: f"{record.filename}:{record.lineno}",
            fields.FUNCTION: record.funcName,
        }
        payload.update(getattr(record, "context", None) or {})

        error = _mirage_error(record)
        if error is not None:
            payload[fields.ERROR_CODE] = error.code
            payload[fields.ERROR_KIND] = error.kind.value
            payload.setdefault(fields.REFCODE, error.refcode)
            payload[fields.EXCEPTION] = error.diagnostics
        elif record.exc_info:
            payload[fields.EXCEPTION] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


class PlainFormatter(logging.Formatter):
    """``<time> <LEVEL> <logger> <message> [file:line] key=value ...``"""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{self.formatTime(record, self.datefmt)} {record.levelname} {record.name} "
            f"{record.getMessage()} [{record.filename}:{record.lineno}]"
        )
        error = _mirage_error(record)
        if error is not None:
            line += f"\n{error.diagnostics}"
        elif record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        context = getattr(record, "context", None)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return line


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Route all logging through a single handler on ``stream`` (stdout).

    Calling again replaces the handler. ``service`` and ``environment`` are
    bound into the context of the calling thread.
    """
    resolved = level.upper()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(resolved)

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})


def configure_logging_from_settings(settings: LoggingSettings, *, stream: IO[str] | None = None) -> None:
    """Apply the ``logging`` section of ``MirageSettings``."""
    configure_logging(
        level=settings.level,
        json_output=settings.json_output,
        service=settings.service,
        environment=settings.environment,
        stream=stream,
    )
