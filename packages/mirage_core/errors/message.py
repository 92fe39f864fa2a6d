"""Renderable message values consumed by presentation layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .types import MirageError


class Severity(IntEnum):
    """Message severity, ordered from least to most severe."""

    INFO = 0
    WARNING = 1
    ERROR = 2

    @property
    def title(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Message:
    """Message text with optional details, title, and severity."""

    summary: str
    details: str | None = None
    title: str | None = None
    severity: Severity = Severity.INFO

    @classmethod
    def info(cls, summary: str, *, details: str | None = None, title: str | None = None) -> Message:
        return cls(summary=summary, details=details, title=title, severity=Severity.INFO)

    @classmethod
    def warning(
        cls, summary: str, *, details: str | None = None, title: str | None = None
    ) -> Message:
        return cls(summary=summary, details=details, title=title, severity=Severity.WARNING)

    @classmethod
    def error(cls, summary: str, *, details: str | None = None, title: str | None = None) -> Message:
        return cls(summary=summary, details=details, title=title, severity=Severity.ERROR)

    @classmethod
    def from_error(
        cls,
        error: BaseException,
        *,
        details: str | None = None,
        title: str | None = None,
    ) -> Message:
        """Render an exception as an error message.

        Mirage errors contribute their clarification and alert title; any
        explicitly supplied ``details`` or ``title`` wins.
        """
        fallback = str(error) or type(error).__name__
        if isinstance(error, MirageError):
            text = error.clarification or fallback
            return cls(
                summary=text,
                details=details or text,
                title=title or error.alert_title,
                severity=Severity.ERROR,
            )
        return cls(summary=fallback, details=details or fallback, title=title, severity=Severity.ERROR)
