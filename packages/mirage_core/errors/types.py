"""Canonical Mirage error type shared by every core subsystem.

``MirageError`` carries one field contract for all failures: a refcode for
call-site correlation, user-facing text (alert title, clarification,
recovery), developer-facing details, the causal chain, and an untyped
``user_info`` side channel for programmatic handling. Concrete kinds
(``UrlError``, ``JsonError``, ``HttpError``, ``CsvError``) are thin frozen
subclasses tagged with an ``ErrorKind`` so callers can either match on
``error.kind`` or catch a concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, TypeVar, dataclass_transform

_E = TypeVar("_E", bound=type[BaseException])

# Interpreter-managed exception state, written by raise, contextlib and add_note.
_EXCEPTION_STATE = frozenset(
    {"__traceback__", "__cause__", "__context__", "__suppress_context__", "__notes__"}
)


@dataclass_transform(frozen_default=True, field_specifiers=(field,))
def error_dataclass(cls: _E) -> _E:
    """Make an exception class a frozen dataclass.

    Declared fields cannot be reassigned, while the interpreter can still
    record tracebacks, causes and notes on raised instances.
    """
    cls = dataclass(frozen=True, eq=False)(cls)
    frozen_setattr = cls.__setattr__

    def __setattr__(self: BaseException, name: str, value: Any) -> None:
        if name in _EXCEPTION_STATE:
            BaseException.__setattr__(self, name, value)
        else:
            frozen_setattr(self, name, value)

    cls.__setattr__ = __setattr__  # type: ignore[method-assign]
    return cls


class ErrorKind(str, Enum):
    """Subsystem tag carried by every Mirage error."""

    UNSPECIFIED = "unspecified"
    URL = "url"
    JSON = "json"
    HTTP = "http"
    CSV = "csv"


@error_dataclass
class MirageError(Exception):
    """Base error for all Mirage core failures.

    Instances are immutable. Unset ``alert_title`` and ``clarification``
    fall back to per-kind defaults declared on the subclass.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNSPECIFIED
    default_alert_title: ClassVar[str | None] = None
    default_clarification: ClassVar[str | None] = None

    code: str | None = None
    refcode: str | None = None
    alert_title: str | None = None
    clarification: str | None = None
    details: str | None = None
    recovery: str | None = None
    underlying_errors: tuple[BaseException, ...] = ()
    user_info: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.alert_title is None and self.default_alert_title is not None:
            object.__setattr__(self, "alert_title", self.default_alert_title)
        if self.clarification is None and self.default_clarification is not None:
            object.__setattr__(self, "clarification", self.default_clarification)
        object.__setattr__(self, "underlying_errors", tuple(self.underlying_errors))
        object.__setattr__(self, "user_info", dict(self.user_info))

    @property
    def summary(self) -> str:
        """Short, non-technical message derived from the refcode."""
        if self.refcode:
            return f"Error (Reference {self.refcode})"
        return type(self).__name__

    @property
    def diagnostics(self) -> str:
        """Verbose multi-line description including underlying errors."""
        from .describe import DescriptionOptions, describe_error

        return describe_error(self, DescriptionOptions.VERBOSE)

    def __str__(self) -> str:
        """Return the most specific human-readable text available."""
        text = " ".join(part for part in (self.clarification, self.details) if part)
        if not text:
            return self.summary
        if self.refcode:
            return f"[{self.refcode}] {text}"
        return text
