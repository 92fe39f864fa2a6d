"""Rendering helpers that turn arbitrary exceptions into diagnostic text."""

from __future__ import annotations

from enum import Flag

from .types import MirageError


class DescriptionOptions(Flag):
    """Sections included by ``describe_error``."""

    MINIMAL = 0
    DETAILS = 1 << 1
    UNDERLYING_ERRORS = 1 << 2
    RECOVERY = 1 << 3
    USER_INFO = 1 << 4
    EXCEPTION_INFO = 1 << 5

    BASIC = DETAILS
    VERBOSE = DETAILS | UNDERLYING_ERRORS | RECOVERY | USER_INFO | EXCEPTION_INFO


def describe_error(error: BaseException, options: DescriptionOptions) -> str:
    """Describe one error; Mirage errors expose their structured fields."""
    lines: list[str] = []

    if isinstance(error, MirageError):
        lines.append(error.summary)
        if error.clarification:
            lines.append(error.clarification)
        if DescriptionOptions.DETAILS in options and error.details:
            lines.append(error.details)
        if DescriptionOptions.RECOVERY in options and error.recovery:
            lines.append(error.recovery)
        if DescriptionOptions.USER_INFO in options and error.user_info:
            lines.append("\n" + repr(dict(error.user_info)))
        if DescriptionOptions.UNDERLYING_ERRORS in options and error.underlying_errors:
            lines.append("\nUnderlying Errors:")
            lines.extend(describe_error(cause, options) for cause in error.underlying_errors)
    else:
        lines.append(str(error) or type(error).__name__)
        if DescriptionOptions.EXCEPTION_INFO in options:
            lines.append(f"\nException: {type(error).__module__}.{type(error).__qualname__}")

    return "\n".join(lines)
