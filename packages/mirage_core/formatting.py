"""Diagnostic text helpers for dates, durations, and byte counts.

These helpers render the short strings used in request summaries, log lines,
and error details. They are deliberately locale-independent so log output is
stable across hosts.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

_BYTE_UNITS = ("KB", "MB", "GB", "TB")
_SUMMARY_TEXT_LIMIT = 1024


def to_utc(value: datetime) -> datetime:
    """Convert a datetime to UTC, treating naive values as already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def iso8601(value: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with second precision.

    Example: ``2025-03-04T05:06:07Z``.
    """
    return to_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_byte_count(count: int) -> str:
    """Render a byte count using binary (memory) units."""
    if count < 1024:
        return "1 byte" if count == 1 else f"{count} bytes"

    value = float(count)
    unit = _BYTE_UNITS[0]
    for unit in _BYTE_UNITS:
        value /= 1024.0
        if value < 1024.0:
            break

    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {unit}"


def duration_string(start: datetime, end: datetime) -> str:
    """Render elapsed time as ``"<n> ms"`` under one second, else ``"<n.nn> s"``."""
    elapsed = (end - start).total_seconds()
    if elapsed < 1.0:
        return f"{int(math.ceil(elapsed * 1000.0))} ms"
    return f"{elapsed:1.2f} s"


def duration_description(start: datetime, end: datetime) -> str:
    """Render the coarsest non-zero unit between two instants.

    Order is irrelevant; the absolute distance is described, for example
    ``"3 days"`` or ``"just now"`` under one minute.
    """
    seconds = abs((to_utc(end) - to_utc(start)).total_seconds())
    units = (
        ("year", 365 * 86400),
        ("month", 30 * 86400),
        ("week", 7 * 86400),
        ("day", 86400),
        ("hour", 3600),
        ("minute", 60),
    )
    for name, size in units:
        amount = int(seconds // size)
        if amount != 0:
            return f"{amount} {name}" + ("" if amount == 1 else "s")
    return "just now"


def data_summary(data: bytes) -> str:
    """Summarize a byte blob as short UTF-8 text when possible, else its size."""
    if 0 < len(data) <= _SUMMARY_TEXT_LIMIT:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            pass
    return format_byte_count(len(data))
