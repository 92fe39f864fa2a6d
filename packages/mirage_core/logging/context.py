"""Correlation context attached to every Mirage log record.

Values live in a ``ContextVar`` so a sync call and concurrent async tasks each
see only the exchange they are running.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

from . import fields

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("mirage_log_context", default={})


def _stringified(values: Mapping[str, object]) -> dict[str, str]:
    return {str(key): str(value) for key, value in values.items() if value is not None}


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current context."""
    return dict(_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind fields until cleared; ``None`` values are skipped."""
    added = _stringified(values)
    if added:
        _CONTEXT.set({**_CONTEXT.get(), **added})


def clear_context(*keys: str) -> None:
    """Drop ``keys`` from the context, or everything when none are named."""
    if keys:
        _CONTEXT.set({key: value for key, value in _CONTEXT.get().items() if key not in keys})
    else:
        _CONTEXT.set({})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` for the duration of a block, then restore."""
    token = _CONTEXT.set({**_CONTEXT.get(), **_stringified(values)})
    try:
        yield
    finally:
        _CONTEXT.reset(token)


def exchange_context(*, refcode: str, request_id: int, method: str, url: str) -> Mapping[str, object]:
    """Fields identifying one HTTP exchange, for use with ``log_context``."""
    return dict(zip(fields.EXCHANGE_FIELDS, (refcode, request_id, method, url)))
