"""Leveled logging sink used by Mirage core components."""

from __future__ import annotations

import logging

from .config import NOTICE


class Log:
    """Thin wrapper exposing debug/info/notice/error/fault over ``logging``.

    Records are attributed to the caller's file and line rather than to this
    wrapper.
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, message: str) -> None:
        self._logger.debug(message, stacklevel=2)

    def info(self, message: str) -> None:
        self._logger.info(message, stacklevel=2)

    def notice(self, message: str) -> None:
        self._logger.log(NOTICE, message, stacklevel=2)

    def error(self, message: str, *, error: BaseException | None = None) -> None:
        """Log at error level; ``error`` is attached as the record's exception."""
        self._logger.error(message, exc_info=error, stacklevel=2)

    def fault(self, message: str, *, error: BaseException | None = None) -> None:
        self._logger.critical(message, exc_info=error, stacklevel=2)
