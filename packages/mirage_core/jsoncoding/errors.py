"""JSON coding error type."""

from __future__ import annotations

from dataclasses import field
from enum import Enum
from typing import ClassVar

from packages.mirage_core.errors.types import ErrorKind, MirageError, error_dataclass


class JsonProcess(str, Enum):
    """Direction of the failed JSON operation."""

    ENCODE = "encode"
    DECODE = "decode"


_DEFAULT_CLARIFICATIONS = {
    JsonProcess.ENCODE: "JSON encoding failed.",
    JsonProcess.DECODE: "JSON decoding failed.",
}

_DEFAULT_DETAILS = {
    JsonProcess.ENCODE: "Could not encode value.",
    JsonProcess.DECODE: "Could not decode value.",
}


@error_dataclass
class JsonError(MirageError):
    """Serialization or deserialization failure.

    ``data`` holds the raw bytes that failed to decode, when there were any.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.JSON
    default_alert_title: ClassVar[str | None] = "Mirage JSON Error"

    process: JsonProcess = JsonProcess.DECODE
    data: bytes | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.clarification is None:
            object.__setattr__(self, "clarification", _DEFAULT_CLARIFICATIONS[self.process])
        if self.details is None:
            object.__setattr__(self, "details", _DEFAULT_DETAILS[self.process])
        super().__post_init__()

    @property
    def json_text(self) -> str | None:
        """Return the offending payload as UTF-8 text when it decodes."""
        if self.data is None:
            return None
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return None
