"""Public shared error API for Mirage core."""

from . import codes
from .describe import DescriptionOptions, describe_error
from .message import Message, Severity
from .types import ErrorKind, MirageError, error_dataclass

__all__ = [
    "DescriptionOptions",
    "ErrorKind",
    "Message",
    "MirageError",
    "Severity",
    "codes",
    "describe_error",
    "error_dataclass",
]
