"""JSON coding for Mirage core."""

from .coder import JsonCoder, JsonCoderConfig
from .errors import JsonError, JsonProcess

__all__ = ["JsonCoder", "JsonCoderConfig", "JsonError", "JsonProcess"]
