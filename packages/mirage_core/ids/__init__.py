"""Identifier helpers: diagnostic refcodes and request-id sequencing."""

from packages.mirage_core.ids.counter import RequestCounter, shared_request_counter
from packages.mirage_core.ids.refcode import REFCODE_ALPHABET, generate_refcode, is_refcode

__all__ = [
    "REFCODE_ALPHABET",
    "RequestCounter",
    "generate_refcode",
    "is_refcode",
    "shared_request_counter",
]
