"""Refcode generation helpers.

A refcode is a short opaque string placed at a call site and threaded into any
error raised there, so a reported failure can be traced back to its origin.
Codes use an alphabet without easily confused glyphs (no ``I``, ``L``, ``O``,
``Z``, ``0`` or ``1``).
"""

from __future__ import annotations

import secrets

REFCODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXY23456789"
REFCODE_LENGTH = 4

_ALPHABET_SET = frozenset(REFCODE_ALPHABET)


def generate_refcode(*, length: int = REFCODE_LENGTH) -> str:
    """Generate a random refcode from cryptographically secure bytes."""
    if length <= 0:
        raise ValueError("refcode length must be positive")
    entropy = secrets.token_bytes(length)
    return "".join(REFCODE_ALPHABET[byte % len(REFCODE_ALPHABET)] for byte in entropy)


def is_refcode(value: str) -> bool:
    """Return whether ``value`` is a non-empty string over the refcode alphabet."""
    return len(value) > 0 and all(char in _ALPHABET_SET for char in value)
