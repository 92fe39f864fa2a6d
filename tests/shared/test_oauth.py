"""Unit tests for the OAuth token model."""

from __future__ import annotations

from datetime import timedelta

from packages.mirage_core.formatting import utc_now
from packages.mirage_core.http import OAuthToken
from packages.mirage_core.jsoncoding import JsonCoder


def test_decodes_snake_case_wire_format() -> None:
    """Token responses should decode from their wire keys and stamp creation time."""
    token = JsonCoder().decode(
        OAuthToken,
        b'{"access_token": "a", "refresh_token": "r", "id_token": "i", "expires_in": 3600, "scope": "x"}',
    )

    assert token.access_token == "a"
    assert token.refresh_token == "r"
    assert token.id_token == "i"
    assert token.expires_in == 3600
    assert token.created_at is not None
    assert not token.is_expired


def test_encoding_omits_local_creation_time() -> None:
    """``created_at`` is local bookkeeping and should not be serialized."""
    text = JsonCoder().stringify(OAuthToken(access_token="a", expires_in=60))

    assert text is not None
    assert "created_at" not in text
    assert '"access_token": "a"' in text


def test_expiration_and_description_for_live_token() -> None:
    """A live token should report its expiration and remaining time."""
    created = utc_now()
    token = OAuthToken(access_token="a", expires_in=3 * 86400 + 60, created_at=created)

    assert token.expiration == created + timedelta(seconds=3 * 86400 + 60)
    assert not token.is_expired
    assert "expires on" in token.description
    assert token.description.endswith("(3 days)")


def test_expired_token_description() -> None:
    """An expired token should say so and how long ago."""
    token = OAuthToken(
        access_token="a",
        expires_in=60,
        created_at=utc_now() - timedelta(hours=2, minutes=1),
    )

    assert token.is_expired
    assert "expired on" in token.description
    assert token.description.endswith("(2 hours)")


def test_missing_expiry_fails_closed() -> None:
    """Tokens without expiry information should count as expired."""
    token = OAuthToken(access_token="a")

    assert token.expiration is None
    assert token.is_expired
    assert str(token) == "Authorization token expired."
