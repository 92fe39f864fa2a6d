"""Unit tests for the recognized HTTP status code set."""

from __future__ import annotations

import pytest

from packages.mirage_core.http import StatusCode


@pytest.mark.parametrize(
    ("code", "description"),
    [
        (StatusCode.OK, "200 OK"),
        (StatusCode.NOT_FOUND, "404 Not Found"),
        (StatusCode.IM_A_TEAPOT, "418 I'm a Teapot"),
        (StatusCode.NETWORK_AUTHENTICATION_REQUIRED, "511 Network Authentication Required"),
    ],
)
def test_descriptions(code: StatusCode, description: str) -> None:
    """Descriptions should lead with the numeric code."""
    assert code.description == description


def test_every_member_has_a_description() -> None:
    """No member should be missing a reason phrase."""
    for code in StatusCode:
        assert code.description.startswith(f"{code.value} ")


def test_classification_ranges() -> None:
    """Success, client and server error predicates should follow their ranges."""
    assert StatusCode.OK.is_success
    assert StatusCode.IM_USED.is_success
    assert not StatusCode.MULTIPLE_CHOICES.is_success
    assert StatusCode.BAD_REQUEST.is_client_error
    assert not StatusCode.BAD_REQUEST.is_server_error
    assert StatusCode.BAD_GATEWAY.is_server_error


def test_parse_returns_none_for_unknown_codes() -> None:
    """Unknown codes should not map to a member."""
    assert StatusCode.parse(204) is StatusCode.NO_CONTENT
    assert StatusCode.parse(299) is None
    assert StatusCode.parse(509) is None
