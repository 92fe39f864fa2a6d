"""Unit tests for request/response value types."""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from packages.mirage_core.http import (
    ClientRequest,
    ClientResponse,
    ContentType,
    LogOptions,
    Method,
    Payload,
    StatusCode,
)
from packages.mirage_core.ids import RequestCounter


def _client_request(content: bytes | None = None, payload: Payload | None = None) -> ClientRequest:
    return ClientRequest.create(
        refcode="M001",
        request=httpx.Request("POST", "https://api.example.test/v1/items", content=content),
        payload=payload,
        counter=RequestCounter(start=41),
    )


def test_content_type_values_and_parsing() -> None:
    """Known header values should parse back to their content types."""
    multipart = ContentType.multipart_form("B0UND")

    assert ContentType.JSON.value == "application/json"
    assert multipart.value == "multipart/form-data; boundary=B0UND"
    assert multipart.boundary == "B0UND"
    assert ContentType.parse(multipart.value) == multipart
    assert ContentType.parse("text/plain") is ContentType.TEXT
    assert ContentType.parse("application/octet-stream") is ContentType.BINARY
    assert ContentType.parse("application/x-www-form-urlencoded") is ContentType.URL_ENCODED_FORM
    assert ContentType.parse("multipart/form-data; boundary=") is None
    assert ContentType.parse("image/png") is None


def test_log_options_from_names() -> None:
    """Option names should combine into flags, with ``all`` covering everything."""
    assert LogOptions.from_names([]) == LogOptions.NONE
    assert LogOptions.from_names(["request", "response_body"]) == (
        LogOptions.REQUEST | LogOptions.RESPONSE_BODY
    )
    assert LogOptions.from_names(["all"]) == LogOptions.ALL
    with pytest.raises(KeyError):
        LogOptions.from_names(["verbose"])


def test_method_parse() -> None:
    """Methods should parse case-insensitively and reject unknown verbs."""
    assert Method.parse("patch") is Method.PATCH
    assert Method.parse("OPTIONS") is None


def test_request_summary_includes_type_and_size() -> None:
    """The outbound summary should name the payload type and body size."""
    payload = Payload.raw(b"abc")
    client_request = _client_request(content=b"abc", payload=payload)

    assert client_request.id == 42
    assert client_request.request_summary == (
        "[42] -> POST https://api.example.test/v1/items bytes, 3 bytes"
    )
    assert client_request.payload_summary == "abc"


def test_request_summary_without_payload() -> None:
    """Requests without a body should omit the type and size."""
    client_request = _client_request()

    assert client_request.request_summary == "[42] -> POST https://api.example.test/v1/items"
    assert client_request.payload_summary is None


def test_response_snapshot_extracts_status_and_headers() -> None:
    """Snapshots should parse the status and flatten headers."""
    client_request = _client_request()
    response = httpx.Response(201, headers={"X-Id": "9"}, content=b"{}", request=client_request.request)

    snapshot = ClientResponse.from_response(client_request, response, response.content)

    assert snapshot.status_code is StatusCode.CREATED
    assert snapshot.raw_status_code == 201
    assert snapshot.headers is not None
    assert snapshot.headers["x-id"] == "9"
    assert snapshot.request_id == 42
    assert snapshot.refcode == "M001"


def test_response_snapshot_of_non_http_response() -> None:
    """Non-httpx responses should produce a snapshot without status or headers."""
    snapshot = ClientResponse.from_response(_client_request(), object(), None)

    assert snapshot.status_code is None
    assert snapshot.headers is None
    assert snapshot.log_description(True).startswith("[42], ")


def test_log_description_body_rules() -> None:
    """Bodies appear when requested or for non-404 failures."""
    client_request = _client_request()
    later = client_request.timestamp + timedelta(milliseconds=250)

    def snapshot(status: StatusCode, body: bytes) -> ClientResponse:
        return ClientResponse(
            refcode="M001",
            request_id=42,
            request_timestamp=client_request.timestamp,
            status_code=status,
            raw_status_code=status.value,
            data=body,
            timestamp=later,
        )

    ok = snapshot(StatusCode.OK, b"fine")
    missing = snapshot(StatusCode.NOT_FOUND, b"gone")
    failed = snapshot(StatusCode.BAD_REQUEST, b"bad")

    assert ok.log_description(False) == "[42] <- 200 OK, 4 bytes, 250 ms"
    assert ok.log_description(True) == "[42] <- 200 OK, 4 bytes, 250 ms\n----\nfine\n-----"
    assert missing.log_description(False) == "[42] <- 404 Not Found, 4 bytes, 250 ms"
    assert failed.log_description(False) == "[42] <- 400 Bad Request, 3 bytes, 250 ms\n----\nbad\n-----"
