"""Value types describing one HTTP exchange and client configuration."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, Flag
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from packages.mirage_core.formatting import (
    data_summary,
    duration_string,
    format_byte_count,
    utc_now,
)
from packages.mirage_core.ids import RequestCounter, shared_request_counter
from packages.mirage_core.jsoncoding import JsonCoder
from .oauth import OAuthToken
from .status import StatusCode

if TYPE_CHECKING:
    from packages.mirage_core.config import HttpSettings

DEFAULT_TIMEOUT_SECONDS = 30.0

_MULTIPART_PREFIX = "multipart/form-data; boundary="


class Method(str, Enum):
    """HTTP methods issued by the client."""

    DELETE = "DELETE"
    GET = "GET"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"

    @classmethod
    def parse(cls, value: str) -> Method | None:
        try:
            return cls(value.upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class ContentType:
    """MIME type for ``Accept`` and ``Content-Type`` headers."""

    value: str

    JSON: ClassVar[ContentType]
    URL_ENCODED_FORM: ClassVar[ContentType]
    TEXT: ClassVar[ContentType]
    BINARY: ClassVar[ContentType]

    @classmethod
    def multipart_form(cls, boundary: str) -> ContentType:
        return cls(f"{_MULTIPART_PREFIX}{boundary}")

    @classmethod
    def parse(cls, text: str) -> ContentType | None:
        """Return the content type for a known header value, else ``None``."""
        for known in (cls.JSON, cls.URL_ENCODED_FORM, cls.TEXT, cls.BINARY):
            if text == known.value:
                return known
        if text.startswith(_MULTIPART_PREFIX) and len(text) > len(_MULTIPART_PREFIX):
            return cls(text)
        return None

    @property
    def boundary(self) -> str | None:
        if self.value.startswith(_MULTIPART_PREFIX):
            return self.value[len(_MULTIPART_PREFIX) :]
        return None

    def __str__(self) -> str:
        return self.value


ContentType.JSON = ContentType("application/json")
ContentType.URL_ENCODED_FORM = ContentType("application/x-www-form-urlencoded")
ContentType.TEXT = ContentType("text/plain")
ContentType.BINARY = ContentType("application/octet-stream")


class LogOptions(Flag):
    """What the client logs for each exchange."""

    NONE = 0
    REQUEST = 1 << 1
    REQUEST_BODY = 1 << 2
    RESPONSE = 1 << 3
    RESPONSE_BODY = 1 << 4

    ALL = REQUEST | REQUEST_BODY | RESPONSE | RESPONSE_BODY

    @classmethod
    def from_names(cls, names: Iterable[str]) -> LogOptions:
        """Combine lowercase option names such as ``"request_body"``."""
        options = cls.NONE
        for name in names:
            options |= cls[name.upper()]
        return options


@dataclass(frozen=True)
class Payload:
    """Encoded request body plus the metadata used for headers and logs."""

    data: bytes = b""
    content_type: ContentType | None = None
    type_name: str | None = None
    summary: str = "nil"

    @classmethod
    def raw(cls, data: bytes) -> Payload:
        return cls(
            data=bytes(data),
            content_type=ContentType.BINARY,
            type_name="bytes",
            summary=data_summary(data),
        )


def _request_body(request: httpx.Request) -> bytes | None:
    try:
        return request.content
    except httpx.RequestNotRead:
        return None


@dataclass(frozen=True)
class ClientRequest:
    """One outbound request with its correlation id and log metadata."""

    id: int
    refcode: str
    request: httpx.Request
    payload: Payload | None = None
    log_options: LogOptions | None = None
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        *,
        refcode: str,
        request: httpx.Request,
        payload: Payload | None = None,
        log_options: LogOptions | None = None,
        counter: RequestCounter | None = None,
    ) -> ClientRequest:
        """Wrap ``request`` under the next id from ``counter`` (shared by default)."""
        sequence = counter or shared_request_counter()
        return cls(
            id=sequence.increment(),
            refcode=refcode,
            request=request,
            payload=payload,
            log_options=log_options,
        )

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def url(self) -> str:
        return str(self.request.url)

    @property
    def request_summary(self) -> str:
        summary = f"[{self.id}] -> {self.method or 'NO_METHOD'} {self.url}"
        if self.payload is not None and self.payload.type_name:
            summary += f" {self.payload.type_name}"
        body = _request_body(self.request)
        if body:
            summary += f", {format_byte_count(len(body))}"
        return summary

    @property
    def payload_summary(self) -> str | None:
        return self.payload.summary if self.payload is not None else None


def _extract_headers(response: httpx.Response) -> dict[str, str] | None:
    headers = {
        key: value
        for key, value in response.headers.items()
        if isinstance(key, str) and isinstance(value, str)
    }
    return headers or None


@dataclass(frozen=True)
class ClientResponse:
    """Snapshot of a completed exchange used for logging."""

    refcode: str
    request_id: int
    request_timestamp: datetime
    status_code: StatusCode | None = None
    raw_status_code: int | None = None
    headers: Mapping[str, str] | None = None
    data: bytes | None = None
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def from_response(
        cls,
        client_request: ClientRequest,
        response: Any,
        data: bytes | None,
    ) -> ClientResponse:
        """Build a snapshot; anything other than ``httpx.Response`` yields no status."""
        status_code: StatusCode | None = None
        raw_status: int | None = None
        headers: dict[str, str] | None = None
        if isinstance(response, httpx.Response):
            raw_status = response.status_code
            status_code = StatusCode.parse(raw_status)
            headers = _extract_headers(response)
        return cls(
            refcode=client_request.refcode,
            request_id=client_request.id,
            request_timestamp=client_request.timestamp,
            status_code=status_code,
            raw_status_code=raw_status,
            headers=headers,
            data=data,
        )

    def log_description(self, include_response_body: bool) -> str:
        """Render ``"[id] <- <status>, <size>, <duration>"`` plus the body when asked.

        The body is always included for recognized failures other than 404.
        """
        parts: list[str] = []
        force_body = False
        if self.status_code is not None:
            parts.append(f"[{self.request_id}] <- {self.status_code.description}")
            force_body = (
                not self.status_code.is_success and self.status_code is not StatusCode.NOT_FOUND
            )
        elif self.raw_status_code is not None:
            parts.append(f"[{self.request_id}] <- {self.raw_status_code}")
        else:
            parts.append(f"[{self.request_id}]")

        if self.data is not None:
            parts.append(format_byte_count(len(self.data)))

        parts.append(duration_string(self.request_timestamp, self.timestamp))
        description = ", ".join(parts)

        if (force_body or include_response_body) and self.data:
            try:
                text = self.data.decode("utf-8")
            except UnicodeDecodeError:
                text = None
            if text is not None:
                description += f"\n----\n{text}\n-----"

        return description


@dataclass(frozen=True)
class ClientConfiguration:
    """Immutable settings applied to every request a client sends."""

    headers: Mapping[str, str] = field(default_factory=dict)
    oauth_token: OAuthToken | None = None
    json_coder: JsonCoder = field(default_factory=JsonCoder.shared)
    log_options: LogOptions = LogOptions.NONE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    follow_redirects: bool = False

    @classmethod
    def from_settings(
        cls,
        settings: HttpSettings,
        *,
        oauth_token: OAuthToken | None = None,
        json_coder: JsonCoder | None = None,
    ) -> ClientConfiguration:
        """Build a configuration from validated ``http`` settings."""
        return cls(
            headers=dict(settings.headers),
            oauth_token=oauth_token,
            json_coder=json_coder or JsonCoder.shared(),
            log_options=LogOptions.from_names(settings.log_options),
            timeout_seconds=settings.timeout_seconds,
            follow_redirects=settings.follow_redirects,
        )
