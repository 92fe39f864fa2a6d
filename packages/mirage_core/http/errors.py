"""Typed errors raised by URL construction and HTTP dispatch."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import field
from datetime import datetime
from typing import Any, ClassVar

import httpx

from packages.mirage_core.errors import codes
from packages.mirage_core.errors.types import ErrorKind, MirageError, error_dataclass
from packages.mirage_core.formatting import duration_string, format_byte_count
from .models import ClientRequest, Method
from .status import StatusCode

_INVALID_FORMAT = "Invalid URL format."


@error_dataclass
class UrlError(MirageError):
    """URL could not be parsed or assembled."""

    kind: ClassVar[ErrorKind] = ErrorKind.URL
    default_alert_title: ClassVar[str | None] = "Mirage URL Error"
    default_clarification: ClassVar[str | None] = "Failed to build URL."

    url_string: str | None = None

    @classmethod
    def missing_scheme(cls, url_string: str, *, refcode: str | None = None) -> UrlError:
        return cls(
            code=codes.URL_MISSING_SCHEME,
            refcode=refcode,
            clarification=_INVALID_FORMAT,
            details=f"Cannot create a URL from '{url_string}' because it is missing a scheme.",
            url_string=url_string,
        )

    @classmethod
    def missing_host(cls, url_string: str, *, refcode: str | None = None) -> UrlError:
        return cls(
            code=codes.URL_MISSING_HOST,
            refcode=refcode,
            clarification=_INVALID_FORMAT,
            details=f"Cannot create a URL from '{url_string}' because it is missing a host.",
            url_string=url_string,
        )

    @classmethod
    def invalid(
        cls,
        url_string: str,
        *,
        refcode: str | None = None,
        underlying_errors: Iterable[BaseException] = (),
    ) -> UrlError:
        return cls(
            code=codes.URL_INVALID,
            refcode=refcode,
            clarification=_INVALID_FORMAT,
            details=f"Cannot create a URL from '{url_string}'.",
            underlying_errors=tuple(underlying_errors),
            url_string=url_string,
        )


@error_dataclass
class HttpError(MirageError):
    """Failed HTTP exchange.

    Carries whatever was known at the point of failure: the originating
    request, the httpx response, the raw body and the request/response time
    range. ``clarification`` defaults to a sentence naming the status.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.HTTP
    default_alert_title: ClassVar[str | None] = "Mirage HTTP Error"

    client_request: ClientRequest | None = None
    response: httpx.Response | None = field(default=None, repr=False)
    response_data: bytes | None = field(default=None, repr=False)
    response_time_range: tuple[datetime, datetime] | None = None

    def __post_init__(self) -> None:
        if self.clarification is None:
            status = self.status_code
            if status is not None:
                text = f"HTTP request failed with status {status.description}."
            else:
                text = "HTTP request failed."
            object.__setattr__(self, "clarification", text)
        super().__post_init__()

    @property
    def request(self) -> httpx.Request | None:
        if self.client_request is not None:
            return self.client_request.request
        return None

    @property
    def raw_status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None

    @property
    def status_code(self) -> StatusCode | None:
        raw = self.raw_status_code
        return StatusCode.parse(raw) if raw is not None else None

    def header(self, name: str) -> str | None:
        """Return a response header value, case-insensitively."""
        if self.response is None:
            return None
        return self.response.headers.get(name)

    @classmethod
    def for_request(
        cls,
        client_request: ClientRequest,
        *,
        code: str,
        clarification: str | None = None,
        response: httpx.Response | None = None,
        response_data: bytes | None = None,
        response_time_range: tuple[datetime, datetime] | None = None,
        underlying_errors: Iterable[BaseException] = (),
        user_info: Mapping[str, Any] | None = None,
    ) -> HttpError:
        """Build an error whose details are composed from the exchange."""
        return cls(
            code=code,
            refcode=client_request.refcode,
            clarification=clarification,
            details=compose_details(
                client_request,
                response=response,
                response_data=response_data,
                response_time_range=response_time_range,
            ),
            underlying_errors=tuple(underlying_errors),
            user_info=dict(user_info or {}),
            client_request=client_request,
            response=response,
            response_data=response_data,
            response_time_range=response_time_range,
        )

    @classmethod
    def missing_url(cls, refcode: str) -> HttpError:
        return cls(
            code=codes.HTTP_MISSING_URL,
            refcode=refcode,
            clarification="Network request failed.",
            details="The network request couldn't be made because there is no URL.",
        )


def compose_details(
    client_request: ClientRequest,
    *,
    response: httpx.Response | None = None,
    response_data: bytes | None = None,
    response_time_range: tuple[datetime, datetime] | None = None,
) -> str:
    """Describe a failed exchange as method/status, byte count and duration lines."""
    lines: list[str] = []

    method = Method.parse(client_request.method)
    if method is None:
        lines.append("HTTP request failed.")
    else:
        status = StatusCode.parse(response.status_code) if response is not None else None
        if status is not None:
            lines.append(f"HTTP {method.value} failed with {status.description}.")
        else:
            lines.append(f"HTTP {method.value} failed.")

    if response_data is not None:
        lines.append(f"Received {format_byte_count(len(response_data))}.")

    if response_time_range is not None:
        start, end = response_time_range
        lines.append(f"Completed in {duration_string(start, end)}.")

    return "\n".join(lines)
