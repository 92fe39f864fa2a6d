"""Fluent URL construction with typed query items.

Example::

    url = (
        UrlBuilder.from_string("https://api.example.com")
        .appending_path("v1/users")
        .adding_query_item("active", True)
        .adding_int_query_item("page", None)
        .build()
    )
    # "https://api.example.com/v1/users?active=true"

``None`` values are ignored by every adder except the bool one, so optional
parameters can be passed straight through.
"""

from __future__ import annotations

import ipaddress
import re
import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any
from urllib.parse import quote, unquote, urlsplit

import httpx

from packages.mirage_core.formatting import iso8601
from .errors import UrlError

DateFormatter = Callable[[datetime], str]

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_REG_NAME_PATTERN = re.compile(r"^[A-Za-z0-9\-._~!$&'()*+,;=]+$")
_SEGMENT_SAFE = "!$&'()*+,;=:@"
_QUERY_COMPONENT_SAFE = "!$'()*,;:@/?"


def _has_illegal_characters(text: str) -> bool:
    return any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text)


def _parse_query(query: str) -> list[tuple[str, str | None]]:
    items: list[tuple[str, str | None]] = []
    for piece in query.split("&"):
        if not piece:
            continue
        name, separator, value = piece.partition("=")
        items.append((unquote(name), unquote(value) if separator else None))
    return items


def _encode_host(host: str) -> str | None:
    """Return the host as it appears in a URL, or ``None`` when it is not valid."""
    if ":" in host:
        try:
            return f"[{ipaddress.IPv6Address(host.strip('[]'))}]"
        except ValueError:
            return None
    try:
        ascii_host = host if host.isascii() else host.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    if not _REG_NAME_PATTERN.match(ascii_host):
        return None
    return ascii_host


class UrlBuilder:
    """Accumulates URL components; ``build()`` renders them without consuming state."""

    def __init__(
        self,
        *,
        date_formatter: DateFormatter | None = None,
        refcode: str | None = None,
    ) -> None:
        self._refcode = refcode
        self._date_formatter = date_formatter
        self._scheme: str | None = None
        self._host: str | None = None
        self._port: int | None = None
        self._user: str | None = None
        self._password: str | None = None
        self._path_segments: list[str] = []
        self._query_items: list[tuple[str, str | None]] = []

    @classmethod
    def from_string(
        cls,
        string: str,
        *,
        date_formatter: DateFormatter | None = None,
        refcode: str | None = None,
    ) -> UrlBuilder:
        """Parse ``string``, which must contain at least a scheme and a host.

        Raises:
            UrlError: when the string cannot be parsed or lacks a scheme or host.
        """
        if _has_illegal_characters(string):
            raise UrlError.invalid(string, refcode=refcode)

        try:
            parts = urlsplit(string)
            port = parts.port
        except ValueError as exc:
            raise UrlError.invalid(string, refcode=refcode, underlying_errors=(exc,)) from exc

        if not parts.scheme:
            raise UrlError.missing_scheme(string, refcode=refcode)
        if not parts.hostname:
            raise UrlError.missing_host(string, refcode=refcode)

        builder = cls(date_formatter=date_formatter, refcode=refcode)
        builder._scheme = parts.scheme
        builder._host = parts.hostname
        builder._port = port
        builder._user = unquote(parts.username) if parts.username is not None else None
        builder._password = unquote(parts.password) if parts.password is not None else None
        builder._path_segments = [unquote(segment) for segment in parts.path.split("/") if segment]
        builder._query_items = _parse_query(parts.query)
        return builder

    @classmethod
    def from_url(
        cls,
        url: str | httpx.URL,
        *,
        date_formatter: DateFormatter | None = None,
        refcode: str | None = None,
    ) -> UrlBuilder:
        return cls.from_string(str(url), date_formatter=date_formatter, refcode=refcode)

    @property
    def query_items(self) -> list[tuple[str, str | None]]:
        return list(self._query_items)

    @property
    def path_segments(self) -> list[str]:
        return list(self._path_segments)

    @property
    def absolute_string(self) -> str:
        """Best-effort, unencoded rendering of the current state for diagnostics."""
        text = f"{self._scheme}://" if self._scheme else ""
        if self._user is not None and self._password is not None:
            text += f"{self._user}:{self._password}@"
        if self._host:
            text += self._host
        if self._port is not None:
            text += f":{self._port}"
        if self._path_segments:
            text += "/" + "/".join(self._path_segments)
        if self._query_items:
            text += "?" + "&".join(
                f"{name}={'null' if value is None else value}" for name, value in self._query_items
            )
        return text

    def build(self) -> str:
        """Assemble the URL string.

        Raises:
            UrlError: when scheme or host is unset, or the components cannot
                form a valid URL.
        """
        if self._scheme is None:
            raise UrlError.missing_scheme(self.absolute_string, refcode=self._refcode)
        if self._host is None:
            raise UrlError.missing_host(self.absolute_string, refcode=self._refcode)

        host = _encode_host(self._host)
        if (
            not _SCHEME_PATTERN.match(self._scheme)
            or host is None
            or (self._port is not None and not 0 <= self._port <= 65535)
        ):
            raise UrlError.invalid(self.absolute_string, refcode=self._refcode)

        url = f"{self._scheme}://"
        if self._user is not None and self._password is not None:
            url += f"{quote(self._user, safe='')}:{quote(self._password, safe='')}@"
        url += host
        if self._port is not None:
            url += f":{self._port}"
        url += "/" + "/".join(quote(segment, safe=_SEGMENT_SAFE) for segment in self._path_segments)

        if self._query_items:
            rendered = []
            for name, value in self._query_items:
                item = quote(name, safe=_QUERY_COMPONENT_SAFE)
                if value is not None:
                    item += "=" + quote(value, safe=_QUERY_COMPONENT_SAFE)
                rendered.append(item)
            url += "?" + "&".join(rendered)

        return url

    def setting_scheme(self, scheme: str | None) -> UrlBuilder:
        if scheme is not None:
            self._scheme = scheme
        return self

    def setting_host(self, host: str | None) -> UrlBuilder:
        if host is not None:
            self._host = host
        return self

    def setting_port(self, port: int | None) -> UrlBuilder:
        if port is not None:
            self._port = port
        return self

    def setting_user(self, user: str | None) -> UrlBuilder:
        if user is not None:
            self._user = user
        return self

    def setting_password(self, password: str | None) -> UrlBuilder:
        if password is not None:
            self._password = password
        return self

    def appending_path(self, path: str | None) -> UrlBuilder:
        """Append the non-empty ``/``-separated segments of ``path``."""
        if path is not None:
            self._path_segments.extend(segment for segment in path.split("/") if segment)
        return self

    def adding_bool_query_item(self, name: str, value: bool) -> UrlBuilder:
        return self._append(name, "true" if value else "false")

    def adding_int_query_item(self, name: str, value: int | None) -> UrlBuilder:
        if value is None:
            return self
        return self._append(name, str(int(value)))

    def adding_float_query_item(self, name: str, value: float | None) -> UrlBuilder:
        if value is None:
            return self
        return self._append(name, repr(float(value)))

    def adding_decimal_query_item(self, name: str, value: Decimal | None) -> UrlBuilder:
        if value is None:
            return self
        return self._append(name, str(value))

    def adding_str_query_item(self, name: str, value: str | None) -> UrlBuilder:
        if value is None:
            return self
        return self._append(name, value)

    def adding_uuid_query_item(self, name: str, value: uuid.UUID | None) -> UrlBuilder:
        if value is None:
            return self
        return self._append(name, str(value).upper())

    def adding_date_query_item(
        self,
        name: str,
        value: datetime | None,
        date_formatter: DateFormatter | None = None,
    ) -> UrlBuilder:
        """Add a date rendered by ``date_formatter``, the builder formatter, or ISO-8601."""
        if value is None:
            return self
        formatter = date_formatter or self._date_formatter or iso8601
        return self._append(name, formatter(value))

    def adding_query_item(self, name: str, value: Any) -> UrlBuilder:
        """Dispatch to the typed adder matching ``value``'s type.

        Raises:
            TypeError: for values outside bool, int, float, Decimal, str,
                UUID and datetime.
        """
        if value is None:
            return self
        if isinstance(value, bool):
            return self.adding_bool_query_item(name, value)
        if isinstance(value, int):
            return self.adding_int_query_item(name, value)
        if isinstance(value, float):
            return self.adding_float_query_item(name, value)
        if isinstance(value, Decimal):
            return self.adding_decimal_query_item(name, value)
        if isinstance(value, str):
            return self.adding_str_query_item(name, value)
        if isinstance(value, uuid.UUID):
            return self.adding_uuid_query_item(name, value)
        if isinstance(value, datetime):
            return self.adding_date_query_item(name, value)
        raise TypeError(f"Unsupported query item type: {type(value).__name__}")

    def _append(self, name: str, value: str) -> UrlBuilder:
        self._query_items.append((name, value))
        return self
