"""Request body encoders for multipart and URL-encoded forms."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote

from packages.mirage_core.formatting import format_byte_count, iso8601

DEFAULT_BOUNDARY = "AEE829AB-96ED-4566-9801-BBD497C33F7E"

# RFC 3986 query characters left unescaped when encoding a form body.
_QUERY_SAFE = "!$&'()*+,;=:@/?"


@dataclass(frozen=True)
class _StringPart:
    name: str
    value: str

    @property
    def summary(self) -> str:
        return f'{{ "{self.name}": "{self.value}" }}'

    def encode(self) -> bytes:
        header = f'Content-Disposition: form-data; name="{self.name}"\r\n\r\n'
        return header.encode("utf-8") + self.value.encode("utf-8")


@dataclass(frozen=True)
class _JsonPart:
    name: str
    data: bytes

    @property
    def summary(self) -> str:
        return f'{{ "name": "{self.name}", "data":"{format_byte_count(len(self.data))}" }}'

    def encode(self) -> bytes:
        header = (
            f'Content-Disposition: form-data; name="{self.name}"\r\n'
            "Content-Type: application/json\r\n\r\n"
        )
        return header.encode("utf-8") + self.data


@dataclass(frozen=True)
class _FilePart:
    name: str
    filename: str
    data: bytes

    @property
    def summary(self) -> str:
        size = format_byte_count(len(self.data))
        return f'{{ "name": "{self.name}", "filename": "{self.filename}", "data":"{size}" }}'

    def encode(self) -> bytes:
        header = (
            f'Content-Disposition: form-data; name="{self.name}"; filename="{self.filename}"\r\n'
            "Content-Type: application/octet-stream\r\n\r\n"
        )
        return header.encode("utf-8") + self.data


_Part = _StringPart | _JsonPart | _FilePart


class MultipartForm:
    """Ordered ``multipart/form-data`` body builder.

    Adders return the form itself so calls can be chained::

        form = MultipartForm().adding_field("title", "Notes").adding_file("doc", raw, "notes.txt")
    """

    def __init__(self, *, boundary: str = DEFAULT_BOUNDARY) -> None:
        if not boundary:
            raise ValueError("boundary must not be empty")
        self._boundary = boundary
        self._parts: list[_Part] = []

    @classmethod
    def with_random_boundary(cls) -> MultipartForm:
        """Create a form whose boundary is a fresh random token."""
        return cls(boundary=str(uuid.uuid4()).upper())

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def is_empty(self) -> bool:
        return not self._parts

    @property
    def summary(self) -> str:
        """One line per part; file and JSON bytes are reduced to their size."""
        return "\n".join(part.summary for part in self._parts)

    @property
    def data(self) -> bytes:
        delimiter = f"\r\n--{self._boundary}\r\n".encode("utf-8")
        chunks: list[bytes] = []
        for part in self._parts:
            chunks.append(delimiter)
            chunks.append(part.encode())
        chunks.append(f"\r\n--{self._boundary}--\r\n".encode("utf-8"))
        return b"".join(chunks)

    def contains(self, prefix: str) -> bool:
        """Return whether any part name starts with ``prefix``."""
        return any(part.name.startswith(prefix) for part in self._parts)

    def string_value(self, name: str) -> str | None:
        """Return the value of the first string field named ``name``."""
        for part in self._parts:
            if isinstance(part, _StringPart) and part.name == name:
                return part.value
        return None

    def adding_field(self, name: str, value: str) -> MultipartForm:
        self._parts.append(_StringPart(name=name, value=value))
        return self

    def adding_bool_field(self, name: str, value: bool) -> MultipartForm:
        return self.adding_field(name, "true" if value else "false")

    def adding_int_field(self, name: str, value: int) -> MultipartForm:
        return self.adding_field(name, str(int(value)))

    def adding_float_field(self, name: str, value: float) -> MultipartForm:
        return self.adding_field(name, repr(float(value)))

    def adding_date_field(self, name: str, value: datetime) -> MultipartForm:
        return self.adding_field(name, iso8601(value))

    def adding_uuid_field(self, name: str, value: uuid.UUID) -> MultipartForm:
        return self.adding_field(name, str(value).upper())

    def adding_json(self, name: str, data: bytes) -> MultipartForm:
        """Add an already-encoded JSON blob as its own part."""
        self._parts.append(_JsonPart(name=name, data=bytes(data)))
        return self

    def adding_file(self, name: str, data: bytes, filename: str) -> MultipartForm:
        self._parts.append(_FilePart(name=name, filename=filename, data=bytes(data)))
        return self


class UrlEncodedForm:
    """``application/x-www-form-urlencoded`` body builder; last write per name wins."""

    def __init__(self) -> None:
        self._parameters: dict[str, str] = {}

    @property
    def is_empty(self) -> bool:
        return not self._parameters

    @property
    def summary(self) -> str:
        return self._joined()

    @property
    def data(self) -> bytes:
        return quote(self._joined(), safe=_QUERY_SAFE).encode("ascii")

    def value(self, name: str) -> str | None:
        return self._parameters.get(name)

    def adding_field(self, name: str, value: str) -> UrlEncodedForm:
        self._parameters[name] = value
        return self

    def _joined(self) -> str:
        return "&".join(f"{name}={value}" for name, value in self._parameters.items())
