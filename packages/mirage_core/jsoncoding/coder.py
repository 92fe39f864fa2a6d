"""JSON encode/decode wrapper producing ``JsonError`` on failure.

Typed decoding is delegated to pydantic ``TypeAdapter`` so any pydantic
model, dataclass, ``TypedDict`` or builtin container can be the target type.
Relaxed parsing (the default) reads JSON5: comments, trailing commas,
unquoted keys, single-quoted strings, ``NaN``/``Infinity`` literals and raw
control characters inside strings. Strict parsing uses the stdlib ``json``
module. Either way the parsed document is validated in pydantic strict JSON
mode, so ``"42"`` is not an ``int`` while ISO-8601 strings still decode to
datetimes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, TypeVar

import json5
from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from packages.mirage_core.errors import codes
from packages.mirage_core.logging import Log
from .errors import JsonError, JsonProcess

T = TypeVar("T")

_log = Log(__name__)

_ENCODE_FAILURES = (
    PydanticSchemaGenerationError,
    PydanticSerializationError,
    TypeError,
    ValueError,
)


@dataclass(frozen=True)
class JsonCoderConfig:
    """Output formatting and parsing options for one ``JsonCoder``."""

    sort_keys: bool = True
    indent: int | None = 2
    ensure_ascii: bool = False
    relaxed: bool = True


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


def _at_path(loc: tuple[Any, ...]) -> str:
    path = ".".join(str(part) for part in loc if str(part))
    return f" at '{path}'" if path else ""


def _validation_details(type_name: str, exc: ValidationError) -> tuple[str, str]:
    """Map the first validation failure to (clarification, details)."""
    first = exc.errors()[0]
    error_type = str(first.get("type", ""))
    loc = tuple(first.get("loc", ()))
    clarification = str(first.get("msg") or "JSON decode failed.")
    expected = error_type.split("_", 1)[0]

    if error_type == "missing" and loc:
        key = loc[-1]
        return clarification, (
            f"A value of type '{type_name}' could not be created because key '{key}' "
            f"is missing{_at_path(loc[:-1])} (KeyNotFound)."
        )
    if error_type.endswith("_type") and first.get("input") is None:
        return clarification, (
            f"A value of type '{type_name}' could not be created because value "
            f"{expected} not found{_at_path(loc)} (ValueNotFound)."
        )
    return clarification, (
        f"A value of type '{type_name}' could not be created because {expected} "
        f"not found{_at_path(loc)} (TypeMismatch)."
    )


class JsonCoder:
    """Encode and decode JSON with one fixed formatting configuration."""

    _shared: JsonCoder | None = None

    def __init__(self, config: JsonCoderConfig | None = None) -> None:
        self._config = config or JsonCoderConfig()

    @classmethod
    def shared(cls) -> JsonCoder:
        """Return the process-wide coder with default configuration."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    @property
    def config(self) -> JsonCoderConfig:
        return self._config

    def encode(
        self,
        value: Any,
        *,
        user_info: Mapping[str, Any] | None = None,
        refcode: str | None = None,
    ) -> bytes:
        """Encode ``value`` to UTF-8 JSON bytes.

        ``user_info`` is handed to pydantic serializers as context and copied
        onto the raised ``JsonError``.
        """
        try:
            return self._encode(value, user_info)
        except _ENCODE_FAILURES as exc:
            details = f"A value of type '{_type_name(type(value))}' could not be encoded.\n{exc}"
            _log.error(details)
            raise JsonError(
                code=codes.JSON_ENCODE_FAILED,
                process=JsonProcess.ENCODE,
                refcode=refcode,
                clarification="JSON encode failed.",
                details=details,
                underlying_errors=(exc,),
                user_info=dict(user_info or {}),
            ) from exc

    def decode(
        self,
        target: type[T] | Any,
        data: bytes | str | None,
        *,
        user_info: Mapping[str, Any] | None = None,
        refcode: str | None = None,
    ) -> T:
        """Decode JSON ``data`` into an instance of ``target``."""
        type_name = _type_name(target)

        if data is None:
            details = f"{type_name} could not be created because there is no data to decode."
            _log.error(details)
            raise JsonError(
                code=codes.JSON_NO_DATA,
                process=JsonProcess.DECODE,
                refcode=refcode,
                clarification="JSON decode failed.",
                details=details,
            )

        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)

        try:
            parsed = self._parse(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            details = (
                f"A value of type '{type_name}' could not be created because the data "
                f"is corrupted (DataCorrupted)."
            )
            raise self._decode_error(
                clarification=f"The given data was not valid JSON. {exc}",
                details=details,
                exc=exc,
                raw=raw,
                user_info=user_info,
                refcode=refcode,
            ) from exc

        try:
            return _adapter(target).validate_json(
                json.dumps(parsed, allow_nan=True),
                strict=True,
                context=dict(user_info or {}),
            )
        except ValidationError as exc:
            clarification, details = _validation_details(type_name, exc)
            raise self._decode_error(
                clarification=clarification,
                details=details,
                exc=exc,
                raw=raw,
                user_info=user_info,
                refcode=refcode,
            ) from exc

    def _parse(self, raw: bytes) -> Any:
        if self._config.relaxed:
            return json5.loads(raw.decode("utf-8"), strict=False)
        return json.loads(raw)

    def stringify(self, value: Any) -> str | None:
        """Return ``value`` as JSON text, or ``None`` when it cannot be encoded."""
        try:
            return self._encode(value, None).decode("utf-8")
        except _ENCODE_FAILURES:
            return None

    def _encode(self, value: Any, user_info: Mapping[str, Any] | None) -> bytes:
        plain = _adapter(type(value)).dump_python(
            value,
            mode="json",
            context=dict(user_info or {}),
        )
        text = json.dumps(
            plain,
            sort_keys=self._config.sort_keys,
            indent=self._config.indent,
            ensure_ascii=self._config.ensure_ascii,
        )
        return text.encode("utf-8")

    def _decode_error(
        self,
        *,
        clarification: str,
        details: str,
        exc: BaseException,
        raw: bytes,
        user_info: Mapping[str, Any] | None,
        refcode: str | None,
    ) -> JsonError:
        _log.error(details)
        return JsonError(
            code=codes.JSON_DECODE_FAILED,
            process=JsonProcess.DECODE,
            refcode=refcode,
            clarification=clarification,
            details=details,
            underlying_errors=(exc,),
            user_info=dict(user_info or {}),
            data=raw,
        )
