"""Unit tests for JSON encoding and decoding with typed errors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import BaseModel, ValidationInfo, field_validator

from packages.mirage_core.errors import ErrorKind, codes
from packages.mirage_core.jsoncoding import JsonCoder, JsonCoderConfig, JsonError, JsonProcess


class Address(BaseModel):
    city: str


class Person(BaseModel):
    name: str
    age: int
    address: Address
    born: datetime | None = None


@dataclass
class Point:
    x: int
    y: int


class Scaled(BaseModel):
    value: int

    @field_validator("value")
    @classmethod
    def apply_scale(cls, value: int, info: ValidationInfo) -> int:
        context = info.context or {}
        return value * int(context.get("scale", 1))


def test_round_trip_of_model_is_lossless() -> None:
    """Encoding then decoding a model should yield an equal value."""
    coder = JsonCoder()
    person = Person(
        name="Ada",
        age=36,
        address=Address(city="London"),
        born=datetime(1815, 12, 10, tzinfo=timezone.utc),
    )

    assert coder.decode(Person, coder.encode(person)) == person


def test_encoding_is_sorted_and_pretty_printed() -> None:
    """Default output should have sorted keys, two-space indentation and raw unicode."""
    data = JsonCoder().encode({"b": 1, "a": "é"})

    assert data == '{\n  "a": "é",\n  "b": 1\n}'.encode("utf-8")


def test_compact_configuration() -> None:
    """A custom configuration should control formatting."""
    coder = JsonCoder(JsonCoderConfig(sort_keys=False, indent=None))

    assert coder.encode({"b": 1, "a": 2}) == b'{"b": 1, "a": 2}'


def test_decodes_dataclasses_and_builtin_containers() -> None:
    """Targets other than pydantic models should be supported."""
    coder = JsonCoder()

    assert coder.decode(Point, b'{"x": 1, "y": 2}') == Point(x=1, y=2)
    assert coder.decode(list[int], "[1, 2, 3]") == [1, 2, 3]


def test_relaxed_parsing_accepts_nan_and_control_characters() -> None:
    """Relaxed decoding should tolerate NaN literals and raw control characters."""
    coder = JsonCoder()

    values = coder.decode(dict[str, Any], b'{"v": NaN, "s": "a\tb"}')

    assert values["v"] != values["v"]
    assert values["s"] == "a\tb"


def test_strict_configuration_rejects_control_characters() -> None:
    """Turning relaxed parsing off should reject raw control characters."""
    coder = JsonCoder(JsonCoderConfig(relaxed=False))

    with pytest.raises(JsonError):
        coder.decode(dict[str, str], b'{"s": "a\tb"}')


def test_malformed_bytes_raise_corrupted_data_error() -> None:
    """Invalid JSON should raise a decode JsonError that keeps the payload text."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder().decode(Person, b"{broken", refcode="J001")

    error = exc_info.value
    assert error.kind is ErrorKind.JSON
    assert error.code == codes.JSON_DECODE_FAILED
    assert error.process is JsonProcess.DECODE
    assert error.refcode == "J001"
    assert error.json_text == "{broken"
    assert error.details == (
        "A value of type 'Person' could not be created because the data is corrupted (DataCorrupted)."
    )
    assert error.alert_title == "Mirage JSON Error"


def test_missing_key_names_key_and_path() -> None:
    """A missing nested key should be reported with its container path."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder().decode(Person, b'{"name": "Ada", "age": 1, "address": {}}')

    assert exc_info.value.details == (
        "A value of type 'Person' could not be created because key 'city' is missing "
        "at 'address' (KeyNotFound)."
    )


def test_null_value_is_reported_as_value_not_found() -> None:
    """A ``null`` where a value is required should be a value-not-found failure."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder().decode(Person, b'{"name": null, "age": 1, "address": {"city": "X"}}')

    assert exc_info.value.details == (
        "A value of type 'Person' could not be created because value string not found "
        "at 'name' (ValueNotFound)."
    )


def test_wrong_type_is_reported_as_type_mismatch() -> None:
    """A value of the wrong type should be a type-mismatch failure."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder().decode(Person, b'{"name": "Ada", "age": "old", "address": {"city": "X"}}')

    assert exc_info.value.details == (
        "A value of type 'Person' could not be created because int not found "
        "at 'age' (TypeMismatch)."
    )


def test_decoding_none_reports_no_data() -> None:
    """Decoding ``None`` should fail without attempting to parse."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder().decode(Person, None, refcode="J002")

    error = exc_info.value
    assert error.code == codes.JSON_NO_DATA
    assert error.details == "Person could not be created because there is no data to decode."
    assert error.json_text is None


def test_user_info_is_validation_context_and_error_side_channel() -> None:
    """``user_info`` should reach validators and be copied onto errors."""
    coder = JsonCoder()

    assert coder.decode(Scaled, b'{"value": 2}', user_info={"scale": 3}) == Scaled(value=6)

    with pytest.raises(JsonError) as exc_info:
        coder.decode(Scaled, b'{"value": "x"}', user_info={"scale": 3})
    assert exc_info.value.user_info == {"scale": 3}


def test_unencodable_value_raises_encode_error() -> None:
    """Values pydantic cannot serialize should raise an encode JsonError."""

    class Opaque:
        pass

    with pytest.raises(JsonError) as exc_info:
        JsonCoder().encode(Opaque(), refcode="J003")

    error = exc_info.value
    assert error.process is JsonProcess.ENCODE
    assert error.code == codes.JSON_ENCODE_FAILED
    assert error.details is not None
    assert error.details.startswith("A value of type 'Opaque' could not be encoded.")


def test_stringify_returns_text_or_none() -> None:
    """``stringify`` should never raise."""

    class Opaque:
        pass

    coder = JsonCoder.shared()

    assert coder.stringify([1, 2]) == "[\n  1,\n  2\n]"
    assert coder.stringify(Opaque()) is None
    assert JsonCoder.shared() is coder


def test_default_error_text_per_process() -> None:
    """JsonError should fall back to process-specific clarification and details."""
    decode = JsonError(process=JsonProcess.DECODE)
    encode = JsonError(process=JsonProcess.ENCODE)

    assert decode.clarification == "JSON decoding failed."
    assert decode.details == "Could not decode value."
    assert encode.clarification == "JSON encoding failed."
    assert encode.details == "Could not encode value."


def test_relaxed_parsing_reads_json5() -> None:
    """Comments, trailing commas and unquoted keys should decode in relaxed mode."""
    values = JsonCoder().decode(dict[str, Any], b'{a: 1, // note\n "b": [2, 3,], \'c\': \'x\',}')

    assert values == {"a": 1, "b": [2, 3], "c": "x"}


def test_strict_configuration_rejects_json5_syntax() -> None:
    """Turning relaxed parsing off should require plain JSON."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder(JsonCoderConfig(relaxed=False)).decode(dict[str, Any], b'{"a": 1,}')

    assert exc_info.value.code == codes.JSON_DECODE_FAILED
    assert exc_info.value.details is not None
    assert exc_info.value.details.endswith("because the data is corrupted (DataCorrupted).")


@pytest.mark.parametrize(
    ("body", "field", "expected"),
    [
        (b'{"x": "42", "y": 1}', "x", "int"),
        (b'{"x": 1, "y": 2.5}', "y", "int"),
    ],
)
def test_scalars_are_not_coerced_across_json_types(body: bytes, field: str, expected: str) -> None:
    """Numeric strings and fractional numbers should be type mismatches, not coerced."""
    with pytest.raises(JsonError) as exc_info:
        JsonCoder().decode(Point, body)

    assert exc_info.value.details == (
        f"A value of type 'Point' could not be created because {expected} not found "
        f"at '{field}' (TypeMismatch)."
    )


def test_boolean_words_are_not_booleans() -> None:
    """A string such as ``"yes"`` should not validate as a bool."""
    with pytest.raises(JsonError):
        JsonCoder().decode(dict[str, bool], b'{"active": "yes"}')
