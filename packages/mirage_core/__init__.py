"""Mirage core: typed HTTP pipeline, URL building, payload encoders and errors."""

from .csv_export import CsvBuilder, CsvError
from .errors import DescriptionOptions, ErrorKind, Message, MirageError, Severity, describe_error
from .http import (
    AsyncHttpClient,
    ClientConfiguration,
    ContentType,
    GrantType,
    HttpClient,
    HttpError,
    LogOptions,
    Method,
    MultipartForm,
    OAuthToken,
    StatusCode,
    UrlBuilder,
    UrlEncodedForm,
    UrlError,
)
from .ids import generate_refcode
from .jsoncoding import JsonCoder, JsonError

__all__ = [
    "AsyncHttpClient",
    "ClientConfiguration",
    "ContentType",
    "CsvBuilder",
    "CsvError",
    "DescriptionOptions",
    "ErrorKind",
    "GrantType",
    "HttpClient",
    "HttpError",
    "JsonCoder",
    "JsonError",
    "LogOptions",
    "Message",
    "Method",
    "MirageError",
    "MultipartForm",
    "OAuthToken",
    "Severity",
    "StatusCode",
    "UrlBuilder",
    "UrlEncodedForm",
    "UrlError",
    "describe_error",
    "generate_refcode",
]
