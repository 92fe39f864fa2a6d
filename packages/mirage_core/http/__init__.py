"""HTTP request/response pipeline for Mirage core."""

from .client import AsyncHttpClient, HttpClient
from .errors import HttpError, UrlError, compose_details
from .forms import DEFAULT_BOUNDARY, MultipartForm, UrlEncodedForm
from .models import (
    DEFAULT_TIMEOUT_SECONDS,
    ClientConfiguration,
    ClientRequest,
    ClientResponse,
    ContentType,
    LogOptions,
    Method,
    Payload,
)
from .oauth import GrantKind, GrantType, OAuthToken
from .status import StatusCode
from .url_builder import UrlBuilder

__all__ = [
    "DEFAULT_BOUNDARY",
    "DEFAULT_TIMEOUT_SECONDS",
    "AsyncHttpClient",
    "ClientConfiguration",
    "ClientRequest",
    "ClientResponse",
    "ContentType",
    "GrantKind",
    "GrantType",
    "HttpClient",
    "HttpError",
    "LogOptions",
    "Method",
    "MultipartForm",
    "OAuthToken",
    "Payload",
    "StatusCode",
    "UrlBuilder",
    "UrlEncodedForm",
    "UrlError",
    "compose_details",
]
