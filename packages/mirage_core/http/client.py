"""Header- and auth-aware HTTP clients over httpx.

``HttpClient`` and ``AsyncHttpClient`` share one request pipeline:

1. build a ``ClientRequest`` (id, refcode, payload, headers, timeout),
2. log the outbound summary when enabled,
3. merge client-level headers the request does not already carry,
4. dispatch through httpx, wrapping transport failures in ``HttpError``,
5. snapshot the exchange as a ``ClientResponse`` and log it when enabled,
6. reject non-HTTP responses, unknown status codes and non-2xx statuses.

Every call takes a ``refcode`` that is attached to raised errors and to the
log context of the exchange.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping

import httpx

from packages.mirage_core.errors import codes
from packages.mirage_core.formatting import data_summary
from packages.mirage_core.ids import RequestCounter
from packages.mirage_core.jsoncoding import JsonCoder
from packages.mirage_core.logging import Log, exchange_context, log_context
from .errors import HttpError, UrlError
from .forms import MultipartForm, UrlEncodedForm
from .models import (
    ClientConfiguration,
    ClientRequest,
    ClientResponse,
    ContentType,
    LogOptions,
    Method,
    Payload,
)
from .oauth import OAuthToken

Target = str | httpx.URL | httpx.Request | None
Form = MultipartForm | UrlEncodedForm

_log = Log(__name__)

# Request headers recomputed by httpx for every new request.
_TRANSPORT_HEADERS = frozenset({"host", "content-length", "transfer-encoding"})


class _ClientCore:
    """State and pipeline steps shared by the sync and async clients."""

    def __init__(
        self,
        configuration: ClientConfiguration | None,
        counter: RequestCounter | None,
    ) -> None:
        self._configuration = configuration or ClientConfiguration()
        self._counter = counter
        self._lock = threading.Lock()
        self._additional_headers = httpx.Headers()
        token = self._configuration.oauth_token
        if token is not None and token.access_token:
            self._additional_headers["Authorization"] = f"Bearer {token.access_token}"

    @property
    def configuration(self) -> ClientConfiguration:
        return self._configuration

    @property
    def json_coder(self) -> JsonCoder:
        return self._configuration.json_coder

    def header(self, name: str) -> str | None:
        """Return one client-level header value, case-insensitively."""
        with self._lock:
            return self._additional_headers.get(name)

    def set_header(self, name: str, value: str | None) -> None:
        """Set a header sent with every request; ``None`` removes it."""
        with self._lock:
            if value is None:
                if name in self._additional_headers:
                    del self._additional_headers[name]
            else:
                self._additional_headers[name] = value

    def remove_header(self, name: str) -> None:
        self.set_header(name, None)

    def set_auth_token(self, token: OAuthToken | None) -> None:
        """Send ``Authorization: Bearer <access_token>``, or clear it."""
        if token is not None and token.access_token:
            self.set_header("Authorization", f"Bearer {token.access_token}")
        else:
            self.remove_header("Authorization")

    def _payload(
        self,
        *,
        data: bytes | None,
        payload: Any,
        form: Form | None,
        user_info: Mapping[str, Any] | None,
        refcode: str,
    ) -> Payload | None:
        supplied = [value for value in (data, payload, form) if value is not None]
        if len(supplied) > 1:
            raise ValueError("Pass at most one of data, payload or form.")

        if data is not None:
            return Payload.raw(data)
        if payload is not None:
            encoded = self.json_coder.encode(payload, user_info=user_info, refcode=refcode)
            return Payload(
                data=encoded,
                content_type=ContentType.JSON,
                type_name=type(payload).__name__,
                summary=data_summary(encoded),
            )
        if isinstance(form, MultipartForm):
            return Payload(
                data=form.data,
                content_type=ContentType.multipart_form(form.boundary),
                type_name=type(form).__name__,
                summary=form.summary,
            )
        if isinstance(form, UrlEncodedForm):
            return Payload(
                data=form.data,
                content_type=ContentType.URL_ENCODED_FORM,
                type_name=type(form).__name__,
                summary=form.summary,
            )
        if form is not None:
            raise TypeError(f"Unsupported form type: {type(form).__name__}")
        return None

    def _build(
        self,
        client: httpx.Client | httpx.AsyncClient,
        method: Method | str,
        target: Target,
        *,
        refcode: str,
        data: bytes | None = None,
        payload: Any = None,
        form: Form | None = None,
        accept: ContentType | None = None,
        headers: Mapping[str, str] | None = None,
        user_info: Mapping[str, Any] | None = None,
        log_options: LogOptions | None = None,
        timeout: float | None = None,
    ) -> ClientRequest:
        """Resolve the target and payload into a ``ClientRequest``."""
        inherited: httpx.Headers | None = None
        if isinstance(target, httpx.Request):
            inherited = target.headers
            target = target.url
        if target is None or not str(target):
            raise HttpError.missing_url(refcode)
        try:
            url = httpx.URL(target)
        except httpx.InvalidURL as exc:
            raise UrlError.invalid(str(target), refcode=refcode, underlying_errors=(exc,)) from exc

        body = self._payload(
            data=data,
            payload=payload,
            form=form,
            user_info=user_info,
            refcode=refcode,
        )
        if accept is None:
            accept = ContentType.JSON if isinstance(form, MultipartForm) else ContentType.BINARY

        request_headers = httpx.Headers({"Accept": accept.value})
        if body is not None and body.content_type is not None:
            request_headers["Content-Type"] = body.content_type.value
        if inherited is not None:
            for name, value in inherited.items():
                if name.lower() not in _TRANSPORT_HEADERS:
                    request_headers[name] = value
        if headers:
            request_headers.update(headers)

        request = client.build_request(
            method.value if isinstance(method, Method) else str(method).upper(),
            url,
            content=body.data if body is not None else None,
            headers=request_headers,
            timeout=timeout if timeout is not None else self._configuration.timeout_seconds,
        )
        return ClientRequest.create(
            refcode=refcode,
            request=request,
            payload=body,
            log_options=log_options,
            counter=self._counter,
        )

    def _log_options(self, client_request: ClientRequest) -> LogOptions:
        if client_request.log_options is not None:
            return client_request.log_options
        return self._configuration.log_options

    def _before_send(self, client_request: ClientRequest, options: LogOptions) -> httpx.Request:
        """Log the outbound request and return it with client-level headers added.

        The request held by ``client_request`` is never modified; when headers
        are missing a copy carrying them is returned.
        """
        if LogOptions.REQUEST in options:
            summary = client_request.payload_summary
            if LogOptions.REQUEST_BODY in options and summary is not None:
                _log.debug(f"{client_request.request_summary}: {summary}")
            else:
                _log.debug(client_request.request_summary)

        request = client_request.request
        with self._lock:
            missing = [
                (name, value)
                for name, value in self._additional_headers.items()
                if name not in request.headers
            ]
        if not missing:
            return request

        headers = request.headers.copy()
        for name, value in missing:
            headers[name] = value
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            stream=request.stream,
            extensions=dict(request.extensions),
        )

    def _transport_failure(self, client_request: ClientRequest, exc: httpx.RequestError) -> HttpError:
        error = HttpError.for_request(
            client_request,
            code=codes.HTTP_TRANSPORT_FAILURE,
            underlying_errors=(exc,),
        )
        _log.error(f"[{client_request.id}] {error.clarification} {exc!r}", error=error)
        return error

    def _after_send(
        self,
        client_request: ClientRequest,
        response: Any,
        options: LogOptions,
    ) -> bytes:
        """Log the exchange and apply the response gates; return the body."""
        is_http = isinstance(response, httpx.Response)
        body = response.content if is_http else None
        snapshot = ClientResponse.from_response(client_request, response, body)

        if LogOptions.RESPONSE in options:
            _log.debug(snapshot.log_description(LogOptions.RESPONSE_BODY in options))

        time_range = (client_request.timestamp, snapshot.timestamp)

        if not is_http:
            raise self._response_failure(
                client_request,
                code=codes.HTTP_INVALID_RESPONSE,
                clarification="Network request failed.",
                response=None,
                body=body,
                time_range=time_range,
            )
        if snapshot.status_code is None:
            raise self._response_failure(
                client_request,
                code=codes.HTTP_UNKNOWN_STATUS,
                clarification="Network request failed.",
                response=response,
                body=body,
                time_range=time_range,
            )
        if not snapshot.status_code.is_success:
            raise self._response_failure(
                client_request,
                code=codes.HTTP_STATUS_FAILURE,
                clarification=None,
                response=response,
                body=body,
                time_range=time_range,
            )
        return body if body is not None else b""

    def _response_failure(
        self,
        client_request: ClientRequest,
        *,
        code: str,
        clarification: str | None,
        response: httpx.Response | None,
        body: bytes | None,
        time_range: tuple[Any, Any],
    ) -> HttpError:
        error = HttpError.for_request(
            client_request,
            code=code,
            clarification=clarification,
            response=response,
            response_data=body,
            response_time_range=time_range,
        )
        _log.error(f"[{client_request.id}] {error.clarification} {error.details}", error=error)
        return error

    def _decode(
        self,
        body: bytes,
        decoding: Any,
        user_info: Mapping[str, Any] | None,
        refcode: str,
    ) -> Any:
        return self.json_coder.decode(decoding, body, user_info=user_info, refcode=refcode)

    @staticmethod
    def _accept_for(decoding: Any, form: Form | None) -> ContentType:
        if decoding is not None or isinstance(form, MultipartForm):
            return ContentType.JSON
        return ContentType.BINARY

    @staticmethod
    def _context(client_request: ClientRequest) -> Mapping[str, object]:
        return exchange_context(
            refcode=client_request.refcode,
            request_id=client_request.id,
            method=client_request.method,
            url=client_request.url,
        )


class HttpClient(_ClientCore):
    """Synchronous client over ``httpx.Client``."""

    def __init__(
        self,
        configuration: ClientConfiguration | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
        counter: RequestCounter | None = None,
    ) -> None:
        """Create a client; an injected ``client`` is used as-is and never closed."""
        super().__init__(configuration, counter)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._configuration.timeout_seconds,
            headers=dict(self._configuration.headers),
            follow_redirects=self._configuration.follow_redirects,
            transport=transport,
        )

    def close(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def send(
        self, request: httpx.Request, *, refcode: str, log_options: LogOptions | None = None
    ) -> tuple[bytes, httpx.Response]:
        """Dispatch a pre-built request as-is through the full pipeline."""
        client_request = ClientRequest.create(
            refcode=refcode,
            request=request,
            log_options=log_options,
            counter=self._counter,
        )
        return self._dispatch(client_request)

    def request(
        self,
        method: Method | str,
        target: Target,
        *,
        refcode: str,
        data: bytes | None = None,
        payload: Any = None,
        form: Form | None = None,
        accept: ContentType | None = None,
        headers: Mapping[str, str] | None = None,
        user_info: Mapping[str, Any] | None = None,
        log_options: LogOptions | None = None,
        timeout: float | None = None,
    ) -> tuple[bytes, httpx.Response]:
        """Issue one request and return the body with the raw response.

        Raises:
            HttpError: missing URL, transport failure, non-HTTP response,
                unknown status or non-2xx status.
            JsonError: when ``payload`` cannot be encoded.
        """
        client_request = self._build(
            self._client,
            method,
            target,
            refcode=refcode,
            data=data,
            payload=payload,
            form=form,
            accept=accept,
            headers=headers,
            user_info=user_info,
            log_options=log_options,
            timeout=timeout,
        )
        return self._dispatch(client_request)

    def get(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one GET; decode into ``decoding`` when given, else return bytes."""
        return self._call(Method.GET, target, refcode=refcode, decoding=decoding, **kwargs)

    def post(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one POST; decode into ``decoding`` when given, else return bytes."""
        return self._call(Method.POST, target, refcode=refcode, decoding=decoding, **kwargs)

    def put(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one PUT; decode into ``decoding`` when given, else return bytes."""
        return self._call(Method.PUT, target, refcode=refcode, decoding=decoding, **kwargs)

    def patch(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one PATCH; decode into ``decoding`` when given, else return bytes."""
        return self._call(Method.PATCH, target, refcode=refcode, decoding=decoding, **kwargs)

    def delete(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one DELETE; decode into ``decoding`` when given, else return bytes."""
        return self._call(Method.DELETE, target, refcode=refcode, decoding=decoding, **kwargs)

    def _call(self, method: Method, target: Target, *, refcode: str, decoding: Any, **kwargs: Any) -> Any:
        kwargs.setdefault("accept", self._accept_for(decoding, kwargs.get("form")))
        body, _ = self.request(method, target, refcode=refcode, **kwargs)
        if decoding is None:
            return body
        return self._decode(body, decoding, kwargs.get("user_info"), refcode)

    def _dispatch(self, client_request: ClientRequest) -> tuple[bytes, httpx.Response]:
        options = self._log_options(client_request)
        with log_context(self._context(client_request)):
            outgoing = self._before_send(client_request, options)
            try:
                response = self._client.send(outgoing)
            except httpx.RequestError as exc:
                raise self._transport_failure(client_request, exc) from exc
            body = self._after_send(client_request, response, options)
            return body, response


class AsyncHttpClient(_ClientCore):
    """Asynchronous client over ``httpx.AsyncClient``.

    Header methods stay synchronous; only dispatch is awaited.
    """

    def __init__(
        self,
        configuration: ClientConfiguration | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
        counter: RequestCounter | None = None,
    ) -> None:
        """Create a client; an injected ``client`` is used as-is and never closed."""
        super().__init__(configuration, counter)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._configuration.timeout_seconds,
            headers=dict(self._configuration.headers),
            follow_redirects=self._configuration.follow_redirects,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def send(
        self, request: httpx.Request, *, refcode: str, log_options: LogOptions | None = None
    ) -> tuple[bytes, httpx.Response]:
        """Dispatch a pre-built request as-is through the full pipeline."""
        client_request = ClientRequest.create(
            refcode=refcode,
            request=request,
            log_options=log_options,
            counter=self._counter,
        )
        return await self._dispatch(client_request)

    async def request(
        self,
        method: Method | str,
        target: Target,
        *,
        refcode: str,
        data: bytes | None = None,
        payload: Any = None,
        form: Form | None = None,
        accept: ContentType | None = None,
        headers: Mapping[str, str] | None = None,
        user_info: Mapping[str, Any] | None = None,
        log_options: LogOptions | None = None,
        timeout: float | None = None,
    ) -> tuple[bytes, httpx.Response]:
        """Issue one request and return the body with the raw response."""
        client_request = self._build(
            self._client,
            method,
            target,
            refcode=refcode,
            data=data,
            payload=payload,
            form=form,
            accept=accept,
            headers=headers,
            user_info=user_info,
            log_options=log_options,
            timeout=timeout,
        )
        return await self._dispatch(client_request)

    async def get(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one GET request."""
        return await self._call(Method.GET, target, refcode=refcode, decoding=decoding, **kwargs)

    async def post(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one POST request."""
        return await self._call(Method.POST, target, refcode=refcode, decoding=decoding, **kwargs)

    async def put(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one PUT request."""
        return await self._call(Method.PUT, target, refcode=refcode, decoding=decoding, **kwargs)

    async def patch(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one PATCH request."""
        return await self._call(Method.PATCH, target, refcode=refcode, decoding=decoding, **kwargs)

    async def delete(self, target: Target, *, refcode: str, decoding: Any = None, **kwargs: Any) -> Any:
        """Issue one DELETE request."""
        return await self._call(Method.DELETE, target, refcode=refcode, decoding=decoding, **kwargs)

    async def _call(self, method: Method, target: Target, *, refcode: str, decoding: Any, **kwargs: Any) -> Any:
        kwargs.setdefault("accept", self._accept_for(decoding, kwargs.get("form")))
        body, _ = await self.request(method, target, refcode=refcode, **kwargs)
        if decoding is None:
            return body
        return self._decode(body, decoding, kwargs.get("user_info"), refcode)

    async def _dispatch(self, client_request: ClientRequest) -> tuple[bytes, httpx.Response]:
        options = self._log_options(client_request)
        with log_context(self._context(client_request)):
            outgoing = self._before_send(client_request, options)
            try:
                response = await self._client.send(outgoing)
            except httpx.RequestError as exc:
                raise self._transport_failure(client_request, exc) from exc
            body = self._after_send(client_request, response, options)
            return body, response
