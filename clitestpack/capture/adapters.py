"""Scoped drop-in interception adapters for HTTP clients."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from http import HTTPStatus
from importlib import import_module
from typing import TYPE_CHECKING, Any

from clitestpack.capture.interceptors import (
    CallDescriptor,
    HttpRequest,
    HttpResponse,
    replayable_headers,
)
from clitestpack.core.canonical import canonical_body, form_body

if TYPE_CHECKING:
    from clitestpack.capture.interceptor import HttpInterceptor


@contextmanager
def intercept_requests(interceptor: "HttpInterceptor") -> Iterator[None]:
    """Patch requests Session.request within scope and route it through ``interceptor``."""
    requests_module = import_module("requests")
    session_cls = requests_module.sessions.Session
    original_request = session_cls.request

    def wrapped_request(self: Any, method: str, url: str, **kwargs: Any) -> Any:
        prepared_url = requests_module.Request(
            method=method,
            url=url,
            params=kwargs.get("params"),
        ).prepare().url
        request = HttpRequest(
            method=method.upper(),
            url=str(prepared_url),
            headers=dict(kwargs.get("headers") or {}),
            body=_extract_request_body(kwargs),
        )

        descriptor = interceptor.match(request)
        if descriptor is not None:
            return _build_requests_response(requests_module, request, descriptor)

        try:
            response = original_request(self, method, url, **kwargs)
        except Exception as error:
            interceptor.record_failure(request, error)
            raise

        interceptor.record(
            request,
            HttpResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=_extract_response_body(response, streamed=bool(kwargs.get("stream"))),
            ),
        )
        return response

    session_cls.request = wrapped_request
    try:
        yield
    finally:
        session_cls.request = original_request


@contextmanager
def intercept_httpx(interceptor: "HttpInterceptor") -> Iterator[None]:
    """Patch httpx Client/AsyncClient request methods within scope."""
    httpx_module = import_module("httpx")
    client_cls = httpx_module.Client
    async_client_cls = httpx_module.AsyncClient

    original_client_request = client_cls.request
    original_async_client_request = async_client_cls.request

    def wrapped_client_request(self: Any, method: str, url: Any, **kwargs: Any) -> Any:
        request = _httpx_request(self, method, url, kwargs)

        descriptor = interceptor.match(request)
        if descriptor is not None:
            return _build_httpx_response(httpx_module, request, descriptor)

        try:
            response = original_client_request(self, method, url, **kwargs)
        except Exception as error:
            interceptor.record_failure(request, error)
            raise

        interceptor.record(
            request,
            HttpResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=_extract_response_body(response, streamed=False),
            ),
        )
        return response

    async def wrapped_async_client_request(
        self: Any,
        method: str,
        url: Any,
        **kwargs: Any,
    ) -> Any:
        request = _httpx_request(self, method, url, kwargs)

        descriptor = interceptor.match(request)
        if descriptor is not None:
            return _build_httpx_response(httpx_module, request, descriptor)

        try:
            response = await original_async_client_request(self, method, url, **kwargs)
        except Exception as error:
            interceptor.record_failure(request, error)
            raise

        interceptor.record(
            request,
            HttpResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=_extract_response_body(response, streamed=False),
            ),
        )
        return response

    client_cls.request = wrapped_client_request
    async_client_cls.request = wrapped_async_client_request
    try:
        yield
    finally:
        client_cls.request = original_client_request
        async_client_cls.request = original_async_client_request


def _httpx_request(client: Any, method: str, url: Any, kwargs: dict[str, Any]) -> HttpRequest:
    built = client.build_request(method, url, params=kwargs.get("params"))
    return HttpRequest(
        method=method.upper(),
        url=str(built.url),
        headers=dict(kwargs.get("headers") or {}),
        body=_extract_request_body(kwargs),
    )


def _extract_request_body(kwargs: dict[str, Any]) -> str | None:
    if kwargs.get("json") is not None:
        return canonical_body(kwargs["json"])
    if kwargs.get("data") is not None:
        return form_body(kwargs["data"])
    if kwargs.get("content") is not None:
        return canonical_body(kwargs["content"])
    return None


def _extract_response_body(response: Any, *, streamed: bool) -> str | None:
    if streamed:
        return "<streaming response omitted>"
    if hasattr(response, "text"):
        return response.text
    content = getattr(response, "content", None)
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def _build_requests_response(
    requests_module: Any,
    request: HttpRequest,
    descriptor: CallDescriptor,
) -> Any:
    response = requests_module.models.Response()
    response.status_code = descriptor.status
    response.reason = _reason_phrase(descriptor.status)
    response.headers = requests_module.structures.CaseInsensitiveDict(
        replayable_headers(descriptor.headers)
    )
    response._content = (descriptor.response or "").encode("utf-8")
    response.encoding = "utf-8"
    response.url = request.url
    response.request = requests_module.Request(
        method=request.method,
        url=request.url,
        headers=request.headers,
    ).prepare()
    return response


def _build_httpx_response(
    httpx_module: Any,
    request: HttpRequest,
    descriptor: CallDescriptor,
) -> Any:
    return httpx_module.Response(
        descriptor.status,
        headers=replayable_headers(descriptor.headers),
        content=(descriptor.response or "").encode("utf-8"),
        request=httpx_module.Request(request.method, request.url, headers=request.headers),
    )


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""
