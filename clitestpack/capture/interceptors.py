"""Request/response shapes and call descriptors for the HTTP boundary."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import re
from typing import Any

from clitestpack.core.canonical import canonical_body

ANY_BODY = "*"

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "MERGE", "DELETE"})

# Transport-level headers that no longer describe a replayed, already-decoded body.
_UNREPLAYABLE_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding", "connection"})
_CHARSET_PARAM = re.compile(r";\s*charset=[^;]*", re.IGNORECASE)


@dataclass(slots=True)
class HttpRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


@dataclass(slots=True)
class HttpResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


@dataclass(slots=True)
class CallDescriptor:
    """One expected HTTP exchange: what to match and what to answer with."""

    method: str
    url: str
    body: str | None = ANY_BODY
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    response: str | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.body != ANY_BODY:
            self.body = canonical_body(self.body)

    def matches(self, request: HttpRequest) -> bool:
        if self.method != request.method.upper():
            return False
        if self.url != request.url:
            return False
        if self.body == ANY_BODY:
            return True
        return self.body == request.body

    def with_any_body(self) -> "CallDescriptor":
        return replace(self, body=ANY_BODY)


@dataclass(slots=True)
class RecordedExchange:
    """A request seen while recording, with its response or transport error."""

    request: HttpRequest
    response: HttpResponse | None = None
    error: str | None = None

    @property
    def is_call(self) -> bool:
        return self.response is not None

    def to_descriptor(self) -> CallDescriptor:
        if self.response is None:
            raise ValueError(
                f"Exchange {self.request.method} {self.request.url} has no response to replay"
            )
        return CallDescriptor(
            method=self.request.method,
            url=self.request.url,
            body=self.request.body,
            status=self.response.status_code,
            headers=replayable_headers(self.response.headers),
            response=self.response.body,
        )


def replayable_headers(headers: dict[str, Any]) -> dict[str, str]:
    replayable: dict[str, str] = {}
    for name, value in headers.items():
        lowered = str(name).lower()
        if lowered in _UNREPLAYABLE_HEADERS:
            continue
        text = str(value)
        if lowered == "content-type":
            text = utf8_content_type(text)
        replayable[str(name)] = text
    return replayable


def utf8_content_type(value: str) -> str:
    """Point a Content-Type charset at UTF-8, the encoding replayed bodies are sent in."""
    return _CHARSET_PARAM.sub("; charset=utf-8", value, count=1)
