"""HTTP interception subsystem."""

from clitestpack.capture.adapters import intercept_httpx, intercept_requests
from clitestpack.capture.exceptions import (
    InterceptionError,
    InterceptorStateError,
    UnmatchedRequestError,
)
from clitestpack.capture.interceptor import HttpInterceptor
from clitestpack.capture.interceptors import (
    ANY_BODY,
    MUTATING_METHODS,
    CallDescriptor,
    HttpRequest,
    HttpResponse,
    RecordedExchange,
    replayable_headers,
)

__all__ = [
    "InterceptionError",
    "InterceptorStateError",
    "UnmatchedRequestError",
    "HttpInterceptor",
    "intercept_httpx",
    "intercept_requests",
    "ANY_BODY",
    "MUTATING_METHODS",
    "CallDescriptor",
    "HttpRequest",
    "HttpResponse",
    "RecordedExchange",
    "replayable_headers",
]
