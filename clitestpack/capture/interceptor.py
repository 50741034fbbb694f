"""Process-wide HTTP interception with record and playback modes."""

from __future__ import annotations

from contextlib import ExitStack
import logging
import threading
from typing import Any

from clitestpack.capture.adapters import intercept_httpx, intercept_requests
from clitestpack.capture.exceptions import InterceptorStateError, UnmatchedRequestError
from clitestpack.capture.interceptors import (
    ANY_BODY,
    CallDescriptor,
    HttpRequest,
    HttpResponse,
    RecordedExchange,
)

logger = logging.getLogger(__name__)


class HttpInterceptor:
    """Routes `requests` and `httpx` traffic through registered expectations.

    While active, every request is first matched against the registered
    expectations (each one answers a single request). A request with no match
    goes to the real transport when recording or when network access is
    allowed, and fails with :class:`UnmatchedRequestError` otherwise.
    """

    def __init__(self) -> None:
        self._expectations: list[CallDescriptor] = []
        self._recorded: list[RecordedExchange] = []
        self._recording = False
        self._allow_net_connect = True
        self._patches: ExitStack | None = None
        self._lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        return self._patches is not None

    @property
    def is_recording(self) -> bool:
        return self._recording

    def activate(self, *, allow_net_connect: bool = True) -> None:
        if self._patches is not None:
            raise InterceptorStateError("HTTP interception is already active.")

        patches = ExitStack()
        try:
            patches.enter_context(intercept_requests(self))
            patches.enter_context(intercept_httpx(self))
        except Exception:
            patches.close()
            raise
        self._patches = patches
        self._allow_net_connect = allow_net_connect
        logger.debug("HTTP interception activated (net connect allowed: %s)", allow_net_connect)

    def deactivate(self) -> None:
        if self._patches is None:
            return
        self._patches.close()
        self._patches = None
        with self._lock:
            if self._expectations:
                logger.warning(
                    "Deactivating with %d unconsumed expectation(s): %s",
                    len(self._expectations),
                    ", ".join(f"{item.method} {item.url}" for item in self._expectations),
                )
            self._expectations.clear()
            self._recording = False
            self._allow_net_connect = True
        logger.debug("HTTP interception deactivated")

    def start_recording(self) -> None:
        if self._patches is None:
            raise InterceptorStateError("Activate HTTP interception before recording.")
        with self._lock:
            self._recording = True

    def play(self) -> list[RecordedExchange]:
        """Return every exchange captured since recording started."""
        with self._lock:
            return list(self._recorded)

    def clear_recording(self) -> None:
        with self._lock:
            self._recorded.clear()

    def register(self, descriptor: CallDescriptor) -> CallDescriptor:
        with self._lock:
            self._expectations.append(descriptor)
        return descriptor

    def expect(
        self,
        method: str,
        url: str,
        *,
        body: Any = ANY_BODY,
        status: int = 200,
        headers: dict[str, str] | None = None,
        response: str | None = None,
    ) -> CallDescriptor:
        return self.register(
            CallDescriptor(
                method=method,
                url=url,
                body=body,
                status=status,
                headers=dict(headers or {}),
                response=response,
            )
        )

    def pending(self) -> list[CallDescriptor]:
        with self._lock:
            return list(self._expectations)

    def match(self, request: HttpRequest) -> CallDescriptor | None:
        """Consume the first expectation matching ``request``.

        Returns ``None`` when the request may go to the real transport.
        """
        with self._lock:
            for index, descriptor in enumerate(self._expectations):
                if descriptor.matches(request):
                    del self._expectations[index]
                    logger.debug("Serving %s %s from expectation", request.method, request.url)
                    return descriptor
            if self._recording or self._allow_net_connect:
                logger.debug("Passing %s %s to network", request.method, request.url)
                return None

        raise UnmatchedRequestError(
            f"No recorded interaction matches {request.method} {request.url} "
            "and network access is disabled."
        )

    def record(self, request: HttpRequest, response: HttpResponse) -> None:
        with self._lock:
            if self._recording:
                self._recorded.append(RecordedExchange(request=request, response=response))

    def record_failure(self, request: HttpRequest, error: Exception) -> None:
        with self._lock:
            if self._recording:
                self._recorded.append(
                    RecordedExchange(
                        request=request,
                        error=f"{error.__class__.__name__}: {error}",
                    )
                )
