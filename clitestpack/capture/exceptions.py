"""Interception subsystem exceptions."""


class InterceptionError(Exception):
    """Base class for HTTP interception errors."""


class UnmatchedRequestError(InterceptionError):
    """Raised when a request reaches the interceptor with no recorded match and no network access."""


class InterceptorStateError(InterceptionError):
    """Raised when the interceptor is driven out of order."""
