"""Stable public API surface for clitestkit.

This module is the supported import path for test suites and for CLIs that
read their credentials and profile through the harness services.
"""

from __future__ import annotations

from clitestpack.capture import ANY_BODY, CallDescriptor, HttpInterceptor, UnmatchedRequestError
from clitestpack.fixture import FixtureError, FixtureExhaustedError, FixtureNotFoundError
from clitestpack.session import (
    CLITest,
    CommandArgumentError,
    CommandResult,
    SessionConfig,
    SessionError,
)
from clitestpack.stores import Profile, Services, Subscription, get_services, use_services

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CLITest",
    "SessionConfig",
    "CommandResult",
    "HttpInterceptor",
    "CallDescriptor",
    "ANY_BODY",
    "Services",
    "Profile",
    "Subscription",
    "get_services",
    "use_services",
    "SessionError",
    "CommandArgumentError",
    "FixtureError",
    "FixtureExhaustedError",
    "FixtureNotFoundError",
    "UnmatchedRequestError",
]
