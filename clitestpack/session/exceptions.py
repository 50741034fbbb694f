"""Session subsystem exceptions."""


class SessionError(Exception):
    """Base class for test session errors."""


class SessionConfigError(SessionError):
    """Invalid session configuration."""


class CommandArgumentError(SessionError, TypeError):
    """`execute` was called without a usable command or trailing callback."""
