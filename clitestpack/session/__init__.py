"""Test session controller and its command executor."""

from clitestpack.session.config import (
    CERTIFICATE_ENV_VAR,
    CERTIFICATE_KEY_ENV_VAR,
    MOCK_OFF_ENV_VAR,
    RECORD_ENV_VAR,
    RECORDINGS_DIR_ENV_VAR,
    STRICT_SSL_ENV_VAR,
    SUBSCRIPTION_ENV_VAR,
    SessionConfig,
    env_flag,
)
from clitestpack.session.controller import CLITest
from clitestpack.session.exceptions import CommandArgumentError, SessionConfigError, SessionError
from clitestpack.session.executor import DEFAULT_ENTRY_POINTS, CommandExecutor, CommandResult
from clitestpack.session.identifiers import generate_id

__all__ = [
    "SessionError",
    "SessionConfigError",
    "CommandArgumentError",
    "SessionConfig",
    "CERTIFICATE_ENV_VAR",
    "CERTIFICATE_KEY_ENV_VAR",
    "MOCK_OFF_ENV_VAR",
    "RECORD_ENV_VAR",
    "RECORDINGS_DIR_ENV_VAR",
    "STRICT_SSL_ENV_VAR",
    "SUBSCRIPTION_ENV_VAR",
    "env_flag",
    "CLITest",
    "DEFAULT_ENTRY_POINTS",
    "CommandExecutor",
    "CommandResult",
    "generate_id",
]
