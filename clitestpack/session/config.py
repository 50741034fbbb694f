"""Session configuration and the environment toggles it is read from."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

from clitestpack.capture.interceptors import MUTATING_METHODS
from clitestpack.session.exceptions import SessionConfigError

MOCK_OFF_ENV_VAR = "HTTP_MOCK_OFF"
RECORD_ENV_VAR = "AZURE_HTTP_RECORD"
STRICT_SSL_ENV_VAR = "AZURE_ENABLE_STRICT_SSL"
SUBSCRIPTION_ENV_VAR = "AZURE_SUBSCRIPTION_ID"
CERTIFICATE_ENV_VAR = "AZURE_CERTIFICATE"
CERTIFICATE_KEY_ENV_VAR = "AZURE_CERTIFICATE_KEY"
RECORDINGS_DIR_ENV_VAR = "CLITEST_RECORDINGS_DIR"

DEFAULT_RECORDINGS_DIR = Path("tests") / "recordings"
DEFAULT_ENTRY_POINT = "python"
DEFAULT_SCRIPT = "cli.py"
DEFAULT_MANAGEMENT_ENDPOINT = "https://management.core.windows.net/"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(slots=True)
class SessionConfig:
    """Inputs that decide how a test session runs commands and HTTP."""

    recordings_dir: Path = DEFAULT_RECORDINGS_DIR
    script: str = DEFAULT_SCRIPT
    entry_point: str = DEFAULT_ENTRY_POINT
    subscription_id: str | None = None
    certificate: str | None = None
    certificate_key: str | None = None
    management_endpoint_url: str = DEFAULT_MANAGEMENT_ENDPOINT
    mock_off: bool = False
    record: bool = False
    volatile_body_methods: frozenset[str] = field(default_factory=lambda: MUTATING_METHODS)

    def __post_init__(self) -> None:
        self.recordings_dir = Path(self.recordings_dir)
        if not str(self.script).strip():
            raise SessionConfigError("script must name the CLI entry script")
        if not str(self.entry_point).strip():
            raise SessionConfigError("entry_point must not be empty")
        self.volatile_body_methods = frozenset(
            method.strip().upper() for method in self.volatile_body_methods if method.strip()
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "SessionConfig":
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "subscription_id": env.get(SUBSCRIPTION_ENV_VAR) or None,
            "certificate": env.get(CERTIFICATE_ENV_VAR) or None,
            "certificate_key": env.get(CERTIFICATE_KEY_ENV_VAR) or None,
            "mock_off": env_flag(env.get(MOCK_OFF_ENV_VAR)),
            "record": env_flag(env.get(RECORD_ENV_VAR)),
        }
        recordings_dir = (env.get(RECORDINGS_DIR_ENV_VAR) or "").strip()
        if recordings_dir:
            values["recordings_dir"] = Path(recordings_dir)
        values.update(overrides)
        return cls(**values)


def env_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY
