"""Service container handed to the CLI under test, and stand-in bookkeeping."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

from clitestpack.stores.credentials import CredentialStore, KeyFileStore
from clitestpack.stores.files import FileProbe, LocalFileProbe
from clitestpack.stores.profile import PROFILE_FILE_NAME, ProfileStore

logger = logging.getLogger(__name__)

AZURE_CONFIG_DIR_ENV_VAR = "AZURE_CONFIG_DIR"
CERTIFICATE_FILE_NAME = "managementCertificate.pem"

_CURRENT_SERVICES: ContextVar["Services | None"] = ContextVar(
    "clitest_current_services", default=None
)


def azure_dir(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    configured = env.get(AZURE_CONFIG_DIR_ENV_VAR, "").strip()
    if configured:
        return Path(configured)
    return Path.home() / ".azure"


@dataclass(slots=True)
class Services:
    """Everything the CLI reads from disk, behind replaceable stores."""

    credentials: CredentialStore
    files: FileProbe
    profiles: ProfileStore
    config_dir: Path

    @classmethod
    def default(cls, environ: Mapping[str, str] | None = None) -> "Services":
        root = azure_dir(environ)
        return cls(
            credentials=KeyFileStore(root / CERTIFICATE_FILE_NAME),
            files=LocalFileProbe(),
            profiles=ProfileStore(root / PROFILE_FILE_NAME),
            config_dir=root,
        )


def get_services() -> Services:
    current = _CURRENT_SERVICES.get()
    if current is None:
        return Services.default()
    return current


@contextmanager
def use_services(services: Services) -> Iterator[Services]:
    token = _CURRENT_SERVICES.set(services)
    try:
        yield services
    finally:
        _CURRENT_SERVICES.reset(token)


_MISSING = object()


class StandIns:
    """Replaces attributes with stand-ins and puts the originals back."""

    def __init__(self) -> None:
        self._originals: dict[tuple[int, str], tuple[Any, Any]] = {}

    def install(self, target: Any, name: str, replacement: Any) -> Any:
        key = (id(target), name)
        if key in self._originals:
            raise ValueError(f"{type(target).__name__}.{name} already has a stand-in installed")
        # Remember whether the attribute lived on the instance so restore does not pin a bound method.
        original = vars(target).get(name, _MISSING) if hasattr(target, "__dict__") else getattr(target, name)
        self._originals[key] = (target, original)
        setattr(target, name, replacement)
        logger.debug("Installed stand-in for %s.%s", type(target).__name__, name)
        return replacement

    def wrap(self, target: Any, name: str, setup: Callable[[Any], Any]) -> Any:
        """Install ``setup(original)`` in place of ``target.name``."""
        return self.install(target, name, setup(getattr(target, name)))

    def is_installed(self, target: Any, name: str) -> bool:
        return (id(target), name) in self._originals

    def restore(self, target: Any, name: str) -> None:
        entry = self._originals.pop((id(target), name), None)
        if entry is None:
            return
        _, original = entry
        if original is _MISSING:
            delattr(target, name)
        else:
            setattr(target, name, original)

    def restore_all(self) -> None:
        for target, name in [(entry[0], key[1]) for key, entry in self._originals.items()]:
            self.restore(target, name)
