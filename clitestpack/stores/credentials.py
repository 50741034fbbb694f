"""Management certificate storage."""

from __future__ import annotations

from pathlib import Path
import re
from typing import Protocol

from clitestpack.stores.exceptions import CredentialFileError

_CERT_RE = re.compile(
    r"-----BEGIN CERTIFICATE-----.*?-----END CERTIFICATE-----",
    re.DOTALL,
)
_KEY_RE = re.compile(
    r"-----BEGIN (?P<kind>(?:RSA |EC )?PRIVATE KEY)-----.*?-----END (?P=kind)-----",
    re.DOTALL,
)


class CredentialStore(Protocol):
    def read(self) -> dict[str, str | None]: ...

    def write(self, data: dict[str, str | None]) -> None: ...


class KeyFileStore:
    """Certificate and private key kept together in one PEM file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> dict[str, str | None]:
        text = self.path.read_text(encoding="utf-8")
        cert = _CERT_RE.search(text)
        key = _KEY_RE.search(text)
        if cert is None or key is None:
            raise CredentialFileError(
                f"{self.path} must contain both a certificate and a private key block."
            )
        return {"cert": cert.group(0), "key": key.group(0)}

    def write(self, data: dict[str, str | None]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        blocks = [block.strip() for block in (data.get("cert"), data.get("key")) if block]
        self.path.write_text("\n".join(blocks) + "\n", encoding="utf-8")


class FixedCredentialStore:
    """Serves one in-memory certificate pair and discards writes."""

    def __init__(self, cert: str | None, key: str | None) -> None:
        self.cert = cert
        self.key = key

    def read(self) -> dict[str, str | None]:
        return {"cert": self.cert, "key": self.key}

    def write(self, data: dict[str, str | None]) -> None:
        return None
