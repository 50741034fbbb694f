"""Positional access to the scopes of one recording."""

from __future__ import annotations

from pathlib import Path

from clitestpack.fixture.exceptions import FixtureExhaustedError
from clitestpack.fixture.io import Scope, load_fixture


class Recording:
    """Loaded scopes of a recording file, addressed by test index."""

    def __init__(self, path: str | Path, scopes: list[Scope]) -> None:
        self.path = Path(path)
        self.scopes = scopes

    @classmethod
    def open(cls, path: str | Path) -> "Recording":
        return cls(path, load_fixture(path))

    def __len__(self) -> int:
        return len(self.scopes)

    def scope_at(self, index: int) -> Scope:
        if not 0 <= index < len(self.scopes):
            raise FixtureExhaustedError(
                f"It appears the {self.path} file has fewer recorded scopes ({len(self.scopes)}) "
                f"than there are mocked tests (requested test #{index + 1}). "
                "You may need to re-generate it."
            )
        return self.scopes[index]
