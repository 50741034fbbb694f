"""File reads and existence checks behind a swappable probe."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Protocol


class FileProbe(Protocol):
    def read_text(self, path: str | Path) -> str: ...

    def exists(self, path: str | Path) -> bool: ...


class LocalFileProbe:
    def read_text(self, path: str | Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()


class StubFileProbe:
    """Answers for well-known file names and delegates everything else.

    ``contents`` maps a base name to a factory for its text; ``present`` lists
    base names that always report as existing.
    """

    def __init__(
        self,
        delegate: FileProbe,
        *,
        contents: Mapping[str, Callable[[], str]],
        present: frozenset[str] = frozenset(),
    ) -> None:
        self.delegate = delegate
        self.contents = dict(contents)
        self.present = present

    def read_text(self, path: str | Path) -> str:
        factory = self.contents.get(Path(path).name)
        if factory is not None:
            return factory()
        return self.delegate.read_text(path)

    def exists(self, path: str | Path) -> bool:
        if Path(path).name in self.present:
            return True
        return self.delegate.exists(path)
