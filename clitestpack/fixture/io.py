"""Read and write per-suite recording files.

A recording is a Python module defining ``scopes``: one list per test, in the
order the tests ran, each holding callables that re-register one HTTP
exchange on the interceptor they are given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import runpy
from typing import Any, Callable, Iterable

from clitestpack.capture.interceptors import ANY_BODY, CallDescriptor
from clitestpack.fixture.exceptions import FixtureFormatError, FixtureNotFoundError

logger = logging.getLogger(__name__)

FIXTURE_SUFFIX = ".recording.py"
FIXTURE_HEADER = "# This file has been autogenerated.\n\nscopes = ["

Scope = list[Callable[[Any], Any]]


def fixture_path(recordings_dir: str | Path, suite_name: str) -> Path:
    return Path(recordings_dir) / f"{suite_name}{FIXTURE_SUFFIX}"


def render_descriptor(descriptor: CallDescriptor) -> str:
    arguments = [
        repr(descriptor.method),
        repr(descriptor.url),
        f"body={descriptor.body!r}",
        f"status={descriptor.status!r}",
        f"headers={descriptor.headers!r}",
        f"response={descriptor.response!r}",
    ]
    return f"lambda http: http.expect({', '.join(arguments)})"


def render_scope(descriptors: Iterable[CallDescriptor]) -> str:
    lines = [f"    {render_descriptor(descriptor)}," for descriptor in descriptors]
    if not lines:
        return "[]"
    return "[\n" + "\n".join(lines) + "\n]"


class FixtureWriter:
    """Streams scopes into a recording file as tests finish."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.scope_written = False

    def start(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(FIXTURE_HEADER, encoding="utf-8")
        self.scope_written = False
        logger.info("Recording HTTP fixtures to %s", self.path)

    def append_scope(self, descriptors: Iterable[CallDescriptor]) -> str:
        rendered = render_scope(descriptors)
        prefix = ",\n" if self.scope_written else ""
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(prefix + rendered)
        self.scope_written = True
        return rendered

    def finish(self) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write("]\n")


def load_fixture(path: str | Path) -> list[Scope]:
    target = Path(path)
    if not target.is_file():
        raise FixtureNotFoundError(
            f"Recording {target} does not exist. Run the suite in record mode to create it."
        )

    try:
        namespace = runpy.run_path(str(target), run_name="clitest_recording")
    except SyntaxError as error:
        raise FixtureFormatError(f"Recording {target} is not valid Python: {error}") from error

    scopes = namespace.get("scopes")
    if not isinstance(scopes, list) or not all(isinstance(scope, list) for scope in scopes):
        raise FixtureFormatError(f"Recording {target} must define `scopes` as a list of lists.")
    return scopes


class _DescriptorCollector:
    """Stands in for the interceptor when a scope is evaluated for inspection."""

    def __init__(self) -> None:
        self.descriptors: list[CallDescriptor] = []

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
        descriptor = CallDescriptor(
            method=method,
            url=url,
            body=body,
            status=status,
            headers=dict(headers or {}),
            response=response,
        )
        self.descriptors.append(descriptor)
        return descriptor


def collect_scope(scope: Scope) -> list[CallDescriptor]:
    collector = _DescriptorCollector()
    for register in scope:
        register(collector)
    return collector.descriptors


@dataclass(slots=True)
class FixtureSummary:
    path: Path
    scopes: list[list[CallDescriptor]] = field(default_factory=list)

    @property
    def scope_count(self) -> int:
        return len(self.scopes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "scope_count": self.scope_count,
            "scopes": [
                [
                    {
                        "method": descriptor.method,
                        "url": descriptor.url,
                        "status": descriptor.status,
                        "any_body": descriptor.body == ANY_BODY,
                    }
                    for descriptor in scope
                ]
                for scope in self.scopes
            ],
        }


def describe_fixture(path: str | Path) -> FixtureSummary:
    scopes = load_fixture(path)
    return FixtureSummary(path=Path(path), scopes=[collect_scope(scope) for scope in scopes])
