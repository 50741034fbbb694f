"""Recording fixture subsystem."""

from clitestpack.fixture.exceptions import (
    FixtureError,
    FixtureExhaustedError,
    FixtureFormatError,
    FixtureNotFoundError,
)
from clitestpack.fixture.io import (
    FIXTURE_HEADER,
    FIXTURE_SUFFIX,
    FixtureSummary,
    FixtureWriter,
    Scope,
    collect_scope,
    describe_fixture,
    fixture_path,
    load_fixture,
    render_descriptor,
    render_scope,
)
from clitestpack.fixture.recording import Recording

__all__ = [
    "FixtureError",
    "FixtureExhaustedError",
    "FixtureFormatError",
    "FixtureNotFoundError",
    "Recording",
    "FixtureSummary",
    "FixtureWriter",
    "FIXTURE_HEADER",
    "FIXTURE_SUFFIX",
    "Scope",
    "collect_scope",
    "describe_fixture",
    "fixture_path",
    "load_fixture",
    "render_descriptor",
    "render_scope",
]
