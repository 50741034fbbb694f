"""pytest fixtures exposing the suite/test lifecycle.

A test module opts in by requesting ``cli``. The suite is named after the
module unless it sets ``CLI_SUITE_NAME``; ``CLI_FORCE_MOCKED = True`` keeps
it mocked even when ``HTTP_MOCK_OFF`` is set. Override
``cli_session_config`` to point at a different script or recordings folder,
and ``cli_services`` to keep the suite away from the real Azure config folder.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from clitestpack.session.config import SessionConfig
from clitestpack.session.controller import CLITest
from clitestpack.stores.services import Services


@pytest.fixture(scope="module")
def cli_session_config() -> SessionConfig:
    return SessionConfig.from_env()


@pytest.fixture(scope="module")
def cli_services() -> Services:
    return Services.default()


@pytest.fixture(scope="module")
def cli_suite(
    request: pytest.FixtureRequest,
    cli_session_config: SessionConfig,
    cli_services: Services,
) -> Iterator[CLITest]:
    module = request.module
    suite_name = getattr(module, "CLI_SUITE_NAME", None) or module.__name__.rsplit(".", 1)[-1]
    force_mocked = bool(getattr(module, "CLI_FORCE_MOCKED", False))
    session = CLITest(suite_name, force_mocked, config=cli_session_config, services=cli_services)
    with session.suite():
        yield session


@pytest.fixture()
def cli(cli_suite: CLITest) -> Iterator[CLITest]:
    with cli_suite.test():
        yield cli_suite
