"""Suite and test lifecycle for CLI tests that replay recorded HTTP traffic."""

from __future__ import annotations

from contextlib import contextmanager
import json
import logging
import os
from pathlib import Path
import random
from typing import Any, Callable, Iterator, Mapping, MutableMapping

from clitestpack.capture.interceptor import HttpInterceptor
from clitestpack.fixture.io import FixtureWriter, fixture_path
from clitestpack.fixture.recording import Recording
from clitestpack.session.config import STRICT_SSL_ENV_VAR, SessionConfig
from clitestpack.session.exceptions import CommandArgumentError, SessionConfigError
from clitestpack.session.executor import DEFAULT_ENTRY_POINTS, CommandExecutor
from clitestpack.session.identifiers import generate_id
from clitestpack.stores.credentials import FixedCredentialStore
from clitestpack.stores.files import StubFileProbe
from clitestpack.stores.profile import PROFILE_FILE_NAME, Profile
from clitestpack.stores.services import Services, StandIns

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
TEST_ACCOUNT_NAME = "testAccount"


class CLITest:
    """Drives one test suite against either live HTTP or a per-suite recording.

    ``is_mocked`` and ``is_recording`` are fixed at construction and decide
    every lifecycle step: live suites talk to the network untouched, mocked
    suites either record each test's traffic into a scope of the recording
    file or replay the scope matching the test's position in the suite.
    """

    def __init__(
        self,
        test_prefix: str | None,
        force_mocked: bool = False,
        *,
        config: SessionConfig | None = None,
        services: Services | None = None,
        interceptor: HttpInterceptor | None = None,
        executor: CommandExecutor | None = None,
        environ: MutableMapping[str, str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.config = config or SessionConfig.from_env(self.environ)
        self.test_prefix = test_prefix
        self.current_test = 0
        self.skip_subscription = False

        if force_mocked:
            self.is_mocked = True
        else:
            self.is_mocked = bool(test_prefix) and not self.config.mock_off
        self.is_recording = self.config.record

        if self.is_mocked and not test_prefix:
            raise SessionConfigError("Mocked sessions need a suite name to locate their recording.")

        self.recordings_file: Path | None = (
            fixture_path(self.config.recordings_dir, test_prefix) if test_prefix else None
        )
        self.services = services or Services.default(self.environ)
        self.interceptor = interceptor or HttpInterceptor()
        self.executor = executor or CommandExecutor(
            services=self.services,
            entry_points=DEFAULT_ENTRY_POINTS | {self.config.entry_point},
        )
        self.stand_ins = StandIns()
        self._rng = rng
        self._writer: FixtureWriter | None = None
        self._recording: Recording | None = None

    @staticmethod
    def wrap(stand_ins: StandIns, target: Any, name: str, setup: Callable[[Any], Any]) -> Any:
        """Replace ``target.name`` with ``setup(original)``, restorable through ``stand_ins``."""
        return stand_ins.wrap(target, name, setup)

    def setup_suite(self) -> None:
        logger.info(
            "Setting up suite %s (mocked=%s, recording=%s)",
            self.test_prefix,
            self.is_mocked,
            self.is_recording,
        )
        try:
            self._install_suite()
        except Exception:
            self.stand_ins.restore_all()
            self.services.profiles.current = None
            self._writer = None
            self.environ.pop(STRICT_SSL_ENV_VAR, None)
            raise

    def _install_suite(self) -> None:
        if self.is_mocked:
            self.environ[STRICT_SSL_ENV_VAR] = "false"

            self.stand_ins.install(
                self.services,
                "credentials",
                FixedCredentialStore(self.config.certificate, self.config.certificate_key),
            )
            self.stand_ins.wrap(
                self.services,
                "files",
                lambda original: StubFileProbe(
                    original,
                    contents={
                        CONFIG_FILE_NAME: self.config_file_contents,
                        PROFILE_FILE_NAME: self.test_profile_contents,
                    },
                    present=frozenset({CONFIG_FILE_NAME}),
                ),
            )

            if self.is_recording:
                self._writer = FixtureWriter(self._require_recordings_file())
                self._writer.start()

        profiles = self.services.profiles
        self.stand_ins.wrap(profiles, "load", self._substitute_test_profile)
        profiles.current = profiles.load()

        self.remove_cache_files()

    def teardown_suite(self) -> None:
        self.current_test = 0
        self._recording = None

        if self.is_mocked:
            if self.is_recording and self._writer is not None:
                self._writer.finish()
                logger.info("Finished recording %s", self._writer.path)
            self._writer = None
            self.stand_ins.restore(self.services, "credentials")
            self.stand_ins.restore(self.services, "files")

        self.stand_ins.restore(self.services.profiles, "load")
        self.services.profiles.current = None
        self.environ.pop(STRICT_SSL_ENV_VAR, None)

    def remove_cache_files(self) -> None:
        subscription_id = self.config.subscription_id
        config_dir = self.services.config_dir
        for name in (
            f"sites.{subscription_id}.json",
            f"spaces.{subscription_id}.json",
            "environment.json",
            PROFILE_FILE_NAME,
        ):
            path = config_dir / name
            if self.services.files.exists(path):
                path.unlink()
                logger.debug("Removed cache file %s", path)

    def execute(self, cmd: str | list[Any] | tuple[Any, ...], *args: Any) -> Any:
        if not isinstance(cmd, (str, list, tuple)):
            raise CommandArgumentError(
                "First argument needs to be a string or sequence with the command to execute"
            )
        if not args or not callable(args[-1]):
            raise CommandArgumentError("Callback needs to be passed as last argument")

        callback = args[-1]
        template_args = list(args[:-1])

        if isinstance(cmd, str):
            tokens: list[Any] = []
            for token in cmd.split():
                if token == "%s":
                    if not template_args:
                        raise CommandArgumentError(f"Not enough arguments to fill {cmd!r}")
                    token = template_args.pop(0)
                tokens.append(token)
        else:
            tokens = list(cmd)

        if not tokens or tokens[0] != self.config.entry_point:
            tokens = [self.config.entry_point, self.config.script, *tokens]

        if not self.skip_subscription and self.is_mocked and not self.is_recording:
            if not self.config.subscription_id:
                raise SessionConfigError(
                    "AZURE_SUBSCRIPTION_ID must be set to replay commands against a recording."
                )
            tokens.extend(["-s", self.config.subscription_id])

        return self.executor.execute(tokens, callback)

    def setup_test(self) -> None:
        self.interceptor.activate(allow_net_connect=not self.is_mocked)
        try:
            if self.is_mocked and self.is_recording:
                self.interceptor.start_recording()
            elif self.is_mocked:
                if self._recording is None:
                    self._recording = Recording.open(self._require_recordings_file())
                scope = self._recording.scope_at(self.current_test)
                for register in scope:
                    register(self.interceptor)
                self.current_test += 1
        except Exception:
            self.interceptor.deactivate()
            raise

    def teardown_test(self) -> None:
        try:
            if self.is_mocked and self.is_recording and self._writer is not None:
                volatile = self.config.volatile_body_methods
                descriptors = []
                for exchange in self.interceptor.play():
                    if not exchange.is_call:
                        continue
                    descriptor = exchange.to_descriptor()
                    if descriptor.method in volatile:
                        descriptor = descriptor.with_any_body()
                    descriptors.append(descriptor)
                self._writer.append_scope(descriptors)
                self.interceptor.clear_recording()
                logger.info("Recorded %d call(s) into %s", len(descriptors), self._writer.path)
        finally:
            self.interceptor.deactivate()

    @contextmanager
    def suite(self) -> Iterator["CLITest"]:
        self.setup_suite()
        try:
            yield self
        finally:
            self.teardown_suite()

    @contextmanager
    def test(self) -> Iterator["CLITest"]:
        self.setup_test()
        try:
            yield self
        finally:
            self.teardown_test()

    def generate_id(self, prefix: str, current_list: list[str] | None = None) -> str:
        return generate_id(prefix, current_list, mocked=self.is_mocked, rng=self._rng)

    def test_subscription_data(self) -> dict[str, Any]:
        return {
            "environments": [],
            "subscriptions": [
                {
                    "id": self.config.subscription_id,
                    "name": TEST_ACCOUNT_NAME,
                    "managementEndpointUrl": self.config.management_endpoint_url,
                    "managementCertificate": {
                        "cert": self.config.certificate,
                        "key": self.config.certificate_key,
                    },
                }
            ],
        }

    def test_profile_contents(self) -> str:
        return json.dumps(self.test_subscription_data())

    def config_file_contents(self) -> str:
        return json.dumps(
            {
                "endpoint": self.config.management_endpoint_url.rstrip("/"),
                "subscription": self.config.subscription_id,
            }
        )

    def _substitute_test_profile(
        self,
        original_load: Callable[..., Profile],
    ) -> Callable[..., Profile]:
        default_file = self.services.profiles.default_file

        def load(source: str | Path | Mapping[str, Any] | None = None) -> Profile:
            if source is None or (not isinstance(source, Mapping) and Path(source) == default_file):
                return original_load(self.test_subscription_data())
            return original_load(source)

        return load

    def _require_recordings_file(self) -> Path:
        if self.recordings_file is None:
            raise SessionConfigError("This session has no suite name, so it has no recording file.")
        return self.recordings_file
