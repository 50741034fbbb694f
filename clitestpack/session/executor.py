"""In-process execution of the CLI script under test."""

from __future__ import annotations

from contextlib import ExitStack, redirect_stderr, redirect_stdout
from dataclasses import dataclass
import io
import logging
from pathlib import Path
import runpy
import sys
import traceback
from typing import Any, Callable, Sequence

from clitestpack.session.exceptions import CommandArgumentError
from clitestpack.stores.services import Services, use_services

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_POINTS = frozenset({"python", "python3"})


@dataclass(frozen=True, slots=True)
class CommandResult:
    exit_status: int
    text: str
    error_text: str


class CommandExecutor:
    """Runs ``python script.py args...`` inside this interpreter.

    Running in-process keeps the HTTP interceptor and the session's services
    in effect for the command.
    """

    def __init__(
        self,
        *,
        services: Services | None = None,
        entry_points: frozenset[str] = DEFAULT_ENTRY_POINTS,
    ) -> None:
        self.services = services
        self.entry_points = entry_points

    def execute(self, tokens: Sequence[Any], callback: Callable[[CommandResult], Any]) -> Any:
        return callback(self.run(tokens))

    def run(self, tokens: Sequence[Any]) -> CommandResult:
        args = [str(token) for token in tokens]
        if args and Path(args[0]).name in self.entry_points:
            args = args[1:]
        if not args:
            raise CommandArgumentError("missing script to execute after the entry point")

        logger.info("Executing %s", " ".join(args))
        stdout = io.StringIO()
        stderr = io.StringIO()
        previous_argv = list(sys.argv)
        exit_status = 0
        with ExitStack() as stack:
            if self.services is not None:
                stack.enter_context(use_services(self.services))
            stack.enter_context(redirect_stdout(stdout))
            stack.enter_context(redirect_stderr(stderr))
            try:
                sys.argv = list(args)
                runpy.run_path(args[0], run_name="__main__")
            except SystemExit as signal:
                exit_status = _exit_status(signal.code)
            except Exception:
                traceback.print_exc()
                exit_status = 1
            finally:
                sys.argv = previous_argv

        result = CommandResult(
            exit_status=exit_status,
            text=stdout.getvalue(),
            error_text=stderr.getvalue(),
        )
        logger.debug("Command exited with status %d", result.exit_status)
        return result


def _exit_status(code: Any) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return 1
