import sys
from pathlib import Path

import pytest

from clitestpack.session import CommandArgumentError, CommandExecutor, CommandResult
from clitestpack.stores import FixedCredentialStore, Services, get_services


def _script(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "tool.py"
    path.write_text(body, encoding="utf-8")
    return path


def test_executor_captures_output_and_argv(tmp_path: Path) -> None:
    script = _script(
        tmp_path,
        "import sys\n"
        "print('args', sys.argv[1:])\n"
        "print('warning', file=sys.stderr)\n",
    )
    previous_argv = list(sys.argv)

    result = CommandExecutor().run(["python", str(script), "vm", "list"])

    assert result == CommandResult(
        exit_status=0,
        text="args ['vm', 'list']\n",
        error_text="warning\n",
    )
    assert sys.argv == previous_argv


def test_executor_maps_system_exit_codes(tmp_path: Path) -> None:
    executor = CommandExecutor()

    assert executor.run(["python", str(_script(tmp_path, "raise SystemExit(3)\n"))]).exit_status == 3
    assert executor.run(["python", str(_script(tmp_path, "raise SystemExit()\n"))]).exit_status == 0

    message = executor.run(["python", str(_script(tmp_path, "raise SystemExit('bad input')\n"))])
    assert message.exit_status == 1
    assert "bad input" in message.error_text


def test_executor_reports_uncaught_exceptions(tmp_path: Path) -> None:
    script = _script(tmp_path, "raise RuntimeError('boom')\n")

    result = CommandExecutor().run(["python3", str(script)])

    assert result.exit_status == 1
    assert "RuntimeError: boom" in result.error_text


def test_executor_forwards_result_to_callback(tmp_path: Path) -> None:
    script = _script(tmp_path, "print('hello')\n")
    seen: list[CommandResult] = []

    returned = CommandExecutor().execute(["python", str(script)], lambda result: seen.append(result) or "cb")

    assert returned == "cb"
    assert seen[0].text == "hello\n"


def test_executor_makes_services_current(tmp_path: Path, services: Services) -> None:
    services.credentials = FixedCredentialStore("cert-from-session", None)
    script = _script(
        tmp_path,
        "from clitestkit import get_services\n"
        "print(get_services().credentials.read()['cert'])\n",
    )

    result = CommandExecutor(services=services).run(["python", str(script)])

    assert result.text == "cert-from-session\n"
    assert get_services() is not services


def test_executor_requires_a_script() -> None:
    with pytest.raises(CommandArgumentError, match="missing script"):
        CommandExecutor().run(["python"])
