from importlib.metadata import PackageNotFoundError, version as package_version
import json
from pathlib import Path
from typing import Any

import typer

from clitestpack.fixture import FixtureError, describe_fixture, render_descriptor

app = typer.Typer(help="Inspect recorded CLI test sessions.")


def _resolve_cli_version() -> str:
    try:
        return package_version("clitestkit")
    except PackageNotFoundError:
        from clitestpack import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show clitest version and exit.",
    ),
) -> None:
    """Tools for recording files written by CLI test sessions."""


def _echo(message: str, *, err: bool = False) -> None:
    typer.echo(message, err=err)


def _echo_json(payload: dict[str, Any]) -> None:
    typer.echo(
        json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    )


@app.command()
def inspect(
    fixture: Path = typer.Argument(..., help="Recording file to inspect."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable summary.",
    ),
) -> None:
    """List the recorded scopes and the calls each one replays."""
    try:
        summary = describe_fixture(fixture)
    except FixtureError as error:
        _echo(f"inspect failed: {error}", err=True)
        raise typer.Exit(code=2) from error

    if json_output:
        _echo_json(summary.to_dict())
        return

    _echo(f"{summary.path}: {summary.scope_count} scope(s)")
    for index, scope in enumerate(summary.scopes, start=1):
        _echo(f"test #{index}: {len(scope)} call(s)")
        for descriptor in scope:
            _echo(f"  {render_descriptor(descriptor)}")


@app.command()
def verify(
    fixture: Path = typer.Argument(..., help="Recording file to check."),
    tests: int = typer.Option(
        ...,
        "--tests",
        min=0,
        help="Number of tests the suite runs in playback.",
    ),
) -> None:
    """Check that a recording still has a scope for every test in its suite."""
    try:
        summary = describe_fixture(fixture)
    except FixtureError as error:
        _echo(f"verify failed: {error}", err=True)
        raise typer.Exit(code=2) from error

    if summary.scope_count < tests:
        _echo(
            f"verify failed: {summary.path} has {summary.scope_count} scope(s) "
            f"but the suite runs {tests} test(s). You may need to re-generate it.",
            err=True,
        )
        raise typer.Exit(code=1)

    _echo(f"verify ok: {summary.scope_count} scope(s) for {tests} test(s)")


def main() -> None:
    app()
