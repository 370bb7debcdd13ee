"""ConsoleBlue CLI entry point."""

from __future__ import annotations

import importlib.metadata
from pathlib import Path
from typing import Annotated

import typer

from consoleblue.cli.docs import docs_app
from consoleblue.cli.init import init_cmd
from consoleblue.cli.operators import operators_app
from consoleblue.cli.projects import projects_app
from consoleblue.cli.shared import shared_app
from consoleblue.logging import configure_logging


def _installed_version() -> str:
    try:
        return importlib.metadata.version("consoleblue")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"consoleblue {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="consoleblue",
    help=(
        "ConsoleBlue: assemble per-project CLAUDE.md files and publish them to GitHub.\n\n"
        "  consoleblue docs generate  Starter docs from project metadata (auto-pushes).\n"
        "  consoleblue docs push      Commit the assembled CLAUDE.md to the project repo."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write logs to this file."),
    ] = None,
) -> None:
    """ConsoleBlue: CLAUDE.md assembly and publish."""
    configure_logging(verbose=verbose, log_file=log_file)


app.command("init")(init_cmd)
app.add_typer(projects_app, name="projects")
app.add_typer(operators_app, name="operators")
app.add_typer(shared_app, name="shared")
app.add_typer(docs_app, name="docs")


@app.command("version")
def version_cmd() -> None:
    """Show the installed ConsoleBlue version."""
    typer.echo(f"consoleblue {_installed_version()}")


if __name__ == "__main__":
    app()
