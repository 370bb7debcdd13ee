"""consoleblue init: create the document store and config scaffold.

Creates:
  .consoleblue.db      document store with schema (projects, operators,
                       shared/project docs, push history, notifications, audit)
  consoleblue.yaml     per-installation config with defaults (no tokens)

Updates .gitignore (if present) so the database is never committed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from consoleblue.cli.common import console
from consoleblue.config import write_default_config
from consoleblue.db.connection import Database
from consoleblue.db.schema import CURRENT_VERSION, initialize

_DEFAULT_PROJECT_DIR = Path(".")
_DB_NAME = ".consoleblue.db"


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
) -> None:
    """Create the ConsoleBlue database and a default consoleblue.yaml."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    db_path = project_dir / _DB_NAME
    existed = db_path.exists()

    with Database(db_path) as conn:
        initialize(conn)

    if existed:
        console.print(f"  [yellow]⚠[/]  {_DB_NAME} already exists (schema v{CURRENT_VERSION}, data preserved)")
    else:
        console.print(f"  [green]✓[/] {_DB_NAME}")

    if write_default_config(project_dir / "consoleblue.yaml"):
        console.print("  [green]✓[/] consoleblue.yaml")
    else:
        console.print("  [dim]consoleblue.yaml already exists, left unchanged[/]")

    _update_gitignore(project_dir)

    console.print(f"\n[bold green]✓ ConsoleBlue initialized in {project_dir}.[/]")
    console.print("\nNext steps:")
    console.print("  1. export GITHUB_TOKEN=ghp_...                     (enable pushes)")
    console.print("  2. consoleblue operators add <email>                (receive notifications)")
    console.print("  3. consoleblue projects add <slug> --repo <repo>    (register a project)")
    console.print("  4. consoleblue docs generate <slug>                 (starter docs + auto-push)")


def _update_gitignore(project_dir: Path) -> None:
    """Add the database to .gitignore if it already exists."""
    gitignore = project_dir / ".gitignore"
    entries = [_DB_NAME, f"{_DB_NAME}-wal", f"{_DB_NAME}-shm"]

    if gitignore.exists():
        existing = gitignore.read_text(encoding="utf-8").splitlines()
        to_add = [e for e in entries if e not in existing]
        if to_add:
            with gitignore.open("a", encoding="utf-8") as f:
                f.write("\n# ConsoleBlue\n")
                for entry in to_add:
                    f.write(f"{entry}\n")
            console.print("  [green]✓[/] .gitignore (updated with ConsoleBlue entries)")
