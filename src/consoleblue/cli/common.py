"""Shared plumbing for CLI commands: config, database and service wiring."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from consoleblue.cli.errors import err_config, err_no_db, message_for
from consoleblue.config import ConfigError, ConsoleBlueConfig, load_config
from consoleblue.db.connection import Database
from consoleblue.db.models import ProjectDoc, SharedDoc
from consoleblue.db.repository import Repository
from consoleblue.db.schema import initialize
from consoleblue.docs.generator import DocGenerator
from consoleblue.docs.publisher import Publisher
from consoleblue.errors import ConsoleBlueError, InternalError
from consoleblue.github.client import GitHubClient
from consoleblue.sinks import NotificationSink

logger = logging.getLogger(__name__)

console = Console()

DbOption = Annotated[
    Path | None,
    typer.Option("--db", help="Path to the ConsoleBlue database (default from config)."),
]


def get_config() -> ConsoleBlueConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc


def resolve_db(db: Path | None, cfg: ConsoleBlueConfig) -> Path:
    return db if db is not None else Path(cfg.database.path)


@contextmanager
def open_repo(db: Path | None, cfg: ConsoleBlueConfig | None = None) -> Iterator[Repository]:
    """Yield a Repository on a fresh connection.

    Exits 1 if the database is missing or a store error escapes the command.
    """
    cfg = cfg or get_config()
    db_path = resolve_db(db, cfg)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    try:
        with Database(db_path) as conn:
            initialize(conn)
            yield Repository(conn)
    except sqlite3.Error as exc:
        logger.error("Database error on %s: %s", db_path, exc)
        raise fail(InternalError(f"Database error: {exc}")) from exc


def build_publisher(repo: Repository, cfg: ConsoleBlueConfig) -> Publisher:
    client = GitHubClient.from_env(
        owner=cfg.github.owner,
        api_url=cfg.github.api_url,
        timeout=cfg.github.timeout,
    )
    return Publisher(
        repo,
        client,
        notifications=NotificationSink(repo),
        default_target_path=cfg.publish.target_path,
    )


def build_generator(repo: Repository, cfg: ConsoleBlueConfig) -> DocGenerator:
    return DocGenerator(
        repo,
        publisher=build_publisher(repo, cfg),
        notifications=NotificationSink(repo),
        auto_push=cfg.publish.auto_push,
        target_path=cfg.publish.target_path,
    )


def fail(exc: ConsoleBlueError, project: str | None = None) -> typer.Exit:
    """Print the operator message for *exc* and return the Exit to raise."""
    console.print(message_for(exc, project))
    return typer.Exit(1)


def read_content(content: str | None, file: Path | None) -> str | None:
    """Return fragment content from --content or --file (mutually exclusive)."""
    if content is not None and file is not None:
        console.print("[red]Error:[/] Use either --content or --file, not both.")
        raise typer.Exit(1)
    if file is None:
        return content
    if not file.is_file():
        console.print(f"[red]Error:[/] File not found: '{file}'")
        raise typer.Exit(1)
    return file.read_text(encoding="utf-8")


def collect_fields(
    slug: str | None,
    title: str | None,
    content: str | None,
    order: int | None,
    enabled: bool | None,
) -> dict[str, Any]:
    """Build an update payload from the edit options that were given."""
    fields: dict[str, Any] = {}
    if slug is not None:
        fields["slug"] = slug
    if title is not None:
        fields["title"] = title
    if content is not None:
        fields["content"] = content
    if order is not None:
        fields["display_order"] = order
    if enabled is not None:
        fields["enabled"] = enabled
    if not fields:
        console.print(
            "[red]Error:[/] Nothing to update.\n"
            "  Pass at least one of --slug, --title, --content, --file, --order, --enable/--disable"
        )
        raise typer.Exit(1)
    return fields


def docs_table(title: str, docs: list[SharedDoc] | list[ProjectDoc]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Order", justify="right")
    table.add_column("Slug", style="bold")
    table.add_column("Title")
    table.add_column("Enabled")
    table.add_column("Size", justify="right")
    for d in docs:
        table.add_row(
            str(d.id),
            str(d.display_order),
            d.slug,
            d.title,
            "[green]yes[/]" if d.enabled else "[dim]no[/]",
            f"{len(d.content)} chars",
        )
    return table
