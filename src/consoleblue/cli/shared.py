"""consoleblue shared CLI commands.

Shared docs are included, before any project docs, in every project's
assembled CLAUDE.md.

Commands:
  consoleblue shared list
  consoleblue shared add <slug> --title TEXT [--content TEXT | --file PATH]
  consoleblue shared edit <id> [--slug] [--title] [--content | --file] [--order] [--enable/--disable]
  consoleblue shared remove <id>
  consoleblue shared reorder <id> <id> ...
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from consoleblue.cli.common import (
    DbOption,
    collect_fields,
    console,
    docs_table,
    fail,
    open_repo,
    read_content,
)
from consoleblue.docs.fragments import SharedDocs
from consoleblue.errors import ConsoleBlueError

shared_app = typer.Typer(
    name="shared",
    help="Manage shared docs included in every project's CLAUDE.md.",
    add_completion=False,
)


@shared_app.command("list")
def shared_list_cmd(db: DbOption = None) -> None:
    """List shared docs in assembly order."""
    with open_repo(db) as r:
        docs = SharedDocs(r).list_docs()

    if not docs:
        console.print(
            "[yellow]No shared docs yet.[/]\n"
            "  Run:  consoleblue shared add <slug> --title <title> --file <path>"
        )
        raise typer.Exit(0)

    console.print(docs_table("Shared Docs", docs))


@shared_app.command("add")
def shared_add_cmd(
    slug: Annotated[str, typer.Argument(help="Unique slug (lowercase, hyphens).")],
    title: Annotated[str, typer.Option("--title", help="Section heading in CLAUDE.md.")],
    content: Annotated[str | None, typer.Option("--content", "-c", help="Markdown body.")] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f", help="Read the body from a file.")] = None,
    order: Annotated[
        int | None,
        typer.Option("--order", help="Display order. Defaults to after the last doc."),
    ] = None,
    disabled: Annotated[bool, typer.Option("--disabled", help="Create the doc disabled.")] = False,
    db: DbOption = None,
) -> None:
    """Create a shared doc."""
    body = read_content(content, file) or ""
    with open_repo(db) as r:
        try:
            doc = SharedDocs(r).create(
                slug, title, content=body, display_order=order, enabled=not disabled
            )
        except ConsoleBlueError as exc:
            raise fail(exc) from exc
    console.print(f"[green]✓[/] Shared doc added: {doc.slug} (id {doc.id}, order {doc.display_order})")


@shared_app.command("edit")
def shared_edit_cmd(
    doc_id: Annotated[int, typer.Argument(help="Shared doc id.")],
    slug: Annotated[str | None, typer.Option("--slug")] = None,
    title: Annotated[str | None, typer.Option("--title")] = None,
    content: Annotated[str | None, typer.Option("--content", "-c")] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f")] = None,
    order: Annotated[int | None, typer.Option("--order")] = None,
    enabled: Annotated[bool | None, typer.Option("--enable/--disable")] = None,
    db: DbOption = None,
) -> None:
    """Update fields of a shared doc. Only the options given are changed."""
    fields = collect_fields(slug, title, read_content(content, file), order, enabled)
    with open_repo(db) as r:
        try:
            doc = SharedDocs(r).update(doc_id, **fields)
        except ConsoleBlueError as exc:
            raise fail(exc) from exc
    console.print(f"[green]✓[/] Shared doc updated: {doc.slug} ({', '.join(fields) or 'no changes'})")


@shared_app.command("remove")
def shared_remove_cmd(
    doc_id: Annotated[int, typer.Argument(help="Shared doc id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt.")] = False,
    db: DbOption = None,
) -> None:
    """Delete a shared doc. It disappears from every project's next push."""
    with open_repo(db) as r:
        docs = SharedDocs(r)
        try:
            doc = docs.get(doc_id)
        except ConsoleBlueError as exc:
            raise fail(exc) from exc

        if not yes and not typer.confirm(f"Delete shared doc '{doc.slug}'?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

        try:
            docs.delete(doc_id)
        except ConsoleBlueError as exc:
            raise fail(exc) from exc
    console.print(f"[green]✓[/] Shared doc removed: {doc.slug}")


@shared_app.command("reorder")
def shared_reorder_cmd(
    doc_ids: Annotated[list[int], typer.Argument(help="Doc ids in the desired order.")],
    db: DbOption = None,
) -> None:
    """Set display order to the position of each id in the argument list."""
    with open_repo(db) as r:
        try:
            docs = SharedDocs(r).reorder(doc_ids)
        except ConsoleBlueError as exc:
            raise fail(exc) from exc
    console.print(docs_table("Shared Docs", docs))

