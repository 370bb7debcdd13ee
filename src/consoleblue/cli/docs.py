"""consoleblue docs CLI commands: project docs, generation, preview, push, history.

Commands:
  consoleblue docs list <project>
  consoleblue docs add <project> <slug> --title TEXT [--content TEXT | --file PATH]
  consoleblue docs edit <project> <id> [...]
  consoleblue docs remove <project> <id>
  consoleblue docs reorder <project> <id> <id> ...
  consoleblue docs templates
  consoleblue docs generate <project> [--force]
  consoleblue docs regenerate <project>
  consoleblue docs preview <project> [--publish-variant]
  consoleblue docs push <project> [--path] [--message] [--allow-empty]
  consoleblue docs history <project> [--limit] [--offset]
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from consoleblue.cli.common import (
    DbOption,
    build_generator,
    build_publisher,
    collect_fields,
    console,
    docs_table,
    fail,
    get_config,
    open_repo,
    read_content,
)
from consoleblue.cli.errors import err_conflict_force, err_empty_assembly
from consoleblue.docs.assembler import assemble, render_for_publish
from consoleblue.docs.fragments import ProjectDocs, require_project
from consoleblue.docs.history import list_push_history
from consoleblue.docs.templates import list_templates
from consoleblue.errors import ConflictError, ConsoleBlueError

docs_app = typer.Typer(
    name="docs",
    help="Project docs: manage, generate, preview, push to GitHub, history.",
    add_completion=False,
)

ProjectArg = Annotated[str, typer.Argument(help="Project slug or id.")]


# ---------------------------------------------------------------------------
# Project doc CRUD
# ---------------------------------------------------------------------------


@docs_app.command("list")
def docs_list_cmd(project: ProjectArg, db: DbOption = None) -> None:
    """List a project's docs in assembly order."""
    with open_repo(db) as r:
        try:
            docs = ProjectDocs(r).list_docs(project)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc

    if not docs:
        console.print(
            f"[yellow]No docs for '{project}' yet.[/]\n"
            f"  Run:  consoleblue docs generate {project}"
        )
        raise typer.Exit(0)

    console.print(docs_table(f"Docs: {project}", docs))


@docs_app.command("add")
def docs_add_cmd(
    project: ProjectArg,
    slug: Annotated[str, typer.Argument(help="Slug, unique within the project.")],
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
    """Create a project doc."""
    body = read_content(content, file) or ""
    with open_repo(db) as r:
        try:
            doc = ProjectDocs(r).create(
                project, slug, title, content=body, display_order=order, enabled=not disabled
            )
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
    console.print(f"[green]✓[/] Doc added to {project}: {doc.slug} (id {doc.id}, order {doc.display_order})")


@docs_app.command("edit")
def docs_edit_cmd(
    project: ProjectArg,
    doc_id: Annotated[int, typer.Argument(help="Project doc id.")],
    slug: Annotated[str | None, typer.Option("--slug")] = None,
    title: Annotated[str | None, typer.Option("--title")] = None,
    content: Annotated[str | None, typer.Option("--content", "-c")] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f")] = None,
    order: Annotated[int | None, typer.Option("--order")] = None,
    enabled: Annotated[bool | None, typer.Option("--enable/--disable")] = None,
    db: DbOption = None,
) -> None:
    """Update fields of a project doc. Only the options given are changed."""
    fields = collect_fields(slug, title, read_content(content, file), order, enabled)
    with open_repo(db) as r:
        try:
            doc = ProjectDocs(r).update(project, doc_id, **fields)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
    console.print(f"[green]✓[/] Doc updated: {doc.slug} ({', '.join(fields)})")


@docs_app.command("remove")
def docs_remove_cmd(
    project: ProjectArg,
    doc_id: Annotated[int, typer.Argument(help="Project doc id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt.")] = False,
    db: DbOption = None,
) -> None:
    """Delete a project doc. Generated docs come back only via 'docs generate'."""
    with open_repo(db) as r:
        docs = ProjectDocs(r)
        try:
            doc = docs.get(project, doc_id)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc

        if not yes and not typer.confirm(f"Delete doc '{doc.slug}' from {project}?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

        try:
            docs.delete(project, doc_id)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
    console.print(f"[green]✓[/] Doc removed from {project}: {doc.slug}")


@docs_app.command("reorder")
def docs_reorder_cmd(
    project: ProjectArg,
    doc_ids: Annotated[list[int], typer.Argument(help="Doc ids in the desired order.")],
    db: DbOption = None,
) -> None:
    """Set display order to the position of each id in the argument list."""
    with open_repo(db) as r:
        try:
            docs = ProjectDocs(r).reorder(project, doc_ids)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
    console.print(docs_table(f"Docs: {project}", docs))


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@docs_app.command("templates")
def docs_templates_cmd() -> None:
    """List the starter-doc templates in generation order."""
    table = Table(title="Starter Templates", show_header=True, header_style="bold")
    table.add_column("Order", justify="right")
    table.add_column("Slug", style="bold")
    table.add_column("Title")
    table.add_column("Category")
    for index, (slug, title, category) in enumerate(list_templates()):
        table.add_row(str(index), slug, title, category)
    console.print(table)


@docs_app.command("generate")
def docs_generate_cmd(
    project: ProjectArg,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing generated docs (custom docs are kept)."),
    ] = False,
    db: DbOption = None,
) -> None:
    """Generate starter docs from project metadata, then auto-push if possible."""
    cfg = get_config()
    with open_repo(db, cfg) as r:
        try:
            result = build_generator(r, cfg).generate_starter_docs(project, force=force)
        except ConflictError as exc:
            console.print(err_conflict_force(project, exc.message))
            raise typer.Exit(1) from exc
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc

    console.print(
        f"[green]✓[/] {result.project_slug}: {result.docs_created} created, "
        f"{result.docs_updated} overwritten, {result.docs_skipped} skipped"
    )
    if result.notifications_sent:
        console.print(f"  [dim]{result.notifications_sent} notification(s) sent[/]")
    if result.auto_pushed:
        console.print(f"  [green]✓[/] Pushed {result.commit_sha[:7]}  {result.commit_url}")
    elif result.docs_created or result.docs_updated:
        console.print(
            "  [dim]Not pushed. Run 'consoleblue docs history "
            f"{project}' for failures or 'consoleblue docs push {project}' to push now.[/]"
        )


@docs_app.command("regenerate")
def docs_regenerate_cmd(project: ProjectArg, db: DbOption = None) -> None:
    """Refresh the content of existing generated docs from current project metadata."""
    cfg = get_config()
    with open_repo(db, cfg) as r:
        try:
            result = build_generator(r, cfg).regenerate_for_project(project)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
    console.print(f"[green]✓[/] {result.project_slug}: {result.docs_updated} doc(s) regenerated")


# ---------------------------------------------------------------------------
# Preview / push / history
# ---------------------------------------------------------------------------


@docs_app.command("preview")
def docs_preview_cmd(
    project: ProjectArg,
    publish_variant: Annotated[
        bool,
        typer.Option("--publish-variant", help="Show the exact file that would be pushed."),
    ] = False,
    raw: Annotated[bool, typer.Option("--raw", help="Print plain text, no Markdown rendering.")] = False,
    db: DbOption = None,
) -> None:
    """Show the assembled CLAUDE.md for a project."""
    with open_repo(db) as r:
        try:
            p = require_project(r, project)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
        preview = assemble(r, p.id)

    text = render_for_publish(preview.assembled_content) if publish_variant else preview.assembled_content

    shared = ", ".join(d.slug for d in preview.shared_docs) or "none"
    local = ", ".join(d.slug for d in preview.project_docs) or "none"
    console.print(f"[dim]Shared: {shared}[/]")
    console.print(f"[dim]Project: {local}[/]")

    if not text:
        console.print("(empty)")
        return
    if raw:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(Panel(Markdown(text), title=f"[bold]CLAUDE.md: {p.slug}[/]"))


@docs_app.command("push")
def docs_push_cmd(
    project: ProjectArg,
    path: Annotated[
        str | None,
        typer.Option("--path", help="Target file in the repository (default from config)."),
    ] = None,
    message: Annotated[str | None, typer.Option("--message", "-m", help="Commit message.")] = None,
    allow_empty: Annotated[
        bool,
        typer.Option("--allow-empty", help="Push even when no docs are enabled."),
    ] = False,
    db: DbOption = None,
) -> None:
    """Commit the assembled CLAUDE.md to the project's GitHub repository."""
    cfg = get_config()
    with open_repo(db, cfg) as r:
        try:
            p = require_project(r, project)
            publisher = build_publisher(r, cfg)
            # Missing repo or token is reported by publish() before the empty check.
            if not allow_empty and publisher.can_publish(p) and assemble(r, p.id).is_empty:
                console.print(err_empty_assembly(project))
                raise typer.Exit(1)
            result = publisher.publish(p.id, target_path=path, commit_message=message)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc

    console.print(f"[green]✓[/] Pushed {result.target_path} to {result.target_repo}")
    console.print(f"  Commit:  {result.commit_sha}")
    console.print(f"  URL:     {result.commit_url}")


@docs_app.command("history")
def docs_history_cmd(
    project: ProjectArg,
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Entries per page.")] = None,
    offset: Annotated[int, typer.Option("--offset", help="Entries to skip.")] = 0,
    db: DbOption = None,
) -> None:
    """Show push history, newest first."""
    cfg = get_config()
    with open_repo(db, cfg) as r:
        try:
            page = list_push_history(
                r,
                project,
                limit=limit if limit is not None else cfg.history.default_limit,
                offset=offset,
                max_limit=cfg.history.max_limit,
            )
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc

    if not page.entries:
        console.print(f"[yellow]No pushes recorded for '{project}'.[/]")
        raise typer.Exit(0)

    table = Table(title=f"Push History: {project}", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("When")
    table.add_column("Status")
    table.add_column("Target")
    table.add_column("Commit / Error")
    for e in page.entries:
        status = "[green]success[/]" if e.status == "success" else "[red]error[/]"
        detail = (e.commit_sha or "")[:7] if e.status == "success" else escape(e.error_message or "")
        table.add_row(str(e.id), e.pushed_at or "", status, escape(f"{e.target_repo}:{e.target_path}"), detail)
    console.print(table)

    shown_to = page.offset + len(page.entries)
    console.print(f"\n  {page.offset + 1}-{shown_to} of {page.total}")
