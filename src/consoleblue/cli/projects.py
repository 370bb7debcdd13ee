"""consoleblue projects CLI commands.

Commands:
  consoleblue projects add <slug>     register a project
  consoleblue projects list           show all projects
  consoleblue projects show <slug>    show one project with its doc counts
"""

from __future__ import annotations

import json
import sqlite3
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from consoleblue.cli.common import DbOption, console, fail, open_repo
from consoleblue.db.models import PROJECT_STATUSES
from consoleblue.docs.fragments import require_project
from consoleblue.errors import ConsoleBlueError

projects_app = typer.Typer(
    name="projects",
    help="Manage projects (add, list, show).",
    add_completion=False,
)


@projects_app.command("add")
def projects_add_cmd(
    slug: Annotated[str, typer.Argument(help="Unique project slug (e.g. brand-site).")],
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Display name. Defaults to the slug."),
    ] = None,
    description: Annotated[str | None, typer.Option("--description", "-d")] = None,
    repo: Annotated[
        str | None,
        typer.Option("--repo", help="GitHub repository name (without owner)."),
    ] = None,
    owner: Annotated[
        str | None,
        typer.Option("--owner", help="GitHub owner. Defaults to github.owner from config."),
    ] = None,
    branch: Annotated[str, typer.Option("--branch", help="Default branch.")] = "main",
    status: Annotated[
        str,
        typer.Option("--status", help=f"One of: {', '.join(PROJECT_STATUSES)}."),
    ] = "active",
    tag: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Technology tag. Repeat for several."),
    ] = None,
    subdomain_url: Annotated[str | None, typer.Option("--subdomain-url")] = None,
    production_url: Annotated[str | None, typer.Option("--production-url")] = None,
    settings: Annotated[
        str | None,
        typer.Option("--settings", help='Custom settings as a JSON object, e.g. \'{"sso": true}\'.'),
    ] = None,
    db: DbOption = None,
) -> None:
    """Register a project in the document store."""
    if status not in PROJECT_STATUSES:
        console.print(
            f"[red]Error:[/] Unknown status '{status}'.\n"
            f"  Use one of: {', '.join(PROJECT_STATUSES)}"
        )
        raise typer.Exit(1)

    custom_settings = None
    if settings is not None:
        try:
            custom_settings = json.loads(settings)
        except json.JSONDecodeError as exc:
            console.print(f"[red]Error:[/] --settings is not valid JSON: {exc}")
            raise typer.Exit(1) from exc
        if not isinstance(custom_settings, dict):
            console.print("[red]Error:[/] --settings must be a JSON object.")
            raise typer.Exit(1)

    with open_repo(db) as r:
        try:
            project_id = r.add_project(
                slug,
                name or slug,
                description=description,
                github_repo=repo,
                github_owner=owner,
                default_branch=branch,
                status=status,
                tags=tag or [],
                subdomain_url=subdomain_url,
                production_url=production_url,
                custom_settings=custom_settings,
            )
        except sqlite3.IntegrityError as exc:
            console.print(
                f"[red]Error:[/] Project '{slug}' already exists.\n"
                f"  Run:  consoleblue projects show {slug}"
            )
            raise typer.Exit(1) from exc

    console.print(f"[green]✓[/] Project added: {slug} (id {project_id})")


@projects_app.command("list")
def projects_list_cmd(db: DbOption = None) -> None:
    """List all projects."""
    with open_repo(db) as r:
        projects = r.list_projects()

    if not projects:
        console.print(
            "[yellow]No projects yet.[/]\n"
            "  Run:  consoleblue projects add <slug> --repo <repo>"
        )
        raise typer.Exit(0)

    table = Table(title="Projects", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Slug", style="bold")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Repository")

    for p in projects:
        repo_str = f"{p.github_owner or '(default)'}/{p.github_repo}" if p.github_repo else "[dim]—[/]"
        table.add_row(str(p.id), p.slug, p.display_name, p.status, repo_str)

    console.print(table)


@projects_app.command("show")
def projects_show_cmd(
    project: Annotated[str, typer.Argument(help="Project slug or id.")],
    db: DbOption = None,
) -> None:
    """Show one project's metadata and doc counts."""
    with open_repo(db) as r:
        try:
            p = require_project(r, project)
        except ConsoleBlueError as exc:
            raise fail(exc, project) from exc
        doc_count = r.count_project_docs(p.id)
        push_count = r.count_push_log(p.id)

    lines = [
        f"[bold]{p.display_name}[/]  ({p.slug}, id {p.id})",
        f"Status:      {p.status}",
        f"Repository:  {p.github_repo or '[dim]not linked[/]'}",
        f"Owner:       {p.github_owner or '[dim]default[/]'}",
        f"Branch:      {p.default_branch or 'main'}",
    ]
    if p.description:
        lines.append(f"Description: {p.description}")
    if p.tags:
        lines.append(f"Tags:        {', '.join(p.tags)}")
    if p.custom_settings:
        lines.append(f"Settings:    {json.dumps(p.custom_settings, sort_keys=True)}")
    lines.append(f"Docs:        {doc_count}")
    lines.append(f"Pushes:      {push_count}")

    console.print(Panel("\n".join(lines), title="[bold]Project[/]", expand=False))
