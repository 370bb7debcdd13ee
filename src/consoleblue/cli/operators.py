"""consoleblue operators CLI commands.

Operators receive docs_generated / docs_pushed notifications. Only active
operators are notified.
"""

from __future__ import annotations

import sqlite3
from typing import Annotated

import typer
from rich.table import Table

from consoleblue.cli.common import DbOption, console, open_repo

operators_app = typer.Typer(
    name="operators",
    help="Manage notification recipients (add, list, deactivate).",
    add_completion=False,
)


@operators_app.command("add")
def operators_add_cmd(
    email: Annotated[str, typer.Argument(help="Operator email address.")],
    name: Annotated[str | None, typer.Option("--name", "-n", help="Display name.")] = None,
    db: DbOption = None,
) -> None:
    """Add an active operator."""
    with open_repo(db) as r:
        try:
            operator_id = r.add_operator(email, name)
        except sqlite3.IntegrityError as exc:
            console.print(f"[red]Error:[/] Operator '{email}' already exists.")
            raise typer.Exit(1) from exc
    console.print(f"[green]✓[/] Operator added: {email} (id {operator_id})")


@operators_app.command("deactivate")
def operators_deactivate_cmd(
    operator_id: Annotated[int, typer.Argument(help="Operator id.")],
    db: DbOption = None,
) -> None:
    """Stop sending notifications to an operator."""
    with open_repo(db) as r:
        if not any(o.id == operator_id for o in r.list_operators()):
            console.print(f"[red]Error:[/] Operator {operator_id} not found.\n  Run:  consoleblue operators list")
            raise typer.Exit(1)
        r.set_operator_active(operator_id, False)
    console.print(f"[green]✓[/] Operator {operator_id} deactivated")


@operators_app.command("list")
def operators_list_cmd(db: DbOption = None) -> None:
    """List operators and whether they receive notifications."""
    with open_repo(db) as r:
        operators = r.list_operators()

    if not operators:
        console.print("[yellow]No operators yet.[/]\n  Run:  consoleblue operators add <email>")
        raise typer.Exit(0)

    table = Table(title="Operators", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Email", style="bold")
    table.add_column("Name")
    table.add_column("Active")
    for o in operators:
        table.add_row(
            str(o.id),
            o.email,
            o.display_name or "",
            "[green]yes[/]" if o.is_active else "[dim]no[/]",
        )
    console.print(table)
