"""ConsoleBlue rich error messages: actionable feedback.

Every error shown to the operator must contain:
  1. What went wrong (clear cause)
  2. The exact action to take to fix it

Usage:
    from consoleblue.cli.errors import err_no_db
    console.print(err_no_db(".consoleblue.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from consoleblue.errors import (
    ConflictError,
    ConsoleBlueError,
    InternalError,
    NotConfiguredError,
    NotFoundError,
    PublishFailedError,
    ServiceUnavailableError,
    ValidationError,
)


def err_no_db(db_path: str = ".consoleblue.db") -> str:
    """No database at the configured path."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  consoleblue init"
    )


def err_config(message: str) -> str:
    """consoleblue.yaml or the global config is invalid."""
    return f"[red]Error:[/] Invalid configuration.\n  {message}"


def err_project_not_found(project: str) -> str:
    return (
        f"[red]Error:[/] Project '{project}' not found.\n"
        "  Run:  consoleblue projects list"
    )


def err_not_found(message: str) -> str:
    return f"[red]Error:[/] {escape(message)}."


def err_no_repo(project: str) -> str:
    """Project has no GitHub repository linked."""
    return (
        f"[red]Error:[/] Project '{project}' has no GitHub repository linked.\n"
        "  Link one when adding the project:\n"
        f"    consoleblue projects add {project} --repo <repo-name>"
    )


def err_no_token() -> str:
    """GITHUB_TOKEN is not set."""
    return (
        "[red]Error:[/] GitHub token not configured.\n"
        "  Set:  export GITHUB_TOKEN=ghp_..."
    )


def err_publish_failed(details: str, history_id: int | None = None) -> str:
    recorded = f" (recorded as history entry #{history_id})" if history_id else ""
    return (
        f"[red]Error:[/] GitHub push failed{recorded}.\n"
        f"  {escape(details)}\n"
        "  Check the repository name, branch and token permissions, then retry:\n"
        "    consoleblue docs push <project>"
    )


def err_conflict_force(project: str, message: str) -> str:
    """Starter docs already exist and --force was not given."""
    return (
        f"[red]Error:[/] {escape(message)}.\n"
        "  Overwrite the generated docs with:\n"
        f"    consoleblue docs generate {project} --force"
    )


def err_conflict(message: str) -> str:
    return f"[red]Error:[/] {escape(message)}.\n  Choose a different slug or edit the existing doc."


def err_validation(field: str, message: str) -> str:
    return f"[red]Error:[/] Invalid {field}: {escape(message)}"


def err_empty_assembly(project: str) -> str:
    """Nothing to push: no enabled shared or project docs."""
    return (
        f"[red]Error:[/] The assembled document for '{project}' is empty.\n"
        "  Add or enable docs first, or push the empty file anyway:\n"
        f"    consoleblue docs push {project} --allow-empty"
    )


def err_internal(message: str) -> str:
    """Store failure or unexpected error."""
    return (
        f"[red]Error:[/] {escape(message)}.\n"
        "  Check that the database file is readable and not corrupted, or re-run:\n"
        "    consoleblue init"
    )


def message_for(exc: ConsoleBlueError, project: str | None = None) -> str:
    """Map a domain error to its operator-facing message."""
    if isinstance(exc, PublishFailedError):
        return err_publish_failed(exc.details, exc.history_id)
    if isinstance(exc, NotConfiguredError):
        return err_no_repo(project or "<project>")
    if isinstance(exc, ServiceUnavailableError):
        return err_no_token()
    if isinstance(exc, ValidationError):
        return err_validation(exc.field, str(exc).split(": ", 1)[-1])
    if isinstance(exc, NotFoundError):
        if project is not None and exc.message.startswith("Project "):
            return err_project_not_found(project)
        return err_not_found(exc.message)
    if isinstance(exc, ConflictError):
        return err_conflict(exc.message)
    if isinstance(exc, InternalError):
        return err_internal(exc.message)
    return f"[red]Error:[/] {escape(exc.message)}"
