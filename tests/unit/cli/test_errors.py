"""Tests for consoleblue rich error messages."""

from __future__ import annotations

import pytest

from consoleblue.cli.errors import (
    err_config,
    err_conflict_force,
    err_empty_assembly,
    err_no_db,
    err_no_repo,
    err_no_token,
    err_project_not_found,
    err_publish_failed,
    message_for,
)
from consoleblue.errors import (
    ConflictError,
    InternalError,
    NotConfiguredError,
    NotFoundError,
    PublishFailedError,
    ServiceUnavailableError,
    ValidationError,
)


def _has_action(msg: str) -> bool:
    """Every error must contain an actionable instruction."""
    lower = msg.lower()
    return any(kw in lower for kw in ["run:", "set:", "consoleblue ", "export ", "check "])


@pytest.mark.parametrize(
    "msg",
    [
        err_no_db(".consoleblue.db"),
        err_no_repo("acme"),
        err_no_token(),
        err_project_not_found("acme"),
        err_publish_failed("Bad credentials", 3),
        err_conflict_force("acme", "Project 'acme' already has generated docs"),
        err_empty_assembly("acme"),
    ],
)
def test_messages_are_actionable(msg: str) -> None:
    assert msg.startswith("[red]Error:[/]")
    assert _has_action(msg)


def test_err_no_token_names_env_var() -> None:
    assert "GITHUB_TOKEN" in err_no_token()


def test_err_publish_failed_includes_details_and_history() -> None:
    msg = err_publish_failed("Bad credentials", 12)
    assert "Bad credentials" in msg
    assert "#12" in msg


def test_err_conflict_force_suggests_force() -> None:
    assert "--force" in err_conflict_force("acme", "exists")


def test_err_config_includes_cause() -> None:
    assert "forbidden key" in err_config("contains a forbidden key 'token'")


# ---------------------------------------------------------------------------
# message_for
# ---------------------------------------------------------------------------


def test_message_for_publish_failed() -> None:
    msg = message_for(PublishFailedError("Bad credentials", history_id=4))
    assert "GitHub push failed" in msg
    assert "Bad credentials" in msg


def test_message_for_not_configured() -> None:
    assert "no GitHub repository" in message_for(NotConfiguredError("x"), "acme")


def test_message_for_service_unavailable() -> None:
    assert "GITHUB_TOKEN" in message_for(ServiceUnavailableError("x"))


def test_message_for_validation() -> None:
    msg = message_for(ValidationError("slug", "must be lowercase"))
    assert "Invalid slug: must be lowercase" in msg


def test_message_for_project_not_found() -> None:
    msg = message_for(NotFoundError("Project 'acme' not found"), "acme")
    assert "projects list" in msg


def test_message_for_doc_not_found() -> None:
    assert "Shared doc 9 not found" in message_for(NotFoundError("Shared doc 9 not found"))


def test_message_for_conflict() -> None:
    assert "already exists" in message_for(ConflictError('slug "brand" already exists'))


def test_message_for_internal() -> None:
    assert "disk full" in message_for(InternalError("disk full"))


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ValidationError("f", "m"), 400),
        (NotFoundError("m"), 404),
        (ConflictError("m"), 409),
        (NotConfiguredError("m"), 400),
        (ServiceUnavailableError("m"), 503),
        (PublishFailedError("m"), 502),
        (InternalError("m"), 500),
    ],
)
def test_status_codes(exc, status) -> None:
    assert exc.status_code == status


def test_message_for_internal_has_hint() -> None:
    msg = message_for(InternalError("Database error: file is not a database"))
    assert "file is not a database" in msg
    assert "consoleblue init" in msg


@pytest.mark.parametrize(
    "msg",
    [
        err_publish_failed("Invalid request [ref: main]", 1),
        message_for(NotFoundError("Shared doc [x] not found")),
        message_for(ValidationError("slug", "bad value [x]")),
        message_for(InternalError("boom [x]")),
    ],
)
def test_dynamic_text_is_escaped(msg: str) -> None:
    assert "\\[" in msg
