"""Tests for the Publisher: commit, push history, notifications."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from consoleblue.db.models import SharedDoc
from consoleblue.docs.assembler import GENERATED_MARKER, strip_publish_wrapper
from consoleblue.docs.publisher import Publisher
from consoleblue.errors import (
    NotConfiguredError,
    NotFoundError,
    PublishFailedError,
    ServiceUnavailableError,
    ValidationError,
)
from consoleblue.github.client import GitHubError
from consoleblue.sinks import NotificationSink

_STAMP = datetime(2026, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def project_id(repo):
    pid = repo.add_project("web", "Web Shop", github_repo="web-shop", default_branch="main")
    repo.add_shared_doc(
        SharedDoc(id=None, slug="brand", title="Brand", content="Blue.", display_order=0)
    )
    return pid


@pytest.fixture
def publisher(repo, fake_vcs):
    return Publisher(repo, fake_vcs, notifications=NotificationSink(repo), clock=lambda: _STAMP)


# ------------------------------------------------------------------
# Success
# ------------------------------------------------------------------

def test_publish_success_records_one_history_row(repo, publisher, fake_vcs, project_id):
    result = publisher.publish(project_id)

    entries = repo.list_push_log(project_id, limit=10)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.status == "success"
    assert entry.commit_sha == result.commit_sha
    assert entry.commit_url == result.commit_url
    assert entry.error_message is None
    assert entry.id == result.history_id
    assert entry.target_repo == "triadblue/web-shop"
    assert entry.target_path == "CLAUDE.md"
    assert entry.assembled_content == fake_vcs.commits[0]["content"]


def test_publish_sends_publish_variant(publisher, fake_vcs, project_id):
    publisher.publish(project_id)
    sent = fake_vcs.commits[0]["content"]
    assert sent.startswith(GENERATED_MARKER)
    assert strip_publish_wrapper(sent) == "# Brand\n\nBlue."
    assert "2026-05-01T12:00:00+00:00" in sent


def test_publish_defaults(publisher, fake_vcs, project_id):
    publisher.publish("web")
    commit = fake_vcs.commits[0]
    assert commit["repo"] == "web-shop"
    assert commit["path"] == "CLAUDE.md"
    assert commit["message"] == "Update CLAUDE.md via ConsoleBlue"
    assert commit["branch"] == "main"
    assert commit["owner"] is None


def test_publish_custom_path_and_message(publisher, fake_vcs, project_id):
    result = publisher.publish(project_id, target_path="docs/AGENTS.md", commit_message="Sync")
    assert result.target_path == "docs/AGENTS.md"
    assert fake_vcs.commits[0]["message"] == "Sync"


def test_publish_uses_project_owner(repo, publisher, fake_vcs):
    pid = repo.add_project("ext", "Ext", github_repo="ext", github_owner="partner")
    result = publisher.publish(pid)
    assert fake_vcs.commits[0]["owner"] == "partner"
    assert result.target_repo == "partner/ext"


def test_publish_notifies_active_operators(repo, publisher, project_id):
    active = repo.add_operator("a@example.com")
    inactive = repo.add_operator("b@example.com")
    repo.set_operator_active(inactive, False)

    result = publisher.publish(project_id)

    assert result.notifications_sent == 1
    (note,) = repo.list_notifications()
    assert note.user_id == active
    assert note.type == "docs_pushed"
    meta = note.metadata_dict
    assert meta["projectId"] == project_id
    assert meta["projectSlug"] == "web"
    assert meta["commitSha"] == result.commit_sha
    assert meta["commitUrl"] == result.commit_url
    assert meta["targetPath"] == "CLAUDE.md"


def test_publish_writes_audit_entry(repo, publisher, project_id):
    publisher.publish(project_id)
    (entry,) = repo.list_audit_entries("doc_push")
    assert entry.action == "publish"
    assert entry.entity_slug == "web"


def test_publish_empty_assembly_still_pushes(repo, publisher, fake_vcs):
    pid = repo.add_project("bare", "Bare", github_repo="bare")
    publisher.publish(pid)
    assert strip_publish_wrapper(fake_vcs.commits[0]["content"]) == ""


# ------------------------------------------------------------------
# Preconditions: no history row
# ------------------------------------------------------------------

def test_unknown_project_not_found(repo, publisher):
    with pytest.raises(NotFoundError):
        publisher.publish("missing")


def test_project_without_repo_not_configured(repo, publisher, fake_vcs):
    pid = repo.add_project("acme", "Acme")
    with pytest.raises(NotConfiguredError):
        publisher.publish(pid)
    assert repo.count_push_log(pid) == 0
    assert fake_vcs.commits == []


def test_missing_token_service_unavailable(repo, fake_vcs, project_id):
    fake_vcs.configured = False
    with pytest.raises(ServiceUnavailableError) as exc_info:
        Publisher(repo, fake_vcs).publish(project_id)
    assert not isinstance(exc_info.value, PublishFailedError)
    assert repo.count_push_log(project_id) == 0


def test_no_repo_checked_before_token(repo, fake_vcs):
    fake_vcs.configured = False
    pid = repo.add_project("acme", "Acme")
    with pytest.raises(NotConfiguredError):
        Publisher(repo, fake_vcs).publish(pid)


@pytest.mark.parametrize("path", ["/etc/passwd", "../CLAUDE.md", "docs/", ""])
def test_bad_target_path_rejected(repo, publisher, project_id, path):
    with pytest.raises(ValidationError):
        publisher.publish(project_id, target_path=path or " ")
    assert repo.count_push_log(project_id) == 0


# ------------------------------------------------------------------
# Failure
# ------------------------------------------------------------------

def test_publish_failure_records_error_row(repo, unreachable_vcs, project_id):
    publisher = Publisher(repo, unreachable_vcs, notifications=NotificationSink(repo))
    repo.add_operator("a@example.com")

    with pytest.raises(PublishFailedError) as exc_info:
        publisher.publish(project_id)

    err = exc_info.value
    assert err.details == "Connection refused"
    assert str(err) == "GitHub push failed: Connection refused"
    assert err.status_code == 502

    entries = repo.list_push_log(project_id, limit=10)
    assert len(entries) == 1
    assert entries[0].status == "error"
    assert entries[0].error_message == "Connection refused"
    assert entries[0].commit_sha is None and entries[0].commit_url is None
    assert entries[0].id == err.history_id
    assert entries[0].assembled_content.startswith(GENERATED_MARKER)
    assert repo.list_notifications() == []


def test_publish_failure_unexpected_exception_recorded(repo, fake_vcs, project_id):
    fake_vcs.raise_error = TimeoutError()
    with pytest.raises(PublishFailedError) as exc_info:
        Publisher(repo, fake_vcs).publish(project_id)
    assert exc_info.value.details == "TimeoutError"
    assert repo.list_push_log(project_id, limit=1)[0].status == "error"


def test_publish_failure_empty_github_message(repo, fake_vcs, project_id):
    fake_vcs.raise_error = GitHubError("")
    with pytest.raises(PublishFailedError, match="Unknown push error"):
        Publisher(repo, fake_vcs).publish(project_id)


def test_no_retry_after_failure(repo, unreachable_vcs, project_id):
    with pytest.raises(PublishFailedError):
        Publisher(repo, unreachable_vcs).publish(project_id)
    assert repo.count_push_log(project_id) == 1


def test_can_publish(repo, fake_vcs, project_id):
    publisher = Publisher(repo, fake_vcs)
    assert publisher.can_publish(repo.get_project(project_id)) is True
    assert publisher.can_publish(repo.get_project(repo.add_project("acme", "Acme"))) is False
    fake_vcs.configured = False
    assert publisher.can_publish(repo.get_project(project_id)) is False
