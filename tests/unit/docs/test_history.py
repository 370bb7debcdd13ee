"""Tests for the push-history reader."""

from __future__ import annotations

import pytest

from consoleblue.docs.history import DEFAULT_LIMIT, MAX_LIMIT, list_push_history
from consoleblue.errors import NotFoundError


@pytest.fixture
def project_id(repo):
    pid = repo.add_project("web", "Web", github_repo="web")
    for i in range(3):
        repo.add_push_log(pid, "triadblue/web", "CLAUDE.md", f"v{i}", "success", f"sha{i}", f"u{i}")
    repo.add_push_log(pid, "triadblue/web", "CLAUDE.md", "v3", "error", error_message="boom")
    return pid


def test_newest_first(repo, project_id):
    page = list_push_history(repo, project_id)
    assert [e.assembled_content for e in page.entries] == ["v3", "v2", "v1", "v0"]
    assert page.total == 4
    assert page.limit == DEFAULT_LIMIT
    assert page.offset == 0


def test_lookup_by_slug(repo, project_id):
    assert list_push_history(repo, "web").total == 4


def test_pagination(repo, project_id):
    page = list_push_history(repo, project_id, limit=2, offset=2)
    assert [e.assembled_content for e in page.entries] == ["v1", "v0"]
    assert page.total == 4


@pytest.mark.parametrize(
    ("limit", "expected"),
    [(None, DEFAULT_LIMIT), (0, DEFAULT_LIMIT), (-5, DEFAULT_LIMIT), (1, 1), (1000, MAX_LIMIT)],
)
def test_limit_clamped(repo, project_id, limit, expected):
    assert list_push_history(repo, project_id, limit=limit).limit == expected


def test_custom_max_limit(repo, project_id):
    assert list_push_history(repo, project_id, limit=50, max_limit=10).limit == 10


def test_negative_offset_treated_as_zero(repo, project_id):
    page = list_push_history(repo, project_id, offset=-3)
    assert page.offset == 0
    assert len(page.entries) == 4


def test_error_entry_fields(repo, project_id):
    newest = list_push_history(repo, project_id, limit=1).entries[0]
    assert newest.status == "error"
    assert newest.commit_sha is None
    assert newest.error_message == "boom"


def test_unknown_project(repo):
    with pytest.raises(NotFoundError):
        list_push_history(repo, "missing")


def test_project_without_pushes(repo):
    repo.add_project("quiet", "Quiet")
    page = list_push_history(repo, "quiet")
    assert page.entries == []
    assert page.total == 0
