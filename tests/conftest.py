"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from consoleblue.db.connection import Database
from consoleblue.db.repository import Repository
from consoleblue.db.schema import initialize
from consoleblue.github.client import CommitResult, GitHubError


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".consoleblue.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def repo(tmp_db) -> Repository:
    return Repository(tmp_db)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep tests independent of the developer's token, owner and config files."""
    for var in ("GITHUB_TOKEN", "GITHUB_OWNER", "GITHUB_API_URL", "CONSOLEBLUE_DB"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("consoleblue.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")


class FakeVcsClient:
    """In-memory stand-in for GitHubClient.

    Records every commit; raise_error makes commit_file fail with that error.
    """

    def __init__(self, configured: bool = True, owner: str = "triadblue") -> None:
        self.configured = configured
        self.owner = owner
        self.commits: list[dict] = []
        self.raise_error: Exception | None = None

    @property
    def is_configured(self) -> bool:
        return self.configured

    def repo_full_name(self, repo: str, owner: str | None = None) -> str:
        return f"{owner or self.owner}/{repo}"

    def commit_file(self, repo, path, content, message, branch=None, owner=None) -> CommitResult:
        if self.raise_error is not None:
            raise self.raise_error
        n = len(self.commits) + 1
        sha = f"{n:040x}"
        self.commits.append(
            {
                "repo": repo,
                "path": path,
                "content": content,
                "message": message,
                "branch": branch,
                "owner": owner,
            }
        )
        return CommitResult(
            commit_sha=sha,
            commit_url=f"https://github.com/{owner or self.owner}/{repo}/commit/{sha}",
        )


@pytest.fixture
def fake_vcs() -> FakeVcsClient:
    return FakeVcsClient()


@pytest.fixture
def unreachable_vcs() -> FakeVcsClient:
    client = FakeVcsClient()
    client.raise_error = GitHubError("Connection refused")
    return client
