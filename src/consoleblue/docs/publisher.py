"""Publish the assembled CLAUDE.md to a project's GitHub repository.

Preconditions, checked in order, each with its own error:
  1. project exists                       → NotFoundError
  2. project has a repository linked      → NotConfiguredError
  3. VCS client has credentials           → ServiceUnavailableError

None of these leave a trace in push history. Once they pass, exactly one
push-history row is written per call, success or failure, holding the exact
content that was sent. A VCS failure is re-raised as PublishFailedError after
the row is written. There are no automatic retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from consoleblue.db.models import Project
from consoleblue.db.repository import Repository
from consoleblue.docs.assembler import assemble, render_for_publish
from consoleblue.docs.fragments import require_project
from consoleblue.docs.validators import validate_commit_message, validate_target_path
from consoleblue.errors import (
    NotConfiguredError,
    PublishFailedError,
    ServiceUnavailableError,
)
from consoleblue.github.client import GitHubClient, GitHubError
from consoleblue.sinks import AuditSink, NotificationSink

logger = logging.getLogger(__name__)

DEFAULT_TARGET_PATH = "CLAUDE.md"


@dataclass
class PublishResult:
    commit_sha: str
    commit_url: str
    target_repo: str
    target_path: str
    history_id: int
    notifications_sent: int = 0


def default_commit_message(target_path: str) -> str:
    return f"Update {target_path} via ConsoleBlue"


class Publisher:
    """Assemble → commit → record → notify for one project.

    The client only needs ``is_configured``, ``repo_full_name`` and
    ``commit_file``; see consoleblue.github.client.GitHubClient.
    """

    def __init__(
        self,
        repo: Repository,
        client: GitHubClient,
        notifications: NotificationSink | None = None,
        audit: AuditSink | None = None,
        default_target_path: str = DEFAULT_TARGET_PATH,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = repo
        self._client = client
        self._notifications = notifications
        self._audit = audit or AuditSink(repo)
        self._default_target_path = default_target_path
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def client(self) -> GitHubClient:
        return self._client

    def can_publish(self, project: Project) -> bool:
        """True when both the repository binding and VCS credentials are present."""
        return bool(project.github_repo) and self._client.is_configured

    def publish(
        self,
        project_id_or_slug: int | str,
        target_path: str | None = None,
        commit_message: str | None = None,
    ) -> PublishResult:
        """Commit the current assembled document for a project.

        Args:
            project_id_or_slug: Numeric id or slug.
            target_path: Repository-relative file path (default CLAUDE.md).
            commit_message: Defaults to "Update {target_path} via ConsoleBlue".

        Returns:
            PublishResult with the commit reference and the push-history row id.

        Raises:
            ValidationError: Bad target path or commit message.
            NotFoundError: Unknown project.
            NotConfiguredError: Project has no repository linked.
            ServiceUnavailableError: No GitHub token configured.
            PublishFailedError: The commit call failed (history row already written).
        """
        path = validate_target_path(target_path or self._default_target_path)
        message = validate_commit_message(commit_message) or default_commit_message(path)

        project = require_project(self._repo, project_id_or_slug)
        if not project.github_repo:
            raise NotConfiguredError(
                f"Project '{project.slug}' has no GitHub repository linked"
            )
        if not self._client.is_configured:
            raise ServiceUnavailableError("GitHub token not configured")

        preview = assemble(self._repo, project.id)
        content = render_for_publish(preview.assembled_content, self._clock())
        target_repo = self._client.repo_full_name(project.github_repo, project.github_owner)

        try:
            commit = self._client.commit_file(
                repo=project.github_repo,
                path=path,
                content=content,
                message=message,
                branch=project.default_branch or None,
                owner=project.github_owner,
            )
        except Exception as exc:
            details = str(exc) or (
                "Unknown push error" if isinstance(exc, GitHubError) else type(exc).__name__
            )
            history_id = self._repo.add_push_log(
                project_id=project.id,
                target_repo=target_repo,
                target_path=path,
                assembled_content=content,
                status="error",
                error_message=details,
            )
            logger.warning("Push of %s to %s failed: %s", path, target_repo, details)
            raise PublishFailedError(details, history_id=history_id) from exc

        history_id = self._repo.add_push_log(
            project_id=project.id,
            target_repo=target_repo,
            target_path=path,
            assembled_content=content,
            status="success",
            commit_sha=commit.commit_sha,
            commit_url=commit.commit_url,
        )
        logger.info("Pushed %s to %s at %s", path, target_repo, commit.commit_sha)

        self._audit.record(
            action="publish",
            entity_type="doc_push",
            entity_id=project.id,
            entity_slug=project.slug,
            new_value={
                "targetRepo": target_repo,
                "targetPath": path,
                "commitSha": commit.commit_sha,
            },
            metadata={"historyId": history_id},
        )

        sent = 0
        if self._notifications is not None:
            sent = self._notifications.broadcast(
                type="docs_pushed",
                title=f"{path} pushed for {project.display_name}",
                message=(
                    f"{path} was committed to {target_repo} "
                    f"({commit.commit_sha[:7]})."
                ),
                metadata={
                    "projectId": project.id,
                    "projectSlug": project.slug,
                    "commitSha": commit.commit_sha,
                    "commitUrl": commit.commit_url,
                    "targetPath": path,
                },
                project_id=project.id,
            )

        return PublishResult(
            commit_sha=commit.commit_sha,
            commit_url=commit.commit_url,
            target_repo=target_repo,
            target_path=path,
            history_id=history_id,
            notifications_sent=sent,
        )
