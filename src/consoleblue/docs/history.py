"""Push-history reader: prior publish attempts, newest first."""

from __future__ import annotations

from dataclasses import dataclass, field

from consoleblue.db.models import PushLogEntry
from consoleblue.db.repository import Repository
from consoleblue.docs.fragments import require_project

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass
class PushHistoryPage:
    entries: list[PushLogEntry] = field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def list_push_history(
    repo: Repository,
    project_id_or_slug: int | str,
    limit: int | None = None,
    offset: int = 0,
    max_limit: int = MAX_LIMIT,
) -> PushHistoryPage:
    """Return one page of push history for a project.

    *limit* is clamped to 1..max_limit (None → DEFAULT_LIMIT, capped the
    same way); a negative *offset* is treated as 0.

    Raises:
        NotFoundError: Unknown project.
    """
    project = require_project(repo, project_id_or_slug)

    if limit is None or limit < 1:
        limit = DEFAULT_LIMIT
    limit = min(limit, max_limit)
    offset = max(offset, 0)

    return PushHistoryPage(
        entries=repo.list_push_log(project.id, limit=limit, offset=offset),
        total=repo.count_push_log(project.id),
        limit=limit,
        offset=offset,
    )
