"""Notification fan-out and audit recording.

Both sinks are best-effort: a store failure is logged and swallowed so it
can never abort or mask the primary operation.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from consoleblue.db.repository import Repository

logger = logging.getLogger(__name__)


class NotificationSink:
    """Writes one notification row per operator. Delivery is someone else's job."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def notify(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        metadata: dict[str, Any] | None = None,
        project_id: int | None = None,
    ) -> bool:
        """Record a notification for *user_id*. Returns False if the write failed."""
        try:
            self._repo.add_notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                metadata=metadata,
                project_id=project_id,
            )
        except sqlite3.Error as exc:
            logger.warning("Notification %r for user %s not recorded: %s", type, user_id, exc)
            return False
        return True

    def broadcast(
        self,
        type: str,
        title: str,
        message: str,
        metadata: dict[str, Any] | None = None,
        project_id: int | None = None,
    ) -> int:
        """Notify every operator active right now. Returns the number written."""
        try:
            operators = self._repo.list_operators(active_only=True)
        except sqlite3.Error as exc:
            logger.warning("Could not list operators for %r fan-out: %s", type, exc)
            return 0

        sent = 0
        for operator in operators:
            if self.notify(operator.id, type, title, message, metadata, project_id):
                sent += 1
        return sent


class AuditSink:
    """Records create/update/delete/reorder/publish actions for traceability."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: int | None = None,
        entity_slug: str | None = None,
        previous_value: Any = None,
        new_value: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            self._repo.add_audit_entry(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_slug=entity_slug,
                previous_value=previous_value,
                new_value=new_value,
                metadata=metadata,
            )
        except sqlite3.Error as exc:
            logger.warning("Audit %s %s/%s not recorded: %s", action, entity_type, entity_id, exc)
