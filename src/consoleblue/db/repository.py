"""Repository pattern for all ConsoleBlue database operations.

Single interface for: projects, operators, shared docs, project docs,
push history, notifications, and the audit log. Push history is append-only:
there is deliberately no update or delete method for it.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from consoleblue.db.models import (
    AuditEntry,
    Notification,
    Operator,
    Project,
    ProjectDoc,
    PushLogEntry,
    SharedDoc,
)

_PROJECT_COLUMNS = (
    "slug",
    "display_name",
    "description",
    "github_repo",
    "github_owner",
    "default_branch",
    "color_primary",
    "color_accent",
    "color_background",
    "status",
    "tags",
    "subdomain_url",
    "production_url",
    "custom_settings",
)

# Columns an operator may change on a doc row; anything else is rejected.
_DOC_UPDATABLE = frozenset({"slug", "title", "content", "display_order", "enabled"})

_SHARED_SELECT = (
    "SELECT id, slug, title, content, display_order, enabled, created_at, updated_at "
    "FROM shared_docs"
)
_PROJECT_DOC_SELECT = (
    "SELECT id, project_id, slug, title, content, display_order, enabled, created_at, updated_at "
    "FROM project_docs"
)
_PUSH_LOG_SELECT = (
    "SELECT id, project_id, target_repo, target_path, commit_sha, commit_url, "
    "assembled_content, status, error_message, pushed_at FROM doc_push_log"
)


class Repository:
    """Data access layer for all ConsoleBlue database entities.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use. Every read goes to the database; nothing
    is cached on the instance.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see consoleblue.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def add_project(self, slug: str, display_name: str, **fields: Any) -> int:
        """Insert a project and return its id.

        Args:
            slug: Unique project slug.
            display_name: Human-readable name.
            **fields: Any other column from the projects table. ``tags`` and
                ``custom_settings`` are JSON-encoded.

        Raises:
            ValueError: If an unknown column is passed.
            sqlite3.IntegrityError: If the slug already exists.
        """
        values: dict[str, Any] = {"slug": slug, "display_name": display_name}
        for key, value in fields.items():
            if key not in _PROJECT_COLUMNS:
                raise ValueError(f"Unknown project column: {key!r}")
            if value is not None:
                values[key] = value
        if "tags" in values:
            values["tags"] = json.dumps(list(values["tags"]))
        if "custom_settings" in values:
            values["custom_settings"] = json.dumps(dict(values["custom_settings"]))

        columns = ", ".join(values)
        placeholders = ", ".join("?" * len(values))
        cur = self._conn.execute(
            f"INSERT INTO projects ({columns}) VALUES ({placeholders})",
            tuple(values.values()),
        )
        self._conn.commit()
        return cur.lastrowid

    def get_project(self, id_or_slug: int | str) -> Project | None:
        """Return a project by numeric id or slug, or None if not found.

        A purely numeric string is treated as an id.
        """
        if isinstance(id_or_slug, int) or str(id_or_slug).isdigit():
            row = self._conn.execute(
                "SELECT * FROM projects WHERE id = ?", (int(id_or_slug),)
            ).fetchone()
        else:
            row = self._conn.execute(
                "SELECT * FROM projects WHERE slug = ?", (id_or_slug,)
            ).fetchone()
        return _row_to_project(row) if row else None

    def list_projects(self) -> list[Project]:
        """Return all projects ordered by slug."""
        rows = self._conn.execute("SELECT * FROM projects ORDER BY slug").fetchall()
        return [_row_to_project(r) for r in rows]

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def add_operator(self, email: str, display_name: str | None = None) -> int:
        """Insert an active operator and return its id."""
        cur = self._conn.execute(
            "INSERT INTO operators (email, display_name) VALUES (?, ?)",
            (email, display_name),
        )
        self._conn.commit()
        return cur.lastrowid

    def set_operator_active(self, operator_id: int, active: bool) -> None:
        self._conn.execute(
            "UPDATE operators SET is_active = ? WHERE id = ?",
            (int(active), operator_id),
        )
        self._conn.commit()

    def list_operators(self, active_only: bool = False) -> list[Operator]:
        """Return operators ordered by id, optionally only the active ones."""
        sql = "SELECT id, email, display_name, is_active FROM operators"
        if active_only:
            sql += " WHERE is_active = 1"
        rows = self._conn.execute(sql + " ORDER BY id").fetchall()
        return [
            Operator(
                id=r["id"],
                email=r["email"],
                display_name=r["display_name"],
                is_active=bool(r["is_active"]),
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Shared docs
    # ------------------------------------------------------------------

    def add_shared_doc(self, doc: SharedDoc) -> int:
        """Insert a shared doc and return its id.

        Raises:
            sqlite3.IntegrityError: If the slug already exists.
        """
        cur = self._conn.execute(
            """
            INSERT INTO shared_docs (slug, title, content, display_order, enabled)
            VALUES (?, ?, ?, ?, ?)
            """,
            (doc.slug, doc.title, doc.content, doc.display_order, int(doc.enabled)),
        )
        self._conn.commit()
        return cur.lastrowid

    def get_shared_doc(self, doc_id: int) -> SharedDoc | None:
        row = self._conn.execute(f"{_SHARED_SELECT} WHERE id = ?", (doc_id,)).fetchone()
        return _row_to_shared_doc(row) if row else None

    def get_shared_doc_by_slug(self, slug: str) -> SharedDoc | None:
        row = self._conn.execute(f"{_SHARED_SELECT} WHERE slug = ?", (slug,)).fetchone()
        return _row_to_shared_doc(row) if row else None

    def list_shared_docs(self, enabled_only: bool = False) -> list[SharedDoc]:
        """Return shared docs ordered by display_order, ties broken by insertion."""
        sql = _SHARED_SELECT
        if enabled_only:
            sql += " WHERE enabled = 1"
        rows = self._conn.execute(sql + " ORDER BY display_order, id").fetchall()
        return [_row_to_shared_doc(r) for r in rows]

    def update_shared_doc(self, doc_id: int, **fields: Any) -> SharedDoc | None:
        """Apply *fields* to a shared doc and return the updated row (None if missing)."""
        self._update_doc("shared_docs", "id = ?", (doc_id,), fields)
        return self.get_shared_doc(doc_id)

    def delete_shared_doc(self, doc_id: int) -> SharedDoc | None:
        """Delete a shared doc permanently. Returns the deleted row, or None."""
        existing = self.get_shared_doc(doc_id)
        if existing is None:
            return None
        self._conn.execute("DELETE FROM shared_docs WHERE id = ?", (doc_id,))
        self._conn.commit()
        return existing

    def next_shared_display_order(self) -> int:
        row = self._conn.execute("SELECT MAX(display_order) FROM shared_docs").fetchone()
        return 0 if row[0] is None else row[0] + 1

    # ------------------------------------------------------------------
    # Project docs
    # ------------------------------------------------------------------

    def add_project_doc(self, doc: ProjectDoc) -> int:
        """Insert a project doc and return its id.

        Raises:
            sqlite3.IntegrityError: If the slug already exists for the project.
        """
        cur = self._conn.execute(
            """
            INSERT INTO project_docs (project_id, slug, title, content, display_order, enabled)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                doc.project_id,
                doc.slug,
                doc.title,
                doc.content,
                doc.display_order,
                int(doc.enabled),
            ),
        )
        self._conn.commit()
        return cur.lastrowid

    def insert_project_doc_if_absent(self, doc: ProjectDoc) -> bool:
        """Insert *doc* unless its (project_id, slug) already exists.

        Relies on the UNIQUE(project_id, slug) constraint, so two concurrent
        callers can never both insert the same slug.

        Returns:
            True if a row was inserted, False if the slug was already present.
        """
        cur = self._conn.execute(
            """
            INSERT INTO project_docs (project_id, slug, title, content, display_order, enabled)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(project_id, slug) DO NOTHING
            """,
            (
                doc.project_id,
                doc.slug,
                doc.title,
                doc.content,
                doc.display_order,
                int(doc.enabled),
            ),
        )
        self._conn.commit()
        return cur.rowcount > 0

    def upsert_project_doc(self, doc: ProjectDoc) -> bool:
        """Insert *doc*, or overwrite content, title and display_order by slug.

        The enabled flag of an existing row is left alone.

        Returns:
            True if a new row was created, False if an existing row was updated.
        """
        if self.insert_project_doc_if_absent(doc):
            return True
        self._conn.execute(
            """
            UPDATE project_docs
            SET content = ?, title = ?, display_order = ?, updated_at = datetime('now')
            WHERE project_id = ? AND slug = ?
            """,
            (doc.content, doc.title, doc.display_order, doc.project_id, doc.slug),
        )
        self._conn.commit()
        return False

    def update_project_doc_content(self, project_id: int, slug: str, content: str) -> bool:
        """Overwrite only the content of the doc with *slug*. Returns False if absent."""
        cur = self._conn.execute(
            """
            UPDATE project_docs SET content = ?, updated_at = datetime('now')
            WHERE project_id = ? AND slug = ?
            """,
            (content, project_id, slug),
        )
        self._conn.commit()
        return cur.rowcount > 0

    def get_project_doc(self, project_id: int, doc_id: int) -> ProjectDoc | None:
        row = self._conn.execute(
            f"{_PROJECT_DOC_SELECT} WHERE id = ? AND project_id = ?", (doc_id, project_id)
        ).fetchone()
        return _row_to_project_doc(row) if row else None

    def get_project_doc_by_slug(self, project_id: int, slug: str) -> ProjectDoc | None:
        row = self._conn.execute(
            f"{_PROJECT_DOC_SELECT} WHERE project_id = ? AND slug = ?", (project_id, slug)
        ).fetchone()
        return _row_to_project_doc(row) if row else None

    def list_project_docs(self, project_id: int, enabled_only: bool = False) -> list[ProjectDoc]:
        """Return a project's docs ordered by display_order, ties broken by insertion."""
        sql = f"{_PROJECT_DOC_SELECT} WHERE project_id = ?"
        if enabled_only:
            sql += " AND enabled = 1"
        rows = self._conn.execute(sql + " ORDER BY display_order, id", (project_id,)).fetchall()
        return [_row_to_project_doc(r) for r in rows]

    def count_project_docs(self, project_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM project_docs WHERE project_id = ?", (project_id,)
        ).fetchone()[0]

    def update_project_doc(self, project_id: int, doc_id: int, **fields: Any) -> ProjectDoc | None:
        """Apply *fields* to a project doc and return the updated row (None if missing)."""
        self._update_doc("project_docs", "id = ? AND project_id = ?", (doc_id, project_id), fields)
        return self.get_project_doc(project_id, doc_id)

    def delete_project_doc(self, project_id: int, doc_id: int) -> ProjectDoc | None:
        """Delete a project doc permanently. Returns the deleted row, or None."""
        existing = self.get_project_doc(project_id, doc_id)
        if existing is None:
            return None
        self._conn.execute(
            "DELETE FROM project_docs WHERE id = ? AND project_id = ?", (doc_id, project_id)
        )
        self._conn.commit()
        return existing

    def next_project_display_order(self, project_id: int) -> int:
        row = self._conn.execute(
            "SELECT MAX(display_order) FROM project_docs WHERE project_id = ?", (project_id,)
        ).fetchone()
        return 0 if row[0] is None else row[0] + 1

    def _update_doc(
        self, table: str, where: str, params: tuple, fields: dict[str, Any]
    ) -> None:
        unknown = set(fields) - _DOC_UPDATABLE
        if unknown:
            raise ValueError(f"Unknown doc column(s): {', '.join(sorted(unknown))}")
        if not fields:
            return
        values = {k: int(v) if k == "enabled" else v for k, v in fields.items()}
        assignments = ", ".join(f"{k} = ?" for k in values)
        self._conn.execute(
            f"UPDATE {table} SET {assignments}, updated_at = datetime('now') WHERE {where}",
            (*values.values(), *params),
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Push history (append-only)
    # ------------------------------------------------------------------

    def add_push_log(
        self,
        project_id: int,
        target_repo: str,
        target_path: str,
        assembled_content: str,
        status: str,
        commit_sha: str | None = None,
        commit_url: str | None = None,
        error_message: str | None = None,
    ) -> int:
        """Append one publish attempt and return its id."""
        cur = self._conn.execute(
            """
            INSERT INTO doc_push_log (
                project_id, target_repo, target_path, commit_sha, commit_url,
                assembled_content, status, error_message
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project_id,
                target_repo,
                target_path,
                commit_sha,
                commit_url,
                assembled_content,
                status,
                error_message,
            ),
        )
        self._conn.commit()
        return cur.lastrowid

    def list_push_log(self, project_id: int, limit: int, offset: int = 0) -> list[PushLogEntry]:
        """Return push attempts for a project, newest first."""
        rows = self._conn.execute(
            f"{_PUSH_LOG_SELECT} WHERE project_id = ? "
            "ORDER BY pushed_at DESC, id DESC LIMIT ? OFFSET ?",
            (project_id, limit, offset),
        ).fetchall()
        return [_row_to_push_log(r) for r in rows]

    def count_push_log(self, project_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM doc_push_log WHERE project_id = ?", (project_id,)
        ).fetchone()[0]

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def add_notification(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        metadata: dict[str, Any] | None = None,
        project_id: int | None = None,
    ) -> int:
        cur = self._conn.execute(
            """
            INSERT INTO notifications (user_id, type, title, message, metadata, project_id)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, type, title, message, json.dumps(metadata or {}), project_id),
        )
        self._conn.commit()
        return cur.lastrowid

    def list_notifications(self, user_id: int | None = None) -> list[Notification]:
        """Return notifications (optionally for one operator), oldest first."""
        sql = (
            "SELECT id, user_id, type, title, message, metadata, project_id, read, created_at "
            "FROM notifications"
        )
        params: tuple = ()
        if user_id is not None:
            sql += " WHERE user_id = ?"
            params = (user_id,)
        rows = self._conn.execute(sql + " ORDER BY id", params).fetchall()
        return [
            Notification(
                id=r["id"],
                user_id=r["user_id"],
                type=r["type"],
                title=r["title"],
                message=r["message"],
                metadata=r["metadata"],
                project_id=r["project_id"],
                read=bool(r["read"]),
                created_at=r["created_at"],
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def add_audit_entry(
        self,
        action: str,
        entity_type: str,
        entity_id: int | None = None,
        entity_slug: str | None = None,
        previous_value: Any = None,
        new_value: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        cur = self._conn.execute(
            """
            INSERT INTO audit_log (
                action, entity_type, entity_id, entity_slug, previous_value, new_value, metadata
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                action,
                entity_type,
                entity_id,
                entity_slug,
                _json_or_none(previous_value),
                _json_or_none(new_value),
                _json_or_none(metadata),
            ),
        )
        self._conn.commit()
        return cur.lastrowid

    def list_audit_entries(self, entity_type: str | None = None) -> list[AuditEntry]:
        sql = (
            "SELECT id, action, entity_type, entity_id, entity_slug, previous_value, "
            "new_value, metadata, created_at FROM audit_log"
        )
        params: tuple = ()
        if entity_type is not None:
            sql += " WHERE entity_type = ?"
            params = (entity_type,)
        rows = self._conn.execute(sql + " ORDER BY id", params).fetchall()
        return [AuditEntry(**dict(r)) for r in rows]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _json_or_none(value: Any) -> str | None:
    return None if value is None else json.dumps(value, default=str)


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        slug=row["slug"],
        display_name=row["display_name"],
        status=row["status"],
        description=row["description"],
        github_repo=row["github_repo"],
        github_owner=row["github_owner"],
        default_branch=row["default_branch"],
        color_primary=row["color_primary"],
        color_accent=row["color_accent"],
        color_background=row["color_background"],
        tags=json.loads(row["tags"] or "[]"),
        subdomain_url=row["subdomain_url"],
        production_url=row["production_url"],
        custom_settings=json.loads(row["custom_settings"] or "{}"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_shared_doc(row: sqlite3.Row) -> SharedDoc:
    return SharedDoc(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        content=row["content"],
        display_order=row["display_order"],
        enabled=bool(row["enabled"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_project_doc(row: sqlite3.Row) -> ProjectDoc:
    return ProjectDoc(
        id=row["id"],
        project_id=row["project_id"],
        slug=row["slug"],
        title=row["title"],
        content=row["content"],
        display_order=row["display_order"],
        enabled=bool(row["enabled"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_push_log(row: sqlite3.Row) -> PushLogEntry:
    return PushLogEntry(
        id=row["id"],
        project_id=row["project_id"],
        target_repo=row["target_repo"],
        target_path=row["target_path"],
        commit_sha=row["commit_sha"],
        commit_url=row["commit_url"],
        assembled_content=row["assembled_content"],
        status=row["status"],
        error_message=row["error_message"],
        pushed_at=row["pushed_at"],
    )
