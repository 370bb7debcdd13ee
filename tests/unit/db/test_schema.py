"""Tests for document store schema constraints."""

from __future__ import annotations

import sqlite3

import pytest

from consoleblue.db.schema import CURRENT_VERSION, initialize


def _table_columns(conn, table: str) -> set[str]:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return {row["name"] for row in rows}


def _add_project(conn, slug: str = "web") -> int:
    cur = conn.execute(
        "INSERT INTO projects (slug, display_name) VALUES (?, ?)", (slug, slug.title())
    )
    conn.commit()
    return cur.lastrowid


def test_schema_version_recorded(tmp_db):
    version = tmp_db.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    assert version == CURRENT_VERSION


def test_initialize_idempotent(tmp_db):
    initialize(tmp_db)
    rows = tmp_db.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
    assert rows == 1


def test_push_log_columns(tmp_db):
    assert _table_columns(tmp_db, "doc_push_log") == {
        "id",
        "project_id",
        "target_repo",
        "target_path",
        "commit_sha",
        "commit_url",
        "assembled_content",
        "status",
        "error_message",
        "pushed_at",
    }


def test_project_defaults(tmp_db):
    pid = _add_project(tmp_db)
    row = tmp_db.execute("SELECT * FROM projects WHERE id = ?", (pid,)).fetchone()
    assert row["default_branch"] == "main"
    assert row["status"] == "active"
    assert row["tags"] == "[]"
    assert row["custom_settings"] == "{}"


def test_shared_doc_slug_unique(tmp_db):
    tmp_db.execute("INSERT INTO shared_docs (slug, title) VALUES ('brand', 'Brand')")
    with pytest.raises(sqlite3.IntegrityError):
        tmp_db.execute("INSERT INTO shared_docs (slug, title) VALUES ('brand', 'Other')")


def test_project_doc_slug_unique_per_project(tmp_db):
    web = _add_project(tmp_db, "web")
    api = _add_project(tmp_db, "api")
    sql = "INSERT INTO project_docs (project_id, slug, title) VALUES (?, 'notes', 'Notes')"
    tmp_db.execute(sql, (web,))
    tmp_db.execute(sql, (api,))
    with pytest.raises(sqlite3.IntegrityError):
        tmp_db.execute(sql, (web,))


def test_push_log_status_checked(tmp_db):
    pid = _add_project(tmp_db)
    with pytest.raises(sqlite3.IntegrityError):
        tmp_db.execute(
            "INSERT INTO doc_push_log (project_id, target_repo, target_path, assembled_content, status)"
            " VALUES (?, 'o/r', 'CLAUDE.md', '', 'pending')",
            (pid,),
        )


def test_project_delete_cascades(tmp_db):
    pid = _add_project(tmp_db)
    tmp_db.execute(
        "INSERT INTO project_docs (project_id, slug, title) VALUES (?, 'notes', 'Notes')", (pid,)
    )
    tmp_db.execute(
        "INSERT INTO doc_push_log (project_id, target_repo, target_path, assembled_content, status)"
        " VALUES (?, 'o/r', 'CLAUDE.md', '', 'success')",
        (pid,),
    )
    tmp_db.execute("DELETE FROM projects WHERE id = ?", (pid,))
    tmp_db.commit()
    assert tmp_db.execute("SELECT COUNT(*) FROM project_docs").fetchone()[0] == 0
    assert tmp_db.execute("SELECT COUNT(*) FROM doc_push_log").fetchone()[0] == 0
