"""Tests for the Database connection layer."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from consoleblue.db.connection import Database


def test_connect_creates_file_and_parents(tmp_path):
    db_path = tmp_path / "nested" / "dir" / ".consoleblue.db"
    conn = Database(db_path).connect()
    conn.close()
    assert db_path.exists()


def test_busy_timeout_set(tmp_path):
    conn = Database(tmp_path / ".consoleblue.db").connect()
    timeout = conn.execute("PRAGMA busy_timeout").fetchone()[0]
    conn.close()
    assert timeout == 5000


def test_row_factory_set(tmp_path):
    conn = Database(tmp_path / ".consoleblue.db").connect()
    conn.execute("CREATE TABLE t (x INTEGER)")
    conn.execute("INSERT INTO t VALUES (42)")
    row = conn.execute("SELECT x FROM t").fetchone()
    conn.close()
    assert row["x"] == 42


def test_context_manager_accepts_path_str(tmp_path):
    db = Database(str(tmp_path / ".consoleblue.db"))
    assert isinstance(db.db_path, Path)
    with db as conn:
        result = conn.execute("SELECT 1").fetchone()[0]
    assert result == 1


def test_context_manager_closes_connection(tmp_path):
    db = Database(tmp_path / ".consoleblue.db")
    with db as conn:
        conn.execute("SELECT 1")
    assert db._conn is None
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")
