"""CLI test fixtures: an initialized workspace in tmp_path."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from consoleblue.cli.main import app


@pytest.fixture
def cli_db(tmp_path: Path, monkeypatch) -> str:
    """Run `consoleblue init` in tmp_path and return the database path."""
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(app, ["init", str(tmp_path)])
    assert result.exit_code == 0, result.output
    return str(tmp_path / ".consoleblue.db")
