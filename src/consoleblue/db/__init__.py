"""ConsoleBlue database layer."""

from consoleblue.db.connection import Database
from consoleblue.db.migrations import MIGRATIONS, run_migrations
from consoleblue.db.repository import Repository
from consoleblue.db.schema import initialize

__all__ = [
    "Database",
    "Repository",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
]
