"""Database layer for statementflow."""

from statementflow.database.base import Database
from statementflow.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
