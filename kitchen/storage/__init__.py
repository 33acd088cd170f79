"""Local SQLite storage: database manager, migrations and recipe records."""

from kitchen.storage.database import BUILTIN_MIGRATIONS, DatabaseManager, Migration
from kitchen.storage.errors import (
    DatabaseError,
    ExecutionFailedError,
    MigrationFailedError,
    NotInitializedError,
)
from kitchen.storage.locks import ReadWriteLock
from kitchen.storage.recipes import Recipe, RecipeRepository

__all__ = [
    "BUILTIN_MIGRATIONS",
    "DatabaseError",
    "DatabaseManager",
    "ExecutionFailedError",
    "Migration",
    "MigrationFailedError",
    "NotInitializedError",
    "ReadWriteLock",
    "Recipe",
    "RecipeRepository",
]
