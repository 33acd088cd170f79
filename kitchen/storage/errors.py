"""Storage error hierarchy.

Every storage error wraps its underlying cause (also chained with
``raise ... from``) and propagates to the immediate caller.
"""

from __future__ import annotations


class DatabaseError(Exception):
    """Base error for local database failures."""

    message: str = "Database error"

    def __init__(self, cause: BaseException | None = None, message: str | None = None) -> None:
        self.cause = cause
        base = message or self.__class__.message
        self.message = f"{base}: {cause}" if cause is not None else base
        super().__init__(self.message)


class NotInitializedError(DatabaseError):
    """``read``/``write`` called before ``setup``."""

    message = "Database is not initialized"


class MigrationFailedError(DatabaseError):
    """Opening the database or applying a migration failed."""

    message = "Database migration failed"


class ExecutionFailedError(DatabaseError):
    """An operation passed to ``read``/``write`` raised."""

    message = "Database execution failed"
