"""SQLite database manager with reader/writer access control and migrations.

Lifecycle: ``Uninitialized → Ready``. ``setup`` opens the database file,
makes sure the ``schema_migrations`` ledger exists, registers the built-in
migrations and applies every migration whose version is not yet in the
ledger, in ascending order, inside one transaction. The engine is only
published to readers once all of that has succeeded.

Access goes through ``read`` / ``write`` / ``write_transaction``: readers run
concurrently, a writer excludes all readers and other writers.

Invariants:
    - A migration version is applied at most once; the ledger decides.
    - A failing migration rolls back every migration of that setup call.
    - No caller ever receives the engine itself, only a connection scoped
      to one operation.
"""

from __future__ import annotations

import asyncio
import bisect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TypeVar

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Connection, Engine

from kitchen.storage import tables
from kitchen.storage.errors import (
    ExecutionFailedError,
    MigrationFailedError,
    NotInitializedError,
)
from kitchen.storage.locks import ReadWriteLock

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DATABASE_FILE_NAME = "perfect_kitchen.sqlite3"


@dataclass(frozen=True)
class Migration:
    """One versioned, one-time schema change.

    Versions must increase; gaps are fine.
    """

    version: int
    name: str
    apply: Callable[[Connection], None] = field(repr=False, compare=False)


def _create_recipes_table(conn: Connection) -> None:
    tables.recipes.create(conn, checkfirst=True)


BUILTIN_MIGRATIONS: tuple[Migration, ...] = (
    Migration(version=1, name="Create recipes table", apply=_create_recipes_table),
)


class DatabaseManager:
    """Owns the SQLite engine and mediates every access to it.

    Args:
        data_dir: App-private directory the database file lives in.
        file_name: Default database file name for ``setup``.
        busy_timeout_seconds: How long SQLite retries a locked database.
        echo: Log every SQL statement (debug builds).
    """

    def __init__(
        self,
        data_dir: str | Path,
        file_name: str = DEFAULT_DATABASE_FILE_NAME,
        busy_timeout_seconds: float = 3.0,
        echo: bool = False,
    ) -> None:
        self._data_dir = Path(data_dir)
        self._file_name = file_name
        self._busy_timeout_seconds = busy_timeout_seconds
        self._echo = echo
        self._engine: Engine | None = None
        self._migrations: list[Migration] = []
        self._lock = ReadWriteLock()
        self.path: Path | None = None

    @property
    def is_ready(self) -> bool:
        return self._engine is not None

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def database_path(self, file_name: str | None = None, directory: str | Path | None = None) -> Path:
        """Resolve the database file path, creating its directory if missing."""
        folder = Path(directory) if directory is not None else self._data_dir
        folder.mkdir(parents=True, exist_ok=True)
        return folder / (file_name or self._file_name)

    def _create_engine(self, path: Path) -> Engine:
        engine = create_engine(
            f"sqlite:///{path}",
            echo=self._echo,
            connect_args={"timeout": self._busy_timeout_seconds, "check_same_thread": False},
        )
        busy_timeout_ms = int(self._busy_timeout_seconds * 1000)

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_conn, _record):  # type: ignore[no-untyped-def]
            # Let SQLAlchemy own BEGIN so DDL runs inside migration transactions.
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute(f"PRAGMA busy_timeout = {busy_timeout_ms}")
            cur.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):  # type: ignore[no-untyped-def]
            conn.exec_driver_sql("BEGIN")

        return engine

    def setup(self, file_name: str | None = None, directory: str | Path | None = None) -> list[int]:
        """Open the database and apply pending migrations.

        Returns the versions applied by this call.

        Raises
        ------
        MigrationFailedError
            If the file cannot be opened, the ledger cannot be created, or
            any migration fails. Nothing from this call's migrations is kept
            and a previously published engine, if any, stays in place.
        """
        engine: Engine | None = None
        try:
            path = self.database_path(file_name, directory)
            engine = self._create_engine(path)
            with engine.begin() as conn:
                tables.schema_migrations.create(conn, checkfirst=True)
        except Exception as exc:
            if engine is not None:
                engine.dispose()
            logger.error("Failed to open database: %s", exc)
            raise MigrationFailedError(exc) from exc

        self._register_builtin_migrations()

        try:
            applied = self._perform_migrations(engine)
        except Exception as exc:
            engine.dispose()
            logger.error("Database migration failed: %s", exc)
            raise MigrationFailedError(exc) from exc

        with self._lock.write_locked():
            previous, self._engine = self._engine, engine
            self.path = path
        if previous is not None:
            previous.dispose()

        logger.info("Database ready at %s (applied migrations: %s)", path, applied or "none")
        return applied

    def register(self, migration: Migration) -> None:
        """Register a migration; the list stays sorted by version.

        Raises
        ------
        ValueError
            If a migration with the same version is already registered.
        """
        if any(m.version == migration.version for m in self._migrations):
            raise ValueError(f"Migration version {migration.version} is already registered")
        versions = [m.version for m in self._migrations]
        self._migrations.insert(bisect.bisect(versions, migration.version), migration)

    def _register_builtin_migrations(self) -> None:
        registered = {m.version for m in self._migrations}
        for migration in BUILTIN_MIGRATIONS:
            if migration.version not in registered:
                self.register(migration)

    def _perform_migrations(self, engine: Engine) -> list[int]:
        """Apply unrecorded migrations in ascending order, all-or-nothing."""
        with engine.begin() as conn:
            applied = set(conn.execute(select(tables.schema_migrations.c.version)).scalars())
            pending = [m for m in self._migrations if m.version not in applied]

            for migration in pending:
                logger.info("Applying migration %d: %s", migration.version, migration.name)
                migration.apply(conn)
                conn.execute(
                    insert(tables.schema_migrations).values(
                        version=migration.version,
                        name=migration.name,
                        applied_at=datetime.now(timezone.utc),
                    )
                )

        return [m.version for m in pending]

    def applied_versions(self) -> list[int]:
        """Versions recorded in the ledger, ascending."""
        return self.read(
            lambda conn: sorted(conn.execute(select(tables.schema_migrations.c.version)).scalars())
        )

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise NotInitializedError()
        return self._engine

    def read(self, op: Callable[[Connection], T]) -> T:
        """Run ``op`` with a connection; may overlap with other reads."""
        with self._lock.read_locked():
            engine = self._require_engine()
            try:
                with engine.connect() as conn:
                    return op(conn)
            except Exception as exc:
                raise ExecutionFailedError(exc) from exc

    def write(self, op: Callable[[Connection], T]) -> T:
        """Run ``op`` exclusively and commit what it wrote."""
        with self._lock.write_locked():
            engine = self._require_engine()
            try:
                with engine.connect() as conn:
                    result = op(conn)
                    conn.commit()
                    return result
            except Exception as exc:
                raise ExecutionFailedError(exc) from exc

    def write_transaction(self, op: Callable[[Connection], T]) -> T:
        """Run ``op`` exclusively inside one transaction: all statements or none."""
        with self._lock.write_locked():
            engine = self._require_engine()
            try:
                with engine.begin() as conn:
                    return op(conn)
            except Exception as exc:
                raise ExecutionFailedError(exc) from exc

    async def read_async(self, op: Callable[[Connection], T]) -> T:
        return await asyncio.to_thread(self.read, op)

    async def write_async(self, op: Callable[[Connection], T]) -> T:
        return await asyncio.to_thread(self.write, op)

    async def write_transaction_async(self, op: Callable[[Connection], T]) -> T:
        return await asyncio.to_thread(self.write_transaction, op)

    def close(self) -> None:
        with self._lock.write_locked():
            engine, self._engine = self._engine, None
        if engine is not None:
            engine.dispose()
            logger.info("Database closed")
