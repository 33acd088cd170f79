"""SQLAlchemy Core table definitions for the local database."""

from __future__ import annotations

from sqlalchemy import TIMESTAMP, Column, Integer, MetaData, Table, Text

metadata = MetaData()

# Ledger of applied migrations; the set of versions here is the source of truth.
schema_migrations = Table(
    "schema_migrations",
    metadata,
    Column("version", Integer, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("applied_at", TIMESTAMP),
)

recipes = Table(
    "recipes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("cuisine", Text, nullable=True),
    Column("created_at", TIMESTAMP, nullable=False),
    sqlite_autoincrement=True,
)
