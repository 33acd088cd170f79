"""Recipe records stored in the local ``recipes`` table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Row

from kitchen.storage.database import DatabaseManager
from kitchen.storage.tables import recipes


@dataclass(frozen=True)
class Recipe:
    id: int
    name: str
    cuisine: str | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Row) -> Recipe:
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; rows are always written in UTC.
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(id=row.id, name=row.name, cuisine=row.cuisine, created_at=created_at)


class RecipeRepository:
    """CRUD over ``recipes`` through a ``DatabaseManager``."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    def insert(self, name: str, cuisine: str | None = None) -> int:
        """Insert a recipe and return its new id."""
        stmt = insert(recipes).values(
            name=name,
            cuisine=cuisine,
            created_at=datetime.now(timezone.utc),
        )
        return self._db.write(lambda conn: conn.execute(stmt).inserted_primary_key[0])

    def fetch_all(self, order_by_newest: bool = True) -> list[Recipe]:
        query = select(recipes)
        if order_by_newest:
            query = query.order_by(recipes.c.created_at.desc(), recipes.c.id.desc())
        else:
            query = query.order_by(recipes.c.id)
        return self._db.read(lambda conn: [Recipe.from_row(row) for row in conn.execute(query)])

    def get(self, recipe_id: int) -> Recipe | None:
        query = select(recipes).where(recipes.c.id == recipe_id)

        def _fetch(conn) -> Recipe | None:
            row = conn.execute(query).first()
            return Recipe.from_row(row) if row is not None else None

        return self._db.read(_fetch)

    def update_name(self, recipe_id: int, new_name: str) -> int:
        """Rename a recipe. Returns the number of rows changed."""
        stmt = update(recipes).where(recipes.c.id == recipe_id).values(name=new_name)
        return self._db.write(lambda conn: conn.execute(stmt).rowcount)

    def delete(self, recipe_id: int) -> int:
        """Delete a recipe. Returns the number of rows removed."""
        stmt = delete(recipes).where(recipes.c.id == recipe_id)
        return self._db.write(lambda conn: conn.execute(stmt).rowcount)
