"""
infrastructure.persistence.banana_repo - SQLite catalog repository.

Implements BananaRepository port. Row ids are exposed as strings so that
persisted and demo items share one id type. An id that is not a plain
decimal within the SQLite integer range raises NotFoundError before any
statement runs.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Optional

from domain.entities import Banana, NutritionFacts, Rarity, Taste
from domain.exceptions import NotFoundError
from domain.models import BananaFilter
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.timestamps import from_iso, to_iso

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "name", "scientific_name", "origin", "year_discovered", "invention_story",
    "fun_fact", "color", "taste", "rarity", "image_url", "cultural_significance",
}
_NUTRITION_COLUMNS = ("calories", "potassium", "fiber", "sugar")
_MAX_ROW_ID = 2**63 - 1


class SQLiteBananaRepository:
    """Async SQLite implementation of BananaRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def find(self, filters: BananaFilter, offset: int, limit: int) -> list[Banana]:
        where, params = self._where(filters)
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                f"SELECT * FROM bananas{where} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            return [self._row_to_banana(r) for r in rows]

    async def count(self, filters: BananaFilter) -> int:
        where, params = self._where(filters)
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(f"SELECT COUNT(*) FROM bananas{where}", params)
            return rows[0][0]

    async def get_by_id(self, banana_id: str) -> Optional[Banana]:
        row_id = self._row_id(banana_id)
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall("SELECT * FROM bananas WHERE id = ?", (row_id,))
            return self._row_to_banana(rows[0]) if rows else None

    async def get_at_offset(self, offset: int) -> Optional[Banana]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM bananas ORDER BY id LIMIT 1 OFFSET ?", (offset,),
            )
            return self._row_to_banana(rows[0]) if rows else None

    async def save(self, banana: Banana) -> str:
        now = to_iso(datetime.now(timezone.utc))
        nutrition = banana.nutrition_facts or NutritionFacts()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO bananas
                   (name, scientific_name, origin, year_discovered, invention_story,
                    fun_fact, color, taste, rarity, image_url,
                    calories, potassium, fiber, sugar,
                    cultural_significance, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    banana.name, banana.scientific_name, banana.origin,
                    banana.year_discovered, banana.invention_story, banana.fun_fact,
                    banana.color, Taste(banana.taste).value, Rarity(banana.rarity).value,
                    banana.image_url,
                    nutrition.calories, nutrition.potassium, nutrition.fiber, nutrition.sugar,
                    banana.cultural_significance, now, now,
                ),
            )
            return str(cursor.lastrowid)

    async def update(self, banana_id: str, fields: dict[str, Any]) -> Optional[Banana]:
        row_id = self._row_id(banana_id)
        assignments: list[str] = []
        params: list[Any] = []
        for key, value in fields.items():
            if key == "nutrition_facts":
                facts = value if isinstance(value, NutritionFacts) else NutritionFacts(**(value or {}))
                for column, column_value in asdict(facts).items():
                    assignments.append(f"{column} = ?")
                    params.append(column_value)
            elif key in _UPDATABLE:
                assignments.append(f"{key} = ?")
                params.append(value.value if isinstance(value, (Taste, Rarity)) else value)
            else:
                raise ValueError(f"Invalid field '{key}'. Allowed: {sorted(_UPDATABLE)}")
        assignments.append("updated_at = ?")
        params.append(to_iso(datetime.now(timezone.utc)))

        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                f"UPDATE bananas SET {', '.join(assignments)} WHERE id = ?",
                (*params, row_id),
            )
            if cursor.rowcount == 0:
                return None
            rows = await conn.execute_fetchall("SELECT * FROM bananas WHERE id = ?", (row_id,))
            return self._row_to_banana(rows[0])

    async def delete(self, banana_id: str) -> bool:
        row_id = self._row_id(banana_id)
        async with self._conn.acquire() as conn:
            cursor = await conn.execute("DELETE FROM bananas WHERE id = ?", (row_id,))
            return cursor.rowcount == 1

    async def delete_all(self) -> int:
        async with self._conn.acquire() as conn:
            cursor = await conn.execute("DELETE FROM bananas")
            return cursor.rowcount

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _row_id(banana_id: str) -> int:
        text = str(banana_id)
        if not (text.isascii() and text.isdigit()) or int(text) > _MAX_ROW_ID:
            raise NotFoundError(f"Banana {banana_id} not found.")
        return int(text)

    @staticmethod
    def _where(filters: BananaFilter) -> tuple[str, tuple]:
        clauses, params = [], []
        if filters.rarity is not None:
            clauses.append("rarity = ?")
            params.append(Rarity(filters.rarity).value)
        if filters.taste is not None:
            clauses.append("taste = ?")
            params.append(Taste(filters.taste).value)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, tuple(params)

    @staticmethod
    def _row_to_banana(row) -> Banana:
        return Banana(
            id=str(row["id"]),
            name=row["name"],
            scientific_name=row["scientific_name"],
            origin=row["origin"],
            year_discovered=row["year_discovered"],
            invention_story=row["invention_story"],
            fun_fact=row["fun_fact"],
            color=row["color"],
            taste=Taste(row["taste"]),
            rarity=Rarity(row["rarity"]),
            image_url=row["image_url"],
            nutrition_facts=NutritionFacts(
                **{column: row[column] for column in _NUTRITION_COLUMNS}
            ),
            cultural_significance=row["cultural_significance"],
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
        )
