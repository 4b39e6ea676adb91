"""
infrastructure.persistence.account_repo - SQLite account repository.

Implements AccountRepository port. Quota changes are single conditional
UPDATE statements, so two concurrent requests can never push the counter
below zero or spend the last query twice.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import aiosqlite

from domain.entities import Account, Provider, Role
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.timestamps import from_iso, to_iso

logger = logging.getLogger(__name__)


class SQLiteAccountRepository:
    """Async SQLite implementation of AccountRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    # -- reads --------------------------------------------------------------

    async def get_by_id(self, account_id: int) -> Optional[Account]:
        return await self._fetch_one("SELECT * FROM accounts WHERE id = ?", (account_id,))

    async def get_by_email(self, email: str) -> Optional[Account]:
        return await self._fetch_one(
            "SELECT * FROM accounts WHERE email = ?", (email.strip().lower(),),
        )

    async def get_by_provider(self, provider: str, provider_id: str) -> Optional[Account]:
        return await self._fetch_one(
            "SELECT * FROM accounts WHERE provider = ? AND provider_id = ?",
            (provider, provider_id),
        )

    # -- writes -------------------------------------------------------------

    async def save(self, account: Account) -> int:
        """Insert ``account``; a taken email or provider id raises RepositoryError."""
        account_id = await self._insert(account, datetime.now(timezone.utc))
        logger.info("Created account %d (%s)", account_id, account.provider)
        return account_id

    async def _insert(self, account: Account, now: datetime) -> int:
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO accounts
                   (email, password_hash, display_name, avatar, provider, provider_id,
                    role, terms_accepted, terms_accepted_at, terms_version,
                    oracle_queries_remaining, oracle_queries_reset_at,
                    created_at, last_login_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    account.email.strip().lower(),
                    account.password_hash,
                    account.display_name,
                    account.avatar,
                    Provider(account.provider).value,
                    account.provider_id,
                    Role(account.role).value,
                    int(account.terms_accepted),
                    to_iso(account.terms_accepted_at),
                    account.terms_version,
                    account.oracle_queries_remaining,
                    to_iso(account.oracle_queries_reset_at or now),
                    to_iso(account.created_at or now),
                    to_iso(account.last_login_at or now),
                ),
            )
            return cursor.lastrowid

    async def relink_provider(self, account_id: int, provider: str, provider_id: str) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "UPDATE accounts SET provider = ?, provider_id = ? WHERE id = ?",
                (provider, provider_id, account_id),
            )

    async def touch_last_login(self, account_id: int, when: datetime) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "UPDATE accounts SET last_login_at = ? WHERE id = ?",
                (to_iso(when), account_id),
            )

    async def accept_terms(self, account_id: int, version: str, when: datetime) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                """UPDATE accounts
                   SET terms_accepted = 1, terms_version = ?, terms_accepted_at = ?
                   WHERE id = ?""",
                (version, to_iso(when), account_id),
            )

    async def reset_quota(
        self, account_id: int, limit: int, now: datetime, due_before: datetime,
    ) -> bool:
        """Refill the quota if the window started at or before ``due_before``."""
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE accounts
                   SET oracle_queries_remaining = ?, oracle_queries_reset_at = ?
                   WHERE id = ? AND oracle_queries_reset_at <= ?""",
                (limit, to_iso(now), account_id, to_iso(due_before)),
            )
            return cursor.rowcount == 1

    async def try_consume_query(self, account_id: int) -> bool:
        """Decrement the quota only if something is left. True on success."""
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE accounts
                   SET oracle_queries_remaining = oracle_queries_remaining - 1
                   WHERE id = ? AND oracle_queries_remaining > 0""",
                (account_id,),
            )
            return cursor.rowcount == 1

    async def refund_query(self, account_id: int, limit: int) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                """UPDATE accounts
                   SET oracle_queries_remaining = MIN(oracle_queries_remaining + 1, ?)
                   WHERE id = ?""",
                (limit, account_id),
            )

    async def add_favorite(self, account_id: int, banana_ref: str) -> list[str]:
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT OR IGNORE INTO favorite_bananas (account_id, banana_ref, created_at)
                   VALUES (?, ?, ?)""",
                (account_id, banana_ref, to_iso(datetime.now(timezone.utc))),
            )
            return await self._favorites(conn, account_id)

    async def remove_favorite(self, account_id: int, banana_ref: str) -> list[str]:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "DELETE FROM favorite_bananas WHERE account_id = ? AND banana_ref = ?",
                (account_id, banana_ref),
            )
            return await self._favorites(conn, account_id)

    # -- helpers ------------------------------------------------------------

    async def _fetch_one(self, sql: str, params: tuple) -> Optional[Account]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(sql, params)
            if not rows:
                return None
            account = self._row_to_account(rows[0])
            account.favorite_bananas = await self._favorites(conn, account.id)
            return account

    @staticmethod
    async def _favorites(conn: aiosqlite.Connection, account_id: int) -> list[str]:
        rows = await conn.execute_fetchall(
            "SELECT banana_ref FROM favorite_bananas WHERE account_id = ? ORDER BY id",
            (account_id,),
        )
        return [row["banana_ref"] for row in rows]

    @staticmethod
    def _row_to_account(row) -> Account:
        return Account(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            display_name=row["display_name"],
            avatar=row["avatar"],
            provider=Provider(row["provider"]),
            provider_id=row["provider_id"],
            role=Role(row["role"]),
            terms_accepted=bool(row["terms_accepted"]),
            terms_accepted_at=from_iso(row["terms_accepted_at"]),
            terms_version=row["terms_version"],
            oracle_queries_remaining=row["oracle_queries_remaining"],
            oracle_queries_reset_at=from_iso(row["oracle_queries_reset_at"]),
            created_at=from_iso(row["created_at"]),
            last_login_at=from_iso(row["last_login_at"]),
        )
