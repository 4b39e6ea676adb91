"""
infrastructure.persistence.migrations - Database schema creation.

Called once at startup by the factory or the CLI.
"""

from __future__ import annotations

import logging

from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_TABLES = [
    """CREATE TABLE IF NOT EXISTS accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL COLLATE NOCASE UNIQUE,
        password_hash TEXT,
        display_name TEXT NOT NULL,
        avatar TEXT,
        provider TEXT NOT NULL DEFAULT 'local',
        provider_id TEXT,
        role TEXT NOT NULL DEFAULT 'user',
        terms_accepted INTEGER NOT NULL DEFAULT 0,
        terms_accepted_at TEXT,
        terms_version TEXT,
        oracle_queries_remaining INTEGER NOT NULL DEFAULT 10,
        oracle_queries_reset_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        last_login_at TEXT NOT NULL
    )""",
    """CREATE UNIQUE INDEX IF NOT EXISTS ux_accounts_provider
        ON accounts (provider, provider_id)
        WHERE provider != 'local'""",
    """CREATE TABLE IF NOT EXISTS bananas (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        scientific_name TEXT,
        origin TEXT NOT NULL,
        year_discovered INTEGER,
        invention_story TEXT NOT NULL,
        fun_fact TEXT,
        color TEXT NOT NULL DEFAULT 'yellow',
        taste TEXT NOT NULL DEFAULT 'sweet'
            CHECK (taste IN ('sweet', 'tangy', 'mild', 'rich', 'tropical')),
        rarity TEXT NOT NULL DEFAULT 'common'
            CHECK (rarity IN ('common', 'uncommon', 'rare', 'legendary')),
        image_url TEXT,
        calories REAL,
        potassium TEXT,
        fiber TEXT,
        sugar TEXT,
        cultural_significance TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS favorite_bananas (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        account_id INTEGER NOT NULL,
        banana_ref TEXT NOT NULL,
        created_at TEXT NOT NULL,
        UNIQUE (account_id, banana_ref),
        FOREIGN KEY (account_id) REFERENCES accounts(id)
    )""",
]


async def run_migrations(connection: AsyncSQLiteConnection) -> None:
    """Create all tables if they don't exist.

    Safe to call multiple times (uses IF NOT EXISTS).
    """
    async with connection.acquire() as conn:
        for ddl in _TABLES:
            await conn.execute(ddl)
    logger.info("All tables created (or already exist).")
