"""
Tests for the SQLite connection manager.

Verifies that:
1. A database that cannot be opened raises StoreUnavailableError
2. A failed statement raises RepositoryError and rolls the block back
3. ping() reports liveness without raising
"""

import pytest

from domain.entities import Account
from domain.exceptions import RepositoryError, StoreUnavailableError, UpstreamUnavailableError
from infrastructure.persistence.connection import AsyncSQLiteConnection


async def test_unopenable_database_is_unavailable(down_db_path):
    conn = AsyncSQLiteConnection(down_db_path)

    with pytest.raises(StoreUnavailableError) as excinfo:
        async with conn.acquire():
            pass

    assert isinstance(excinfo.value, UpstreamUnavailableError)
    assert isinstance(excinfo.value, RepositoryError)
    assert await conn.ping() is False


async def test_failed_statement_rolls_back(connection):
    with pytest.raises(RepositoryError):
        async with connection.acquire() as conn:
            await conn.execute(
                "INSERT INTO bananas (name, origin, invention_story, created_at, updated_at)"
                " VALUES ('Kept?', 'Nowhere', 'Never', 'x', 'x')"
            )
            await conn.execute("SELECT * FROM no_such_table")

    async with connection.acquire() as conn:
        rows = await conn.execute_fetchall("SELECT COUNT(*) FROM bananas")
    assert rows[0][0] == 0
    assert await connection.ping() is True


async def test_duplicate_email_is_repository_error(account_repo, make_account):
    existing = await make_account(email="taken@example.com")

    with pytest.raises(RepositoryError):
        await account_repo.save(Account(email="TAKEN@example.com", provider_id="other"))

    assert (await account_repo.get_by_email("taken@example.com")).id == existing.id
