"""Shared fixtures: a migrated SQLite file per test, repositories and an API client."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from domain.entities import Account, Provider
from factory import ServiceFactory
from infrastructure.config import Settings
from infrastructure.persistence.account_repo import SQLiteAccountRepository
from infrastructure.persistence.banana_repo import SQLiteBananaRepository
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.timestamps import to_iso
from adapters.rest.app import create_app
from fakes import FakeOAuthProvider, FakeOracleClient


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "banana.db")


@pytest.fixture
def down_db_path(tmp_path) -> str:
    """A path SQLite cannot open: its directory does not exist."""
    return str(tmp_path / "no-such-dir" / "banana.db")


@pytest.fixture
async def connection(db_path) -> AsyncSQLiteConnection:
    conn = AsyncSQLiteConnection(db_path)
    await run_migrations(conn)
    return conn


@pytest.fixture
def account_repo(connection) -> SQLiteAccountRepository:
    return SQLiteAccountRepository(connection)


@pytest.fixture
def banana_repo(connection) -> SQLiteBananaRepository:
    return SQLiteBananaRepository(connection)


@pytest.fixture
def make_account(account_repo):
    """Factory fixture: persist an account and return it as stored."""
    counter = {"n": 0}

    async def _make(**overrides) -> Account:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "email": f"user{n}@example.com",
            "display_name": f"User {n}",
            "provider": Provider.GITHUB,
            "provider_id": f"gh-{n}",
            "oracle_queries_reset_at": datetime.now(timezone.utc),
        }
        fields.update(overrides)
        account_id = await account_repo.save(Account(**fields))
        return await account_repo.get_by_id(account_id)

    return _make


@pytest.fixture
def poke_account(db_path):
    """Write account columns directly, e.g. to drain a quota."""
    def _poke(account_id: int, **columns) -> None:
        values = {k: to_iso(v) if isinstance(v, datetime) else v for k, v in columns.items()}
        assignments = ", ".join(f"{k} = ?" for k in values)
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                f"UPDATE accounts SET {assignments} WHERE id = ?", (*values.values(), account_id),
            )

    return _poke


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def settings(db_path) -> Settings:
    return Settings(
        db_path=db_path,
        jwt_secret="test-secret",
        frontend_url="http://localhost:3000",
        backend_url="http://testserver",
        rate_limit="1000 per minute",
    )


@pytest.fixture
def fake_oracle() -> FakeOracleClient:
    return FakeOracleClient()


@pytest.fixture
def fake_github() -> FakeOAuthProvider:
    return FakeOAuthProvider("github")


@pytest.fixture
def factory(settings, fake_oracle, fake_github) -> ServiceFactory:
    return ServiceFactory(settings, oracle=fake_oracle, oauth_providers={"github": fake_github})


@pytest.fixture
def client(settings, factory):
    app = create_app(settings, factory)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a local account through the API; returns (account_id, auth headers)."""
    counter = {"n": 0}

    def _register(email: str = None):
        counter["n"] += 1
        email = email or f"api-user{counter['n']}@example.com"
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": "bananas-are-great", "displayName": "Tester"},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        # Drop the session cookie so each caller authenticates with its token only
        client.cookies.clear()
        return body["user_id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register
