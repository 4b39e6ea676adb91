"""HTTP tests for OAuth login, local accounts, sessions and the terms endpoints."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from adapters.rest.app import create_app
from factory import ServiceFactory
from infrastructure.config import Settings


@pytest.fixture
def down_client(down_db_path, fake_oracle, fake_github):
    settings = Settings(
        db_path=down_db_path,
        jwt_secret="test-secret",
        frontend_url="http://localhost:3000",
        backend_url="http://testserver",
        rate_limit="1000 per minute",
    )
    factory = ServiceFactory(settings, oracle=fake_oracle, oauth_providers={"github": fake_github})
    with TestClient(create_app(settings, factory)) as test_client:
        yield test_client


def _start_github_login(client) -> str:
    response = client.get("/api/auth/github", follow_redirects=False)
    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "auth.example.com"
    query = parse_qs(location.query)
    assert query["redirect_uri"] == ["http://testserver/api/auth/github/callback"]
    return query["state"][0]


# =============================================================================
# OAuth
# =============================================================================

def test_oauth_login_redirects_with_token(client, fake_github):
    state = _start_github_login(client)

    response = client.get(
        "/api/auth/github/callback",
        params={"code": "abc", "state": state},
        follow_redirects=False,
    )

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert f"{location.scheme}://{location.netloc}" == "http://localhost:3000"
    assert location.path == "/auth/callback"
    query = parse_qs(location.query)
    assert query["provider"] == ["github"]
    assert query["token"][0]
    assert fake_github.codes == ["abc"]

    # The session cookie alone now identifies the caller
    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "octo@example.com"
    assert me.json()["provider"] == "github"

    # And so does the token handed to the frontend
    client.cookies.clear()
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {query['token'][0]}"})
    assert me.json()["displayName"] == "Octo Cat"


def test_oauth_callback_with_wrong_state_fails(client, fake_github):
    _start_github_login(client)

    response = client.get(
        "/api/auth/github/callback",
        params={"code": "abc", "state": "forged"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "http://localhost:3000/login?error=github_failed"
    assert fake_github.codes == []


def test_oauth_callback_without_code_fails(client):
    state = _start_github_login(client)
    response = client.get(
        "/api/auth/github/callback", params={"state": state}, follow_redirects=False,
    )
    assert response.headers["location"].endswith("/login?error=github_failed")


def test_oauth_provider_failure_redirects_to_login(client, fake_github):
    fake_github.fail = True
    state = _start_github_login(client)

    response = client.get(
        "/api/auth/github/callback",
        params={"code": "abc", "state": state},
        follow_redirects=False,
    )

    assert response.headers["location"].endswith("/login?error=github_failed")


def test_oauth_callback_with_database_down_redirects_to_login(down_client, fake_github):
    state = _start_github_login(down_client)

    response = down_client.get(
        "/api/auth/github/callback",
        params={"code": "abc", "state": state},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "http://localhost:3000/login?error=github_failed"
    assert fake_github.codes == ["abc"]


def test_disabled_provider_is_not_found(client):
    response = client.get("/api/auth/google", follow_redirects=False)
    assert response.status_code == 404
    assert response.json()["error"] == "PROVIDER_NOT_ENABLED"


# =============================================================================
# Local accounts and sessions
# =============================================================================

def test_register_sets_session(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "new@example.com", "password": "long-enough", "displayName": "New"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "user"

    me = client.get("/api/auth/me").json()
    assert me["id"] == body["user_id"]
    assert me["displayName"] == "New"
    assert me["termsAccepted"] is False
    assert me["oracleQueriesRemaining"] == 10


def test_register_twice_conflicts(client, register):
    register("twice@example.com")
    response = client.post(
        "/api/auth/register", json={"email": "twice@example.com", "password": "long-enough"},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "CONFLICT"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": "long-enough"},
        {"email": "short@example.com", "password": "short"},
    ],
)
def test_register_rejects_bad_input(client, payload):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_FAILED"


def test_login_and_logout(client, register):
    register("login@example.com")

    bad = client.post(
        "/api/auth/login", json={"email": "login@example.com", "password": "wrong-password"},
    )
    assert bad.status_code == 401

    good = client.post(
        "/api/auth/login", json={"email": "login@example.com", "password": "bananas-are-great"},
    )
    assert good.status_code == 200
    assert client.get("/api/auth/me").status_code == 200

    assert client.post("/api/auth/logout").json() == {"message": "Logged out successfully"}
    assert client.get("/api/auth/me").status_code == 401


# =============================================================================
# Terms
# =============================================================================

def test_accept_and_check_terms(client, register):
    _, headers = register()

    before = client.get("/api/auth/check-terms", headers=headers).json()
    assert before == {"termsAccepted": False, "termsVersion": None, "termsAcceptedAt": None}

    accepted = client.post("/api/auth/accept-terms", headers=headers)
    assert accepted.status_code == 200
    assert accepted.json()["termsVersion"] == "1.0"

    client.post("/api/auth/accept-terms", json={"version": "2.0"}, headers=headers)
    after = client.get("/api/auth/check-terms", headers=headers).json()
    assert after["termsAccepted"] is True
    assert after["termsVersion"] == "2.0"
    assert after["termsAcceptedAt"]


def test_public_terms_documents(client):
    terms = client.get("/api/terms").json()
    assert terms["version"] == "1.0"
    assert len(terms["sections"]) == 10

    assert client.get("/api/terms/version").json() == {
        "version": "1.0", "lastUpdated": "2025-12-09",
    }
    assert client.get("/api/terms/summary").json()["summary"]
    assert len(client.get("/api/terms/privacy").json()["sections"]) == 5
