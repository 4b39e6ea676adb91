"""Tests for mapping OAuth profiles to accounts."""

import pytest

from application.services.entitlement import DAILY_QUERY_LIMIT
from application.services.identity import IdentityService
from domain.entities import Provider, Role
from domain.exceptions import ProviderNotEnabledError
from domain.models import OAuthProfile


@pytest.fixture
def identity(account_repo) -> IdentityService:
    return IdentityService(account_repo, enabled_providers={"google", "github"})


def _profile(provider="github", id="1001", emails=("octo@example.com",), **kw) -> OAuthProfile:
    return OAuthProfile(provider=provider, id=id, emails=list(emails), **kw)


async def test_first_login_creates_account(identity):
    account = await identity.resolve(_profile(display_name="Octo Cat", photos=["a.png"]))

    assert account.id is not None
    assert account.email == "octo@example.com"
    assert account.display_name == "Octo Cat"
    assert account.avatar == "a.png"
    assert account.provider == Provider.GITHUB
    assert account.provider_id == "1001"
    assert account.role == Role.USER
    assert account.terms_accepted is False
    assert account.oracle_queries_remaining == DAILY_QUERY_LIMIT


async def test_repeat_login_returns_same_account(identity, account_repo):
    first = await identity.resolve(_profile())
    second = await identity.resolve(_profile())

    assert second.id == first.id
    assert await account_repo.get_by_email("octo@example.com") is not None
    assert (await account_repo.get_by_id(first.id + 1)) is None


async def test_email_match_is_case_insensitive(identity):
    first = await identity.resolve(_profile(emails=["Octo@Example.com"]))
    second = await identity.resolve(_profile(id="other", emails=["octo@example.COM"]))
    assert second.id == first.id


async def test_provider_id_match_wins_over_email_match(identity, make_account):
    linked = await make_account(email="a@example.com", provider=Provider.GITHUB, provider_id="7")
    await make_account(email="b@example.com", provider=Provider.GOOGLE, provider_id="g-1")

    account = await identity.resolve(_profile(id="7", emails=["b@example.com"]))

    assert account.id == linked.id


async def test_login_from_new_provider_relinks_account(identity, make_account, account_repo):
    existing = await make_account(
        email="shared@example.com", provider=Provider.GOOGLE, provider_id="g-9",
    )

    account = await identity.resolve(_profile(id="gh-9", emails=["shared@example.com"]))

    assert account.id == existing.id
    stored = await account_repo.get_by_id(existing.id)
    assert stored.provider == Provider.GITHUB
    assert stored.provider_id == "gh-9"


async def test_login_stamps_last_login(identity, make_account, account_repo):
    existing = await make_account(provider=Provider.GITHUB, provider_id="1001")
    before = existing.last_login_at

    await identity.resolve(_profile(id="1001"))

    assert (await account_repo.get_by_id(existing.id)).last_login_at >= before


async def test_missing_email_is_synthesized(identity):
    account = await identity.resolve(_profile(emails=(), username="octocat"))
    assert account.email == "octocat@github.local"
    assert account.display_name == "octocat"


async def test_disabled_provider_is_rejected(account_repo):
    identity = IdentityService(account_repo, enabled_providers={"github"})
    with pytest.raises(ProviderNotEnabledError):
        await identity.resolve(_profile(provider="google"))
