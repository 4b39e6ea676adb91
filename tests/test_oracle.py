"""
Tests for the Banana Oracle service.

Verifies that:
1. Each successful call spends exactly one query
2. A failed model call gives the query back
3. Nothing is spent for an unconfigured model or a blank question
4. Story prompts fall back to default theme, era and location
"""

import pytest

from application.services.entitlement import DAILY_QUERY_LIMIT, QUOTA_WINDOW, EntitlementService
from application.services.oracle import (
    DEFAULT_ERA,
    DEFAULT_LOCATION,
    DEFAULT_THEME,
    ORACLE_SYSTEM_PROMPT,
    OracleService,
)
from domain.exceptions import QuotaExhaustedError, UpstreamUnavailableError, ValidationFailure
from fakes import FakeOracleClient


@pytest.fixture
def entitlement(account_repo) -> EntitlementService:
    return EntitlementService(account_repo)


@pytest.fixture
def oracle_client() -> FakeOracleClient:
    return FakeOracleClient(reply="Peel carefully, seeker.")


@pytest.fixture
def oracle(oracle_client, entitlement) -> OracleService:
    return OracleService(oracle_client, entitlement)


async def _remaining(account_repo, account) -> int:
    return (await account_repo.get_by_id(account.id)).oracle_queries_remaining


# =============================================================================
# ask
# =============================================================================

async def test_ask_spends_one_query(oracle, oracle_client, make_account, account_repo):
    account = await make_account()

    answer = await oracle.ask(account, "Who invented the banana?")

    assert answer.answer == "Peel carefully, seeker."
    assert answer.queries_remaining == DAILY_QUERY_LIMIT - 1
    assert answer.model == "fake-oracle"
    assert await _remaining(account_repo, account) == DAILY_QUERY_LIMIT - 1

    call = oracle_client.calls[0]
    assert call["system"] == ORACLE_SYSTEM_PROMPT
    assert call["user"] == "Who invented the banana?"
    assert (call["temperature"], call["max_tokens"]) == (0.8, 500)


async def test_ask_blank_question_spends_nothing(oracle, oracle_client, make_account, account_repo):
    account = await make_account()

    with pytest.raises(ValidationFailure):
        await oracle.ask(account, "   ")

    assert oracle_client.calls == []
    assert await _remaining(account_repo, account) == DAILY_QUERY_LIMIT


async def test_ask_without_model_is_unavailable(entitlement, make_account, account_repo):
    oracle = OracleService(None, entitlement)
    account = await make_account()

    assert oracle.available is False
    with pytest.raises(UpstreamUnavailableError):
        await oracle.ask(account, "Hello?")
    assert await _remaining(account_repo, account) == DAILY_QUERY_LIMIT


async def test_failed_call_refunds_query(entitlement, make_account, account_repo):
    client = FakeOracleClient(fail=True)
    oracle = OracleService(client, entitlement)
    account = await make_account(oracle_queries_remaining=4)

    with pytest.raises(UpstreamUnavailableError):
        await oracle.ask(account, "Will this work?")

    assert len(client.calls) == 1
    assert await _remaining(account_repo, account) == 4


async def test_ask_when_exhausted_never_calls_model(oracle, oracle_client, make_account):
    account = await make_account(oracle_queries_remaining=0)

    with pytest.raises(QuotaExhaustedError) as excinfo:
        await oracle.ask(account, "One more?")

    assert oracle_client.calls == []
    assert excinfo.value.reset_at is not None


# =============================================================================
# generate_story
# =============================================================================

async def test_story_uses_defaults(oracle, oracle_client, make_account):
    account = await make_account()

    story = await oracle.generate_story(account)

    assert (story.theme, story.era, story.location) == (
        DEFAULT_THEME, DEFAULT_ERA, DEFAULT_LOCATION,
    )
    assert story.queries_remaining == DAILY_QUERY_LIMIT - 1
    call = oracle_client.calls[0]
    assert "mysterious discovery" in call["user"]
    assert "ancient times" in call["user"]
    assert "a tropical paradise" in call["user"]
    assert (call["temperature"], call["max_tokens"]) == (0.9, 600)


async def test_story_uses_given_values(oracle, oracle_client, make_account):
    account = await make_account()

    story = await oracle.generate_story(account, theme="heist", era="1920s", location="Havana")

    assert story.location == "Havana"
    assert "heist" in oracle_client.calls[0]["user"]


# =============================================================================
# status
# =============================================================================

async def test_status_reports_remaining_and_next_reset(oracle, make_account):
    account = await make_account(oracle_queries_remaining=3)

    status = await oracle.status(account)

    assert status.available is True
    assert status.queries_remaining == 3
    assert status.daily_limit == DAILY_QUERY_LIMIT
    assert status.reset_at == account.oracle_queries_reset_at + QUOTA_WINDOW
