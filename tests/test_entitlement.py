"""
Tests for the daily Oracle allowance.

Verifies that:
1. The allowance refills only once a full rolling window has passed
2. Resetting is idempotent for a fixed clock
3. An exhausted allowance raises without touching the stored counter
4. Concurrent consumers can never overspend
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from application.services.entitlement import (
    DAILY_QUERY_LIMIT,
    QUOTA_WINDOW,
    EntitlementService,
)
from domain.exceptions import QuotaExhaustedError


NOW = datetime(2025, 12, 9, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def entitlement(account_repo) -> EntitlementService:
    return EntitlementService(account_repo, clock=lambda: NOW)


async def test_resets_after_full_window(entitlement, make_account, account_repo):
    account = await make_account(
        oracle_queries_remaining=0,
        oracle_queries_reset_at=NOW - QUOTA_WINDOW - timedelta(minutes=1),
    )

    account = await entitlement.check_and_reset(account, NOW)

    assert account.oracle_queries_remaining == DAILY_QUERY_LIMIT
    assert account.oracle_queries_reset_at == NOW
    stored = await account_repo.get_by_id(account.id)
    assert stored.oracle_queries_remaining == DAILY_QUERY_LIMIT
    assert stored.oracle_queries_reset_at == NOW


async def test_resets_exactly_at_window_boundary(entitlement, make_account):
    account = await make_account(
        oracle_queries_remaining=2, oracle_queries_reset_at=NOW - QUOTA_WINDOW,
    )
    account = await entitlement.check_and_reset(account, NOW)
    assert account.oracle_queries_remaining == DAILY_QUERY_LIMIT


async def test_no_reset_inside_window(entitlement, make_account, account_repo):
    started = NOW - timedelta(hours=23)
    account = await make_account(oracle_queries_remaining=3, oracle_queries_reset_at=started)

    account = await entitlement.check_and_reset(account, NOW)

    assert account.oracle_queries_remaining == 3
    stored = await account_repo.get_by_id(account.id)
    assert stored.oracle_queries_remaining == 3
    assert stored.oracle_queries_reset_at == started


async def test_check_and_reset_is_idempotent(entitlement, make_account, account_repo):
    account = await make_account(
        oracle_queries_remaining=0, oracle_queries_reset_at=NOW - timedelta(days=2),
    )
    await entitlement.check_and_reset(account, NOW)
    await entitlement.consume(await account_repo.get_by_id(account.id))

    again = await entitlement.check_and_reset(await account_repo.get_by_id(account.id), NOW)

    assert again.oracle_queries_remaining == DAILY_QUERY_LIMIT - 1
    assert again.oracle_queries_reset_at == NOW


async def test_consume_decrements(entitlement, make_account):
    account = await make_account(oracle_queries_remaining=5)
    account = await entitlement.consume(account)
    assert account.oracle_queries_remaining == 4


async def test_consume_when_exhausted_raises_without_mutation(
    entitlement, make_account, account_repo,
):
    started = NOW - timedelta(hours=1)
    account = await make_account(oracle_queries_remaining=0, oracle_queries_reset_at=started)

    with pytest.raises(QuotaExhaustedError) as exc_info:
        await entitlement.consume(account)

    assert exc_info.value.reset_at == started + QUOTA_WINDOW
    stored = await account_repo.get_by_id(account.id)
    assert stored.oracle_queries_remaining == 0


async def test_consume_rejects_stale_copy(entitlement, make_account, account_repo):
    account = await make_account(oracle_queries_remaining=1)
    stale = await account_repo.get_by_id(account.id)

    await entitlement.consume(account)

    with pytest.raises(QuotaExhaustedError):
        await entitlement.consume(stale)
    assert (await account_repo.get_by_id(account.id)).oracle_queries_remaining == 0


async def test_concurrent_consumers_never_overspend(entitlement, make_account, account_repo):
    account = await make_account(oracle_queries_remaining=3)
    copies = [await account_repo.get_by_id(account.id) for _ in range(5)]

    results = await asyncio.gather(
        *(entitlement.consume(copy) for copy in copies), return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, QuotaExhaustedError)]
    assert len(failures) == 2
    assert (await account_repo.get_by_id(account.id)).oracle_queries_remaining == 0


async def test_refund_is_capped_at_limit(entitlement, make_account):
    account = await make_account(oracle_queries_remaining=DAILY_QUERY_LIMIT)
    account = await entitlement.refund(account)
    assert account.oracle_queries_remaining == DAILY_QUERY_LIMIT


async def test_refund_returns_one_query(entitlement, make_account):
    account = await make_account(oracle_queries_remaining=4)
    account = await entitlement.refund(account)
    assert account.oracle_queries_remaining == 5


async def test_status_reports_next_reset(entitlement, make_account):
    started = NOW - timedelta(hours=2)
    account = await make_account(oracle_queries_remaining=7, oracle_queries_reset_at=started)

    status = await entitlement.status(account, available=True)

    assert status.available is True
    assert status.queries_remaining == 7
    assert status.daily_limit == DAILY_QUERY_LIMIT
    assert status.reset_at == started + QUOTA_WINDOW
