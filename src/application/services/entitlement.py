"""
application.services.entitlement - Daily Oracle query allowance.

Each account gets DAILY_QUERY_LIMIT queries per rolling window. The window
is anchored at the last reset, not at calendar midnight. All counter
changes go through conditional repository updates, so the stored value
stays within [0, DAILY_QUERY_LIMIT] however many requests race.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from domain.entities import Account
from domain.exceptions import NotFoundError, QuotaExhaustedError
from domain.ports import AccountRepository
from application.dto import QuotaStatus

logger = logging.getLogger(__name__)

DAILY_QUERY_LIMIT = 10
QUOTA_WINDOW = timedelta(days=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntitlementService:
    """Reset, consume and refund Oracle queries for an account."""

    def __init__(
        self,
        account_repo: AccountRepository,
        daily_limit: int = DAILY_QUERY_LIMIT,
        window: timedelta = QUOTA_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._account_repo = account_repo
        self._daily_limit = daily_limit
        self._window = window
        self._clock = clock

    @property
    def daily_limit(self) -> int:
        return self._daily_limit

    def next_reset(self, account: Account) -> Optional[datetime]:
        if account.oracle_queries_reset_at is None:
            return None
        return account.oracle_queries_reset_at + self._window

    async def check_and_reset(self, account: Account, now: Optional[datetime] = None) -> Account:
        """Refill the allowance if a full window has passed since the last reset.

        Calling this twice with the same ``now`` changes nothing the second time.
        """
        now = now or self._clock()
        window_start = account.oracle_queries_reset_at
        if window_start is not None and now < window_start + self._window:
            return account

        due_before = now - self._window
        if await self._account_repo.reset_quota(account.id, self._daily_limit, now, due_before):
            logger.info("Oracle quota reset for account %d", account.id)
            account.oracle_queries_remaining = self._daily_limit
            account.oracle_queries_reset_at = now
            return account
        # Someone else reset it first
        return await self._reload(account)

    async def consume(self, account: Account) -> Account:
        """Spend one query.

        Raises:
            QuotaExhaustedError: if nothing is left; the stored counter is untouched.
        """
        if account.oracle_queries_remaining <= 0 or not await self._account_repo.try_consume_query(account.id):
            raise QuotaExhaustedError(
                f"You have used all {self._daily_limit} free Oracle queries for today.",
                reset_at=self.next_reset(account),
            )
        return await self._reload(account)

    async def refund(self, account: Account) -> Account:
        """Give back one query reserved for a call that did not complete."""
        await self._account_repo.refund_query(account.id, self._daily_limit)
        logger.info("Refunded one Oracle query to account %d", account.id)
        return await self._reload(account)

    async def status(self, account: Account, available: bool) -> QuotaStatus:
        account = await self.check_and_reset(account)
        return QuotaStatus(
            available=available,
            queries_remaining=account.oracle_queries_remaining,
            daily_limit=self._daily_limit,
            reset_at=self.next_reset(account),
        )

    async def _reload(self, account: Account) -> Account:
        fresh = await self._account_repo.get_by_id(account.id)
        if fresh is None:
            raise NotFoundError(f"Account {account.id} no longer exists.")
        return fresh
