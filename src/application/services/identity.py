"""
application.services.identity - Map an OAuth profile to exactly one account.

Lookup is deterministic: an existing (provider, provider id) link wins, and
only when there is none is the account matched by email. A match by email
from a different provider re-links the account to the presenting provider.
That keeps one account per email, but it also means whoever controls the
email at the new provider takes the account over.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable

from domain.entities import Account, Provider, Role
from domain.exceptions import ProviderNotEnabledError
from domain.models import OAuthProfile
from domain.ports import AccountRepository
from application.services.entitlement import DAILY_QUERY_LIMIT

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IdentityService:
    """Find-or-create accounts for OAuth logins."""

    def __init__(
        self,
        account_repo: AccountRepository,
        enabled_providers: Iterable[str],
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._account_repo = account_repo
        self._enabled = frozenset(enabled_providers)
        self._clock = clock

    @property
    def enabled_providers(self) -> frozenset[str]:
        return self._enabled

    def ensure_enabled(self, provider: str) -> None:
        if provider not in self._enabled:
            raise ProviderNotEnabledError(f"OAuth provider '{provider}' is not enabled.")

    async def resolve(self, profile: OAuthProfile) -> Account:
        """Return the account for ``profile``, creating it on first login.

        Raises:
            ProviderNotEnabledError: if the profile's provider is not configured.
            RepositoryError: if the store rejects the write. Not retried.
        """
        self.ensure_enabled(profile.provider)
        provider = profile.provider
        email = profile.primary_email or f"{profile.username or profile.id}@{provider}.local"
        now = self._clock()

        account = await self._account_repo.get_by_provider(provider, profile.id)
        if account is None:
            account = await self._account_repo.get_by_email(email)

        if account is not None:
            if account.provider != provider:
                logger.warning(
                    "Re-linking account %d from %s to %s",
                    account.id, account.provider.value, provider,
                )
                await self._account_repo.relink_provider(account.id, provider, profile.id)
                account.provider = Provider(provider)
                account.provider_id = profile.id
            await self._account_repo.touch_last_login(account.id, now)
            account.last_login_at = now
            return account

        account = Account(
            email=email.lower(),
            display_name=profile.display_name or profile.username or email.split("@")[0],
            avatar=profile.avatar,
            provider=Provider(provider),
            provider_id=profile.id,
            role=Role.USER,
            oracle_queries_remaining=DAILY_QUERY_LIMIT,
            oracle_queries_reset_at=now,
            created_at=now,
            last_login_at=now,
        )
        account.id = await self._account_repo.save(account)
        return account
