"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations. Application services depend only
on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from domain.entities import Account, Banana
from domain.models import BananaFilter, OAuthProfile


# ---------------------------------------------------------------------------
# Repository Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class AccountRepository(Protocol):
    """Persistence for Account entities."""

    async def get_by_id(self, account_id: int) -> Account | None: ...
    async def get_by_email(self, email: str) -> Account | None: ...
    async def get_by_provider(self, provider: str, provider_id: str) -> Account | None: ...
    async def save(self, account: Account) -> int: ...
    async def relink_provider(self, account_id: int, provider: str, provider_id: str) -> None: ...
    async def touch_last_login(self, account_id: int, when: datetime) -> None: ...
    async def accept_terms(self, account_id: int, version: str, when: datetime) -> None: ...
    async def reset_quota(
        self, account_id: int, limit: int, now: datetime, due_before: datetime,
    ) -> bool: ...
    async def try_consume_query(self, account_id: int) -> bool: ...
    async def refund_query(self, account_id: int, limit: int) -> None: ...
    async def add_favorite(self, account_id: int, banana_ref: str) -> list[str]: ...
    async def remove_favorite(self, account_id: int, banana_ref: str) -> list[str]: ...


@runtime_checkable
class BananaRepository(Protocol):
    """Persistence for catalog items. Ids are the string form of the row id."""

    async def find(self, filters: BananaFilter, offset: int, limit: int) -> list[Banana]: ...
    async def count(self, filters: BananaFilter) -> int: ...
    async def get_by_id(self, banana_id: str) -> Banana | None: ...
    async def get_at_offset(self, offset: int) -> Banana | None: ...
    async def save(self, banana: Banana) -> str: ...
    async def update(self, banana_id: str, fields: dict) -> Banana | None: ...
    async def delete(self, banana_id: str) -> bool: ...
    async def delete_all(self) -> int: ...


@runtime_checkable
class StoreProbe(Protocol):
    """Liveness signal for the primary store."""

    async def ping(self) -> bool: ...


# ---------------------------------------------------------------------------
# External Collaborator Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class OracleClientPort(Protocol):
    """Language model accepting a system + user message pair."""

    model_name: str

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


@runtime_checkable
class OAuthProviderPort(Protocol):
    """Authorization-code OAuth provider."""

    name: str

    def authorization_url(self, redirect_uri: str, state: str) -> str: ...
    async def fetch_profile(self, code: str, redirect_uri: str) -> OAuthProfile: ...
