"""Per-account favorite bananas, kept in the order they were added."""

from __future__ import annotations

import logging

from domain.entities import Account
from domain.ports import AccountRepository
from application.dto import CatalogItem
from application.services.catalog import CatalogService

logger = logging.getLogger(__name__)


class FavoritesService:
    def __init__(self, account_repo: AccountRepository, catalog: CatalogService):
        self._account_repo = account_repo
        self._catalog = catalog

    async def add(self, account: Account, banana_id: str) -> list[str]:
        favorites = await self._account_repo.add_favorite(account.id, banana_id)
        account.favorite_bananas = favorites
        return favorites

    async def remove(self, account: Account, banana_id: str) -> list[str]:
        favorites = await self._account_repo.remove_favorite(account.id, banana_id)
        account.favorite_bananas = favorites
        return favorites

    async def resolve(self, account: Account) -> list[CatalogItem]:
        """Favorites as catalog items; refs that no longer resolve are skipped."""
        return await self._catalog.lookup_many(account.favorite_bananas)
