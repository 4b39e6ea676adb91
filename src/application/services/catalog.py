"""
application.services.catalog - Banana catalog with demo-data fallback.

Reads degrade gracefully: when the store is down or a query fails, the
fixed demo set is served instead and every such item is tagged as demo.
An empty result from a healthy store is returned as-is. Writes never
fall back.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any, Iterable, Optional

from domain.entities import Banana
from domain.exceptions import NotFoundError, ValidationFailure
from domain.models import BananaFilter
from domain.ports import BananaRepository, StoreProbe
from application.dto import CatalogItem, CatalogPage
from infrastructure.demo_data import DemoCatalog

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class CatalogService:
    """Browse and curate bananas."""

    def __init__(
        self,
        banana_repo: BananaRepository,
        probe: StoreProbe,
        demo: DemoCatalog,
        rng: Optional[random.Random] = None,
    ):
        self._banana_repo = banana_repo
        self._probe = probe
        self._demo = demo
        self._rng = rng or random.Random()

    # -- reads --------------------------------------------------------------

    async def list(
        self, filters: BananaFilter, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
    ) -> CatalogPage:
        page, limit = max(page, 1), max(limit, 1)
        if not await self._probe.ping():
            return self._demo_page(filters)

        try:
            bananas = await self._banana_repo.find(filters, (page - 1) * limit, limit)
            total = await self._banana_repo.count(filters)
        except Exception as exc:
            logger.warning("Catalog listing failed, serving demo data: %s", exc)
            return self._demo_page(filters)

        return CatalogPage(
            items=[CatalogItem(b) for b in bananas],
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
        )

    async def get(self, banana_id: str) -> CatalogItem:
        if self._demo.is_demo_id(banana_id):
            banana = self._demo.get(banana_id)
            if banana is not None:
                return CatalogItem(banana, demo=True)

        if not await self._probe.ping():
            return CatalogItem(self._demo.get(banana_id) or self._demo.random(), demo=True)

        try:
            banana = await self._banana_repo.get_by_id(banana_id)
        except Exception as exc:
            logger.warning("Lookup of banana %r failed, serving demo data: %s", banana_id, exc)
            return CatalogItem(self._demo.random(), demo=True)

        if banana is None:
            return CatalogItem(self._demo.random(), demo=True)
        return CatalogItem(banana)

    async def random(self) -> CatalogItem:
        if not await self._probe.ping():
            return CatalogItem(self._demo.random(), demo=True)

        try:
            total = await self._banana_repo.count(BananaFilter())
            banana = None
            if total > 0:
                banana = await self._banana_repo.get_at_offset(self._rng.randrange(total))
        except Exception as exc:
            logger.warning("Random banana lookup failed, serving demo data: %s", exc)
            return CatalogItem(self._demo.random(), demo=True)

        if banana is None:
            return CatalogItem(self._demo.random(), demo=True)
        return CatalogItem(banana)

    async def lookup_many(self, refs: Iterable[str]) -> list[CatalogItem]:
        """Resolve favorite references, dropping any that no longer resolve."""
        items = []
        for ref in refs:
            if self._demo.is_demo_id(ref):
                banana = self._demo.get(ref)
                if banana is not None:
                    items.append(CatalogItem(banana, demo=True))
                continue
            try:
                banana = await self._banana_repo.get_by_id(ref)
            except Exception as exc:
                logger.debug("Skipping favorite %r: %s", ref, exc)
                continue
            if banana is not None:
                items.append(CatalogItem(banana))
        return items

    # -- writes -------------------------------------------------------------

    async def create(self, banana: Banana) -> Banana:
        banana_id = await self._banana_repo.save(banana)
        created = await self._banana_repo.get_by_id(banana_id)
        logger.info("Created banana %s (%s)", banana_id, banana.name)
        return created

    async def update(self, banana_id: str, fields: dict[str, Any]) -> Banana:
        try:
            updated = await self._banana_repo.update(banana_id, fields)
        except ValueError as exc:
            raise ValidationFailure(str(exc)) from exc
        if updated is None:
            raise NotFoundError(f"Banana {banana_id} not found.")
        logger.info("Updated banana %s", banana_id)
        return updated

    async def delete(self, banana_id: str) -> None:
        deleted = await self._banana_repo.delete(banana_id)
        if not deleted:
            raise NotFoundError(f"Banana {banana_id} not found.")
        logger.info("Deleted banana %s", banana_id)

    async def seed(self, bananas: Iterable[Banana]) -> int:
        """Replace the whole catalog with ``bananas``. Returns how many were inserted."""
        removed = await self._banana_repo.delete_all()
        logger.info("Cleared %d existing banana(s)", removed)
        count = 0
        for banana in bananas:
            await self._banana_repo.save(banana)
            count += 1
        return count

    # -- helpers ------------------------------------------------------------

    def _demo_page(self, filters: BananaFilter) -> CatalogPage:
        bananas = self._demo.filter(filters)
        return CatalogPage(
            items=[CatalogItem(b, demo=True) for b in bananas],
            page=1,
            limit=len(bananas),
            total=len(bananas),
            pages=1,
            demo=True,
        )
