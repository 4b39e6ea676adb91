"""Banana catalog endpoints, plus per-account favorites."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from factory import ServiceFactory
from domain.entities import Account, Rarity, Taste
from domain.models import BananaFilter
from adapters.rest.dependencies import get_current_account, get_factory
from adapters.rest.schemas import (
    BananaCreateBody,
    BananaUpdateBody,
    banana_to_json,
    item_to_json,
)

router = APIRouter(prefix="/api/banana", tags=["bananas"])


@router.get("")
async def list_bananas(
    rarity: Optional[Rarity] = None,
    taste: Optional[Taste] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    factory: ServiceFactory = Depends(get_factory),
):
    catalog = factory.create_catalog_service()
    result = await catalog.list(BananaFilter(rarity=rarity, taste=taste), page, limit)
    body = {
        "bananas": [item_to_json(item) for item in result.items],
        "pagination": {
            "page": result.page,
            "limit": result.limit,
            "total": result.total,
            "pages": result.pages,
        },
    }
    if result.demo:
        body["_demo"] = True
    return body


@router.get("/random")
async def random_banana(factory: ServiceFactory = Depends(get_factory)):
    item = await factory.create_catalog_service().random()
    return item_to_json(item)


@router.get("/{banana_id}")
async def get_banana(banana_id: str, factory: ServiceFactory = Depends(get_factory)):
    item = await factory.create_catalog_service().get(banana_id)
    return item_to_json(item)


@router.post("", status_code=201)
async def create_banana(
    body: BananaCreateBody,
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    banana = await factory.create_catalog_service().create(body.to_entity())
    return banana_to_json(banana)


@router.put("/{banana_id}")
async def update_banana(
    banana_id: str,
    body: BananaUpdateBody,
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    banana = await factory.create_catalog_service().update(banana_id, body.changed_fields())
    return banana_to_json(banana)


@router.delete("/{banana_id}")
async def delete_banana(
    banana_id: str,
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    await factory.create_catalog_service().delete(banana_id)
    return {"message": "Banana deleted successfully"}


@router.post("/{banana_id}/favorite")
async def add_favorite(
    banana_id: str,
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    favorites = await factory.create_favorites_service().add(account, banana_id)
    return {"message": "Banana added to favorites", "favorites": favorites}


@router.delete("/{banana_id}/favorite")
async def remove_favorite(
    banana_id: str,
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    favorites = await factory.create_favorites_service().remove(account, banana_id)
    return {"message": "Banana removed from favorites", "favorites": favorites}
