"""Banana Oracle endpoints (metered; ask and story also need accepted terms)."""

from typing import Optional

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import Account
from adapters.rest.dependencies import get_current_account, get_factory, require_terms_accepted
from adapters.rest.schemas import AskBody, StoryBody

router = APIRouter(prefix="/api/oracle", tags=["oracle"])


@router.post("/ask")
async def ask(
    body: AskBody,
    account: Account = Depends(require_terms_accepted),
    factory: ServiceFactory = Depends(get_factory),
):
    result = await factory.create_oracle_service().ask(account, body.question)
    return {
        "question": result.question,
        "answer": result.answer,
        "queriesRemaining": result.queries_remaining,
        "model": result.model,
    }


@router.get("/status")
async def oracle_status(
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    status = await factory.create_oracle_service().status(account)
    return {
        "available": status.available,
        "queriesRemaining": status.queries_remaining,
        "dailyLimit": status.daily_limit,
        "resetAt": status.reset_at.isoformat() if status.reset_at else None,
    }


@router.post("/generate-story")
async def generate_story(
    body: Optional[StoryBody] = None,
    account: Account = Depends(require_terms_accepted),
    factory: ServiceFactory = Depends(get_factory),
):
    body = body or StoryBody()
    result = await factory.create_oracle_service().generate_story(
        account, body.theme, body.era, body.location,
    )
    return {
        "story": result.story,
        "theme": result.theme,
        "era": result.era,
        "location": result.location,
        "queriesRemaining": result.queries_remaining,
    }
