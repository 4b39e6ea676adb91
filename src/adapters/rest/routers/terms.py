"""Public Terms and Conditions documents."""

from fastapi import APIRouter

from application.services.terms import (
    TERMS_LAST_UPDATED,
    TERMS_SUMMARY,
    TERMS_VERSION,
    privacy_document,
    terms_document,
)

router = APIRouter(prefix="/api/terms", tags=["terms"])


@router.get("")
async def get_terms():
    return terms_document()


@router.get("/version")
async def get_version():
    return {"version": TERMS_VERSION, "lastUpdated": TERMS_LAST_UPDATED}


@router.get("/summary")
async def get_summary():
    return {"version": TERMS_VERSION, "summary": TERMS_SUMMARY}


@router.get("/privacy")
async def get_privacy():
    return privacy_document()
