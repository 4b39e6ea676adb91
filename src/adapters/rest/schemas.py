"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.entities import Account, Banana, NutritionFacts, Rarity, Taste
from application.dto import CatalogItem


class _CamelModel(BaseModel):
    """Accepts camelCase on the wire and snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Auth ---

class RegisterBody(_CamelModel):
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8)
    display_name: str = ""


class LoginBody(_CamelModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str


class AcceptTermsBody(_CamelModel):
    version: Optional[str] = None


# --- Bananas ---

# SQLite stores integers as signed 64-bit
_MAX_INT = 2**63 - 1

class NutritionFactsBody(_CamelModel):
    calories: Optional[float] = None
    potassium: Optional[str] = None
    fiber: Optional[str] = None
    sugar: Optional[str] = None


class BananaCreateBody(_CamelModel):
    name: str = Field(..., min_length=1)
    scientific_name: Optional[str] = None
    origin: str = Field(..., min_length=1)
    year_discovered: Optional[int] = Field(None, ge=-_MAX_INT - 1, le=_MAX_INT)
    invention_story: str = Field(..., min_length=1)
    fun_fact: Optional[str] = None
    color: str = "yellow"
    taste: Taste = Taste.SWEET
    rarity: Rarity = Rarity.COMMON
    image_url: Optional[str] = None
    nutrition_facts: Optional[NutritionFactsBody] = None
    cultural_significance: Optional[str] = None

    def to_entity(self) -> Banana:
        data = self.model_dump(exclude={"nutrition_facts"})
        facts = self.nutrition_facts.model_dump() if self.nutrition_facts else {}
        return Banana(**data, nutrition_facts=NutritionFacts(**facts))


# Columns that cannot be cleared with an explicit null
_REQUIRED_FIELDS = {"name", "origin", "invention_story", "color", "taste", "rarity"}


class BananaUpdateBody(_CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    scientific_name: Optional[str] = None
    origin: Optional[str] = Field(None, min_length=1)
    year_discovered: Optional[int] = Field(None, ge=-_MAX_INT - 1, le=_MAX_INT)
    invention_story: Optional[str] = Field(None, min_length=1)
    fun_fact: Optional[str] = None
    color: Optional[str] = None
    taste: Optional[Taste] = None
    rarity: Optional[Rarity] = None
    image_url: Optional[str] = None
    nutrition_facts: Optional[NutritionFactsBody] = None
    cultural_significance: Optional[str] = None

    def changed_fields(self) -> dict[str, Any]:
        """Fields the client actually sent, minus nulls for required columns."""
        fields = self.model_dump(exclude_unset=True)
        return {
            k: v for k, v in fields.items()
            if not (v is None and k in _REQUIRED_FIELDS)
        }


# --- Oracle ---

class AskBody(_CamelModel):
    question: str = ""


class StoryBody(_CamelModel):
    theme: Optional[str] = None
    era: Optional[str] = None
    location: Optional[str] = None


# --- Serializers ---

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def banana_to_json(banana: Banana, demo: bool = False) -> dict:
    facts = banana.nutrition_facts or NutritionFacts()
    data = {
        "_id": banana.id,
        "name": banana.name,
        "scientificName": banana.scientific_name,
        "origin": banana.origin,
        "yearDiscovered": banana.year_discovered,
        "inventionStory": banana.invention_story,
        "funFact": banana.fun_fact,
        "color": banana.color,
        "taste": Taste(banana.taste).value,
        "rarity": Rarity(banana.rarity).value,
        "imageUrl": banana.image_url,
        "nutritionFacts": {
            "calories": facts.calories,
            "potassium": facts.potassium,
            "fiber": facts.fiber,
            "sugar": facts.sugar,
        },
        "culturalSignificance": banana.cultural_significance,
        "createdAt": _iso(banana.created_at),
        "updatedAt": _iso(banana.updated_at),
    }
    if demo:
        data["_demo"] = True
    return data


def item_to_json(item: CatalogItem) -> dict:
    return banana_to_json(item.banana, demo=item.demo)


def account_to_json(account: Account, favorites: list[CatalogItem]) -> dict:
    return {
        "id": account.id,
        "email": account.email,
        "displayName": account.display_name,
        "avatar": account.avatar,
        "provider": account.provider.value,
        "role": account.role.value,
        "termsAccepted": account.terms_accepted,
        "favoriteBananas": [item_to_json(f) for f in favorites],
        "oracleQueriesRemaining": account.oracle_queries_remaining,
    }


def terms_status_to_json(account: Account) -> dict:
    return {
        "termsAccepted": account.terms_accepted,
        "termsVersion": account.terms_version,
        "termsAcceptedAt": _iso(account.terms_accepted_at),
    }
