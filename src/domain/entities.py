"""
domain.entities - Persistence-aware types (have IDs, timestamps).

Decoupled from any persistence strategy: no SQL concerns, no DB imports.
Timestamps are set by the repository implementations and services, not by
the entities themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Provider(str, Enum):
    LOCAL = "local"
    GOOGLE = "google"
    GITHUB = "github"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Taste(str, Enum):
    SWEET = "sweet"
    TANGY = "tangy"
    MILD = "mild"
    RICH = "rich"
    TROPICAL = "tropical"


class Rarity(str, Enum):
    """Ordered common < uncommon < rare < legendary."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        return list(Rarity).index(self)


@dataclass
class NutritionFacts:
    calories: Optional[float] = None
    potassium: Optional[str] = None
    fiber: Optional[str] = None
    sugar: Optional[str] = None


@dataclass
class Banana:
    """A catalog item. Demo items carry string ids such as 'mock-3'."""
    id: Optional[str] = None
    name: str = ""
    scientific_name: Optional[str] = None
    origin: str = ""
    year_discovered: Optional[int] = None  # negative = BCE
    invention_story: str = ""
    fun_fact: Optional[str] = None
    color: str = "yellow"
    taste: Taste = Taste.SWEET
    rarity: Rarity = Rarity.COMMON
    image_url: Optional[str] = None
    nutrition_facts: NutritionFacts = field(default_factory=NutritionFacts)
    cultural_significance: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Account:
    """A user account, created on first OAuth login or local registration."""
    id: Optional[int] = None
    email: str = ""
    password_hash: Optional[str] = None
    display_name: str = ""
    avatar: Optional[str] = None
    provider: Provider = Provider.LOCAL
    provider_id: Optional[str] = None
    role: Role = Role.USER
    terms_accepted: bool = False
    terms_accepted_at: Optional[datetime] = None
    terms_version: Optional[str] = None
    favorite_bananas: list[str] = field(default_factory=list)
    oracle_queries_remaining: int = 10
    oracle_queries_reset_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
