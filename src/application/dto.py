"""
application.dto - Data Transfer Objects for service input/output.

These are the structured results that services return to callers
(REST endpoints, CLI adapters).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from domain.entities import Account, Banana


@dataclass(frozen=True)
class QuotaStatus:
    """Oracle entitlement snapshot for one account."""
    available: bool
    queries_remaining: int
    daily_limit: int
    reset_at: Optional[datetime]


@dataclass(frozen=True)
class CatalogItem:
    """A banana plus whether it came from the demo set."""
    banana: Banana
    demo: bool = False


@dataclass(frozen=True)
class CatalogPage:
    items: list[CatalogItem] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0
    pages: int = 0
    demo: bool = False


@dataclass(frozen=True)
class OracleAnswer:
    question: str
    answer: str
    queries_remaining: int
    model: str


@dataclass(frozen=True)
class OracleStory:
    story: str
    theme: str
    era: str
    location: str
    queries_remaining: int


@dataclass(frozen=True)
class RegisterRequest:
    """Input for local account registration."""
    email: str
    password: str
    display_name: str = ""


@dataclass(frozen=True)
class LoginRequest:
    """Input for local login."""
    email: str
    password: str


@dataclass(frozen=True)
class AuthToken:
    """JWT token response after successful register/login."""
    access_token: str
    account: Account
    token_type: str = "bearer"
