"""
domain.models - Value objects passed between layers.

Unlike entities these have no identity of their own: OAuth profiles as
delivered by a provider, decoded token claims, presented credentials and
catalog filters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from domain.entities import Rarity, Role, Taste


@dataclass(frozen=True)
class OAuthProfile:
    """Profile handed back by an OAuth provider after the code exchange."""
    provider: str
    id: str
    emails: list[str] = field(default_factory=list)
    display_name: str = ""
    username: str = ""
    photos: list[str] = field(default_factory=list)

    @property
    def primary_email(self) -> Optional[str]:
        return self.emails[0] if self.emails else None

    @property
    def avatar(self) -> Optional[str]:
        return self.photos[0] if self.photos else None


@dataclass(frozen=True)
class TokenClaims:
    """Decoded payload of a signed access token."""
    account_id: int
    email: str
    role: Role
    expires_at: datetime


class CredentialKind(str, Enum):
    """Closed set of ways a request can prove who it is.

    Declaration order is evaluation order: a session wins over a token.
    """
    SESSION = "session"
    BEARER_TOKEN = "bearer_token"


@dataclass(frozen=True)
class Credential:
    kind: CredentialKind
    value: str


@dataclass(frozen=True)
class BananaFilter:
    rarity: Optional[Rarity] = None
    taste: Optional[Taste] = None
