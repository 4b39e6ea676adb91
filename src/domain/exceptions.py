"""
domain.exceptions - Custom exception hierarchy for the banana API.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed. The REST adapter maps each class
to an HTTP status and a machine-readable error code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class RepositoryError(DomainError):
    """Raised when a database operation fails."""


class AuthenticationError(DomainError):
    """Raised when no usable credential was presented."""


class TokenInvalidError(AuthenticationError):
    """Raised on a malformed token or a signature mismatch."""


class TokenExpiredError(AuthenticationError):
    """Raised when a token is past its expiry."""


class TermsNotAcceptedError(DomainError):
    """Raised when a gated feature is used before accepting the terms."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class ValidationFailure(DomainError):
    """Raised on bad input shape or an enum violation."""


class DuplicateLoginError(DomainError):
    """Raised when registering an email that already has an account."""


class ProviderNotEnabledError(DomainError):
    """Raised when an OAuth provider is not configured for this deployment."""


class UpstreamUnavailableError(DomainError):
    """Raised when the database or the language model cannot be reached."""


class StoreUnavailableError(RepositoryError, UpstreamUnavailableError):
    """Raised when the database file cannot be opened."""


class QuotaExhaustedError(DomainError):
    """Raised when an account has no Oracle queries left in its window."""

    def __init__(self, message: str, reset_at: Optional[datetime] = None):
        super().__init__(message)
        self.reset_at = reset_at
