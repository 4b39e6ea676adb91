"""
application.services.authentication - Token issuance and request authentication.

Handles JWT creation/verification, local registration and login with
bcrypt-hashed passwords, and resolving the credentials a request presents
to an account.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable

import bcrypt as _bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from domain.entities import Account, Provider, Role
from domain.models import Credential, CredentialKind, TokenClaims
from domain.ports import AccountRepository
from domain.exceptions import (
    AuthenticationError,
    DuplicateLoginError,
    TokenExpiredError,
    TokenInvalidError,
)
from application.dto import AuthToken, LoginRequest, RegisterRequest
from application.services.entitlement import DAILY_QUERY_LIMIT

logger = logging.getLogger(__name__)

_CREDENTIAL_ORDER = list(CredentialKind)


class AuthenticationService:
    """Handles token issuance, local login, and credential checks."""

    def __init__(
        self,
        account_repo: AccountRepository,
        jwt_secret: str,
        jwt_expiry_days: int = 7,
        jwt_algorithm: str = "HS256",
    ):
        self._account_repo = account_repo
        self._jwt_secret = jwt_secret
        self._jwt_expiry = timedelta(days=jwt_expiry_days)
        self._jwt_algorithm = jwt_algorithm
        # bcrypt is used directly (passlib is incompatible with bcrypt >= 4.0)

    # -- tokens -------------------------------------------------------------

    def issue_token(self, account: Account) -> str:
        expire = datetime.now(timezone.utc) + self._jwt_expiry
        payload = {
            "id": account.id,
            "email": account.email,
            "role": Role(account.role).value,
            "exp": expire,
        }
        return jwt.encode(payload, self._jwt_secret, algorithm=self._jwt_algorithm)

    def verify_token(self, token: str) -> TokenClaims:
        """Decode and validate a JWT.

        Raises:
            TokenExpiredError: if the token is past its expiry.
            TokenInvalidError: on a bad signature, malformed input or missing id.
        """
        try:
            payload = jwt.decode(token, self._jwt_secret, algorithms=[self._jwt_algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired. Please log in again.") from exc
        except JWTError as exc:
            raise TokenInvalidError(f"Token verification failed: {exc}") from exc

        if payload.get("id") is None:
            raise TokenInvalidError("Invalid token payload.")
        try:
            role = Role(payload.get("role", "user"))
        except ValueError as exc:
            raise TokenInvalidError("Invalid token payload.") from exc
        return TokenClaims(
            account_id=int(payload["id"]),
            email=payload.get("email", ""),
            role=role,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    # -- request authentication --------------------------------------------

    async def authenticate(self, credentials: Iterable[Credential]) -> Account:
        """Return the account behind the first credential that names a live one.

        A session is tried before a bearer token regardless of the order given.
        A stale session falls through; a bad token fails the request.

        Raises:
            AuthenticationError: if nothing usable was presented.
        """
        ordered = sorted(credentials, key=lambda c: _CREDENTIAL_ORDER.index(c.kind))
        for credential in ordered:
            if credential.kind is CredentialKind.SESSION:
                if not str(credential.value).isdigit():
                    continue
                account = await self._account_repo.get_by_id(int(credential.value))
                if account is not None:
                    return account
            elif credential.kind is CredentialKind.BEARER_TOKEN:
                claims = self.verify_token(credential.value)
                account = await self._account_repo.get_by_id(claims.account_id)
                if account is None:
                    raise AuthenticationError("User not found.")
                return account
        raise AuthenticationError("Please log in to access this resource.")

    # -- local accounts -----------------------------------------------------

    async def register(self, request: RegisterRequest) -> AuthToken:
        """Create a local account and return a token for it."""
        email = request.email.strip().lower()
        if await self._account_repo.get_by_email(email) is not None:
            raise DuplicateLoginError(f"Email '{email}' is already registered.")

        now = datetime.now(timezone.utc)
        account = Account(
            email=email,
            password_hash=_bcrypt.hashpw(request.password.encode(), _bcrypt.gensalt()).decode(),
            display_name=request.display_name or email.split("@")[0],
            provider=Provider.LOCAL,
            role=Role.USER,
            oracle_queries_remaining=DAILY_QUERY_LIMIT,
            oracle_queries_reset_at=now,
            created_at=now,
            last_login_at=now,
        )
        account.id = await self._account_repo.save(account)
        logger.info("Registered local account %d", account.id)
        return AuthToken(access_token=self.issue_token(account), account=account)

    async def login(self, request: LoginRequest) -> AuthToken:
        """Verify a local password and return a token."""
        account = await self._account_repo.get_by_email(request.email.strip().lower())
        if account is None or not account.password_hash:
            raise AuthenticationError("Invalid email or password.")

        if not _bcrypt.checkpw(request.password.encode(), account.password_hash.encode()):
            raise AuthenticationError("Invalid email or password.")

        now = datetime.now(timezone.utc)
        await self._account_repo.touch_last_login(account.id, now)
        account.last_login_at = now
        logger.info("Account %d logged in", account.id)
        return AuthToken(access_token=self.issue_token(account), account=account)
