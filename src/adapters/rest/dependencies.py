"""
Shared FastAPI dependencies.

- get_factory(): returns the ServiceFactory attached to the running app.
- get_current_account(): session cookie or JWT bearer token → Account.
- require_terms_accepted(): get_current_account() plus the terms gate.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from factory import ServiceFactory
from domain.entities import Account
from domain.models import Credential, CredentialKind
from application.services.terms import TermsService

SESSION_ACCOUNT_KEY = "account_id"
SESSION_OAUTH_STATE_KEY = "oauth_state"


def get_factory(request: Request) -> ServiceFactory:
    factory = getattr(request.app.state, "factory", None)
    if factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return factory


# --- Session cookie or JWT Bearer ---

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_account(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    factory: ServiceFactory = Depends(get_factory),
) -> Account:
    """Resolve the caller. Raises AuthenticationError (401) when nothing matches."""
    credentials = []
    session_account = request.session.get(SESSION_ACCOUNT_KEY)
    if session_account is not None:
        credentials.append(Credential(CredentialKind.SESSION, str(session_account)))
    if bearer is not None and bearer.credentials:
        credentials.append(Credential(CredentialKind.BEARER_TOKEN, bearer.credentials))

    auth_service = factory.create_authentication_service()
    return await auth_service.authenticate(credentials)


async def require_terms_accepted(
    account: Account = Depends(get_current_account),
) -> Account:
    TermsService.require_accepted(account)
    return account
