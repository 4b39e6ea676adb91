"""Auth endpoints: OAuth login, local register/login, session, terms acceptance."""

import logging
import secrets
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from factory import ServiceFactory
from domain.entities import Account
from domain.exceptions import ProviderNotEnabledError, RepositoryError, UpstreamUnavailableError
from application.dto import LoginRequest, RegisterRequest
from adapters.rest.dependencies import (
    SESSION_ACCOUNT_KEY,
    SESSION_OAUTH_STATE_KEY,
    get_current_account,
    get_factory,
)
from adapters.rest.schemas import (
    AcceptTermsBody,
    LoginBody,
    RegisterBody,
    TokenResponse,
    account_to_json,
    terms_status_to_json,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me")
async def me(
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    favorites = await factory.create_favorites_service().resolve(account)
    return account_to_json(account, favorites)


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out successfully"}


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterBody,
    request: Request,
    factory: ServiceFactory = Depends(get_factory),
):
    token = await factory.create_authentication_service().register(RegisterRequest(
        email=body.email,
        password=body.password,
        display_name=body.display_name,
    ))
    request.session[SESSION_ACCOUNT_KEY] = token.account.id
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        user_id=token.account.id,
        role=token.account.role.value,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginBody,
    request: Request,
    factory: ServiceFactory = Depends(get_factory),
):
    token = await factory.create_authentication_service().login(LoginRequest(
        email=body.email,
        password=body.password,
    ))
    request.session[SESSION_ACCOUNT_KEY] = token.account.id
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        user_id=token.account.id,
        role=token.account.role.value,
    )


@router.post("/accept-terms")
async def accept_terms(
    body: Optional[AcceptTermsBody] = None,
    account: Account = Depends(get_current_account),
    factory: ServiceFactory = Depends(get_factory),
):
    account = await factory.create_terms_service().accept(
        account, body.version if body else None,
    )
    return {"message": "Terms accepted successfully", **terms_status_to_json(account)}


@router.get("/check-terms")
async def check_terms(account: Account = Depends(get_current_account)):
    return terms_status_to_json(account)


# --- OAuth (declared last: "/{provider}" would shadow the routes above) ---

def _callback_uri(factory: ServiceFactory, provider: str) -> str:
    return f"{factory.config.backend_url.rstrip('/')}/api/auth/{provider}/callback"


def _provider_or_404(factory: ServiceFactory, name: str):
    provider = factory.get_oauth_provider(name)
    if provider is None:
        raise ProviderNotEnabledError(f"OAuth provider '{name}' is not enabled.")
    return provider


@router.get("/{provider}")
async def oauth_start(
    provider: str,
    request: Request,
    factory: ServiceFactory = Depends(get_factory),
):
    client = _provider_or_404(factory, provider)
    state = secrets.token_urlsafe(16)
    request.session[SESSION_OAUTH_STATE_KEY] = state
    return RedirectResponse(
        client.authorization_url(_callback_uri(factory, provider), state), status_code=302,
    )


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    factory: ServiceFactory = Depends(get_factory),
):
    client = _provider_or_404(factory, provider)
    frontend = factory.config.frontend_url.rstrip("/")
    failure = RedirectResponse(f"{frontend}/login?error={provider}_failed", status_code=302)

    expected_state = request.session.pop(SESSION_OAUTH_STATE_KEY, None)
    if error or not code or not state or state != expected_state:
        logger.warning("Rejected %s OAuth callback (error=%s, state ok=%s)",
                       provider, error, bool(state) and state == expected_state)
        return failure

    try:
        profile = await client.fetch_profile(code, _callback_uri(factory, provider))
        account = await factory.create_identity_service().resolve(profile)
    except (UpstreamUnavailableError, RepositoryError) as exc:
        logger.warning("%s OAuth login failed: %s", provider, exc)
        return failure

    token = factory.create_authentication_service().issue_token(account)
    request.session[SESSION_ACCOUNT_KEY] = account.id
    query = urlencode({"token": token, "provider": provider})
    return RedirectResponse(f"{frontend}/auth/callback?{query}", status_code=302)
