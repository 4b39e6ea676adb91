"""
infrastructure.oauth.providers - Authorization-code clients for Google and GitHub.

Implements OAuthProviderPort. Token exchange and profile fetch use requests
via run_in_executor for async compat. Any transport or provider failure is
raised as UpstreamUnavailableError; the callback route turns it into a
failure redirect. Nothing here is retried.
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

import requests

from domain.exceptions import UpstreamUnavailableError
from domain.models import OAuthProfile
from infrastructure.config import OAuthClientConfig

logger = logging.getLogger(__name__)


class _RequestsOAuthProvider:
    """Shared code-exchange plumbing; subclasses describe one provider."""

    name = ""
    authorize_url = ""
    token_url = ""
    scope = ""

    def __init__(self, client: OAuthClientConfig, timeout: float = 10.0):
        self._client = client
        self._timeout = timeout

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "client_id": self._client.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def fetch_profile(self, code: str, redirect_uri: str) -> OAuthProfile:
        """Exchange ``code`` for an access token and load the user's profile.

        Raises:
            UpstreamUnavailableError: If the provider is unreachable or refuses the code.
        """
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self._exchange, code, redirect_uri)
        except UpstreamUnavailableError:
            raise
        except Exception as e:
            raise UpstreamUnavailableError(f"{self.name} OAuth failed: {e}") from e

    def _exchange(self, code: str, redirect_uri: str) -> OAuthProfile:
        """Synchronous code exchange + profile fetch (runs in thread pool)."""
        logger.info("Exchanging %s authorization code", self.name)
        token_json = self._request(
            "post",
            self.token_url,
            data={
                "client_id": self._client.client_id,
                "client_secret": self._client.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": redirect_uri,
            },
            headers={"Accept": "application/json"},
        )
        access_token = token_json.get("access_token")
        if not access_token:
            raise UpstreamUnavailableError(
                f"{self.name} token exchange returned no access token: "
                f"{token_json.get('error', 'unknown error')}"
            )
        return self._load_profile(access_token)

    def _load_profile(self, access_token: str) -> OAuthProfile:
        raise NotImplementedError

    def _request(self, method: str, url: str, **kwargs):
        try:
            response = requests.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise UpstreamUnavailableError(f"{self.name} unreachable at {url}: {e}") from e
        except requests.exceptions.Timeout:
            raise UpstreamUnavailableError(
                f"{self.name} timed out after {self._timeout}s"
            )

        if not response.ok:
            raise UpstreamUnavailableError(
                f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}"
            )
        return response.json()


class GoogleOAuthProvider(_RequestsOAuthProvider):
    name = "google"
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    userinfo_url = "https://www.googleapis.com/oauth2/v3/userinfo"
    scope = "openid email profile"

    def _load_profile(self, access_token: str) -> OAuthProfile:
        info = self._request(
            "get", self.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return OAuthProfile(
            provider=self.name,
            id=str(info["sub"]),
            emails=[info["email"]] if info.get("email") else [],
            display_name=info.get("name") or "",
            username=(info.get("email") or "").split("@")[0],
            photos=[info["picture"]] if info.get("picture") else [],
        )


class GitHubOAuthProvider(_RequestsOAuthProvider):
    name = "github"
    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    user_url = "https://api.github.com/user"
    emails_url = "https://api.github.com/user/emails"
    scope = "read:user user:email"

    def _load_profile(self, access_token: str) -> OAuthProfile:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        info = self._request("get", self.user_url, headers=headers)

        email = info.get("email")
        # Private email: ask for the primary address separately
        if not email:
            emails = self._request("get", self.emails_url, headers=headers)
            primary = next((e for e in emails if e.get("primary")), None)
            email = primary.get("email") if primary else (emails[0]["email"] if emails else None)

        return OAuthProfile(
            provider=self.name,
            id=str(info["id"]),
            emails=[email] if email else [],
            display_name=info.get("name") or info.get("login") or "",
            username=info.get("login") or "",
            photos=[info["avatar_url"]] if info.get("avatar_url") else [],
        )


_PROVIDER_CLASSES = {
    "google": GoogleOAuthProvider,
    "github": GitHubOAuthProvider,
}


def build_oauth_providers(clients: dict[str, OAuthClientConfig]) -> dict[str, _RequestsOAuthProvider]:
    """Instantiate a client for every configured provider."""
    providers = {}
    for name, client in clients.items():
        providers[name] = _PROVIDER_CLASSES[name](client)
        logger.info("OAuth provider enabled: %s", name)
    return providers
