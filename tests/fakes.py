"""Stand-ins for the external collaborators (language model, OAuth providers)."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from domain.exceptions import UpstreamUnavailableError
from domain.models import OAuthProfile


class FakeOracleClient:
    """Records every prompt; answers with a fixed reply or fails on demand."""

    model_name = "fake-oracle"

    def __init__(self, reply: str = "Bananas were invented by moonlight.", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.calls: list[dict] = []

    async def complete(self, system_prompt, user_prompt, *, temperature, max_tokens):
        self.calls.append({
            "system": system_prompt,
            "user": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.fail:
            raise UpstreamUnavailableError("model is down")
        return self.reply


class FakeOAuthProvider:
    """Accepts any code and hands back a fixed profile."""

    def __init__(self, name: str, profile: Optional[OAuthProfile] = None, fail: bool = False):
        self.name = name
        self.profile = profile or OAuthProfile(
            provider=name,
            id="gh-1001",
            emails=["octo@example.com"],
            display_name="Octo Cat",
            username="octocat",
            photos=["https://example.com/octo.png"],
        )
        self.fail = fail
        self.codes: list[str] = []

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        query = urlencode({"redirect_uri": redirect_uri, "state": state})
        return f"https://auth.example.com/{self.name}/authorize?{query}"

    async def fetch_profile(self, code: str, redirect_uri: str) -> OAuthProfile:
        self.codes.append(code)
        if self.fail:
            raise UpstreamUnavailableError(f"{self.name} refused the code")
        return self.profile
