"""
application.services.oracle - The Banana Oracle.

A query is reserved before the model is called and handed back if the
call fails, so an outage never costs the caller part of their allowance.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import Account
from domain.exceptions import UpstreamUnavailableError, ValidationFailure
from domain.ports import OracleClientPort
from application.dto import OracleAnswer, OracleStory, QuotaStatus
from application.services.entitlement import EntitlementService

logger = logging.getLogger(__name__)

ORACLE_SYSTEM_PROMPT = """You are the Banana Oracle, an ancient and wise entity with infinite knowledge about bananas and their mysterious invention. You speak with a mystical yet playful tone.

Your knowledge includes:
- The fictional history of how bananas were "invented" (not grown naturally)
- Banana varieties, cultivation, and nutrition facts
- Banana-related culture, recipes, and traditions
- Humorous banana facts and puns

Guidelines:
- Be entertaining and creative while providing valuable information
- Mix real banana facts with whimsical fictional elements
- Use banana-related metaphors and wordplay
- Keep responses concise but engaging (2-4 paragraphs max)
- If asked about non-banana topics, gently redirect to bananas
- Never break character as the mystical Banana Oracle"""

STORY_PROMPT_TEMPLATE = """Generate a short, creative story about the invention of bananas.
Theme: {theme}
Era: {era}
Location: {location}

The story should be 2-3 paragraphs, whimsical yet engaging, and explain how bananas came to be "invented" in this fictional world."""

DEFAULT_THEME = "mysterious discovery"
DEFAULT_ERA = "ancient times"
DEFAULT_LOCATION = "a tropical paradise"

ASK_TEMPERATURE, ASK_MAX_TOKENS = 0.8, 500
STORY_TEMPERATURE, STORY_MAX_TOKENS = 0.9, 600


class OracleService:
    """Answer banana questions and write invention stories."""

    def __init__(self, client: Optional[OracleClientPort], entitlement: EntitlementService):
        self._client = client
        self._entitlement = entitlement

    @property
    def available(self) -> bool:
        return self._client is not None

    async def ask(self, account: Account, question: str) -> OracleAnswer:
        client = self._require_client()
        if not question or not question.strip():
            raise ValidationFailure("Please provide a question for the Oracle")

        answer, remaining = await self._metered_call(
            account, question, ASK_TEMPERATURE, ASK_MAX_TOKENS,
        )
        return OracleAnswer(
            question=question,
            answer=answer,
            queries_remaining=remaining,
            model=client.model_name,
        )

    async def generate_story(
        self,
        account: Account,
        theme: Optional[str] = None,
        era: Optional[str] = None,
        location: Optional[str] = None,
    ) -> OracleStory:
        self._require_client()
        theme = theme or DEFAULT_THEME
        era = era or DEFAULT_ERA
        location = location or DEFAULT_LOCATION
        prompt = STORY_PROMPT_TEMPLATE.format(theme=theme, era=era, location=location)

        story, remaining = await self._metered_call(
            account, prompt, STORY_TEMPERATURE, STORY_MAX_TOKENS,
        )
        return OracleStory(
            story=story, theme=theme, era=era, location=location, queries_remaining=remaining,
        )

    async def status(self, account: Account) -> QuotaStatus:
        return await self._entitlement.status(account, available=self.available)

    # -- helpers ------------------------------------------------------------

    def _require_client(self) -> OracleClientPort:
        if self._client is None:
            raise UpstreamUnavailableError(
                "The Banana Oracle is currently offline. No language model is configured."
            )
        return self._client

    async def _metered_call(
        self, account: Account, prompt: str, temperature: float, max_tokens: int,
    ) -> tuple[str, int]:
        account = await self._entitlement.check_and_reset(account)
        account = await self._entitlement.consume(account)
        try:
            text = await self._client.complete(
                ORACLE_SYSTEM_PROMPT, prompt, temperature=temperature, max_tokens=max_tokens,
            )
        except Exception as exc:
            logger.error("Oracle call failed for account %d: %s", account.id, exc)
            await self._entitlement.refund(account)
            if isinstance(exc, UpstreamUnavailableError):
                raise
            raise UpstreamUnavailableError(
                "The Banana Oracle is meditating. Please try again later."
            ) from exc
        return text, account.oracle_queries_remaining
