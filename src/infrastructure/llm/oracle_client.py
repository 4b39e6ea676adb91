"""
infrastructure.llm.oracle_client - LangChain-backed Oracle model client.

Implements OracleClientPort. One chat model is built lazily per
(temperature, max_tokens) pair and reused across requests.
"""

from __future__ import annotations

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from domain.exceptions import UpstreamUnavailableError
from infrastructure.config import Settings
from infrastructure.llm.llm_builder import build_llm

logger = logging.getLogger(__name__)


class LangChainOracleClient:
    """Send a system + user message pair to the configured chat model."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self.model_name = settings.llm_model
        self._models: dict[tuple[float, int], BaseChatModel] = {}

    def _model(self, temperature: float, max_tokens: int) -> BaseChatModel:
        key = (temperature, max_tokens)
        if key not in self._models:
            self._models[key] = build_llm(
                provider=self._settings.llm_provider,
                model=self._settings.llm_model,
                temperature=temperature,
                max_tokens=max_tokens,
                ollama_base_url=self._settings.ollama_base_url,
                openai_api_key=self._settings.openai_api_key,
                groq_api_key=self._settings.groq_api_key,
            )
        return self._models[key]

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the model's reply text.

        Raises:
            UpstreamUnavailableError: on any provider or transport failure.
        """
        try:
            llm = self._model(temperature, max_tokens)
            response = await llm.ainvoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
            )
        except Exception as exc:
            logger.error("Oracle model call failed (%s): %s", self.model_name, exc)
            raise UpstreamUnavailableError(f"Language model call failed: {exc}") from exc

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return str(content).strip()
