"""Text-generation client: the only place that talks to the model API."""

from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from app.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The model call failed or produced no usable text."""


class LLMClient:
    """Thin wrapper over an OpenAI-compatible chat endpoint.

    The SDK client is built on first use so that a missing API key only
    surfaces when a completion is actually requested.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.llm_model
        self.base_url = base_url if base_url is not None else settings.llm_base_url
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise LLMError("OPENAI_API_KEY not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.1,
        max_output_tokens: int = 500,
    ) -> str:
        """
        Get a single completion for a prompt.

        Args:
            prompt: User message sent to the model
            temperature: Sampling temperature
            max_output_tokens: Cap on generated tokens

        Returns:
            The response text, never empty

        Raises:
            LLMError: on transport, quota or API errors and on empty output
        """
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_output_tokens,
                temperature=temperature,
            )
        except OpenAIError as exc:
            logger.warning("Completion request failed: %s", exc)
            raise LLMError(str(exc)) from exc

        if not response.choices:
            raise LLMError("Completion returned no choices")
        content = response.choices[0].message.content or ""
        if not content.strip():
            raise LLMError("Completion returned empty text")
        return content


# Singleton instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get the LLM client singleton (FastAPI dependency)."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
