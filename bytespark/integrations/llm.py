from __future__ import annotations

import logging
from typing import Any

from openai import AsyncOpenAI

from bytespark.core.config import AppSettings
from bytespark.integrations.workers_ai import AIProviderError, WorkersAIClient


logger = logging.getLogger(__name__)


class ContentOrchestrator:
    """LLM facade with Cloudflare Workers AI primary and OpenAI fallback."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        workers_ai: WorkersAIClient | None = None,
        openai_client: AsyncOpenAI | None = None,
    ):
        self._settings = settings
        self._workers_ai = workers_ai or WorkersAIClient(settings)
        self._openai_client = openai_client
        if self._openai_client is None and settings.openai_api_key:
            self._openai_client = AsyncOpenAI(api_key=settings.openai_api_key.get_secret_value())

    @property
    def is_configured(self) -> bool:
        return self._workers_ai.is_configured or self._openai_client is not None

    @property
    def image_model(self) -> str:
        return self._settings.workers_ai_image_model

    async def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int = 4000,
        temperature: float = 0.3,
    ) -> str:
        """Return the raw text answer for ``prompt`` from the first provider that succeeds."""
        last_error: Exception | None = None

        if self._workers_ai.is_configured:
            try:
                return await self._workers_ai.generate_text(
                    model or self._settings.workers_ai_text_model,
                    prompt,
                    max_tokens=max_tokens,
                )
            except AIProviderError as exc:
                logger.warning("Workers AI completion failed; trying OpenAI fallback.", exc_info=exc)
                last_error = exc

        if self._openai_client:
            try:
                response = await self._openai_client.chat.completions.create(
                    model=self._settings.openai_model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                content = response.choices[0].message.content if response.choices else None
                if content and content.strip():
                    return content.strip()
                last_error = AIProviderError("OpenAI returned an empty completion.")
            except Exception as exc:
                logger.warning("OpenAI completion failed.", exc_info=exc)
                last_error = exc

        if last_error is None:
            raise AIProviderError("No AI text provider is configured.")
        if isinstance(last_error, AIProviderError):
            raise last_error
        raise AIProviderError(str(last_error)) from last_error

    async def generate_image(self, params: dict[str, Any], *, model: str | None = None) -> str:
        """Return base64 image data; only Workers AI serves images."""
        return await self._workers_ai.generate_image(model or self.image_model, params)
