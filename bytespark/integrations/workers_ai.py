from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from bytespark.core.config import AppSettings


logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudflare.com/client/v4"


class AIProviderError(RuntimeError):
    """Raised when a remote inference provider fails or is not configured."""


class WorkersAIClient:
    """Cloudflare Workers AI REST client (``/accounts/{id}/ai/run/{model}``)."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ):
        self._account_id = settings.cloudflare_account_id
        self._api_token = (
            settings.cloudflare_api_token.get_secret_value()
            if settings.cloudflare_api_token
            else None
        )
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(settings.workers_ai_timeout))
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._account_id and self._api_token)

    def endpoint(self, model: str) -> str:
        return f"{API_BASE_URL}/accounts/{self._account_id}/ai/run/{model}"

    async def run(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Invoke ``model`` with ``payload`` and return the ``result`` object."""
        if not self.is_configured:
            raise AIProviderError("Cloudflare Workers AI credentials are not configured.")

        try:
            async with self._client_factory() as client:
                response = await client.post(
                    self.endpoint(model),
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_token}"},
                )
        except httpx.HTTPError as exc:
            raise AIProviderError(f"Workers AI request failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise AIProviderError(self._extract_error(response))

        try:
            body = response.json()
        except ValueError as exc:
            raise AIProviderError("Workers AI returned a non-JSON response.") from exc

        if not isinstance(body, dict) or body.get("success") is False:
            raise AIProviderError(self._extract_error(response))

        result = body.get("result")
        if not isinstance(result, dict):
            raise AIProviderError("Workers AI response is missing the result object.")
        logger.debug("Workers AI model %s answered", model)
        return result

    async def generate_text(self, model: str, prompt: str, *, max_tokens: int = 4000) -> str:
        result = await self.run(model, {"prompt": prompt, "stream": False, "max_tokens": max_tokens})
        text = result.get("response")
        if not isinstance(text, str) or not text.strip():
            raise AIProviderError("Workers AI returned an empty text response.")
        return text.strip()

    async def generate_image(self, model: str, params: dict[str, Any]) -> str:
        """Return the base64 image produced by ``model``."""
        result = await self.run(model, params)
        image = result.get("image")
        if not isinstance(image, str) or not image:
            raise AIProviderError("Workers AI returned no image data.")
        return image

    def _extract_error(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            errors = payload.get("errors") or []
            messages = [
                str(error.get("message"))
                for error in errors
                if isinstance(error, dict) and error.get("message")
            ]
            if messages:
                return f"Workers AI error: {'; '.join(messages)}"

        return f"Workers AI request failed with status {response.status_code}."
