from __future__ import annotations

from types import SimpleNamespace

import pytest

from bytespark.core.config import AppSettings
from bytespark.integrations.llm import ContentOrchestrator
from bytespark.integrations.workers_ai import AIProviderError


class StubWorkersAI:
    def __init__(self, *, configured: bool = True, error: Exception | None = None) -> None:
        self.is_configured = configured
        self.error = error
        self.calls: list[tuple[str, str, int]] = []

    async def generate_text(self, model: str, prompt: str, *, max_tokens: int = 4000) -> str:
        self.calls.append((model, prompt, max_tokens))
        if self.error:
            raise self.error
        return "workers answer"

    async def generate_image(self, model: str, params: dict) -> str:
        self.calls.append((model, params["prompt"], 0))
        return "aW1n"


class StubCompletions:
    def __init__(self, content: str | None) -> None:
        self.content = content
        self.kwargs: dict | None = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=StubCompletions(content)))


@pytest.mark.asyncio
async def test_workers_ai_answers_first() -> None:
    workers = StubWorkersAI()
    openai_client = _openai("openai answer")
    orchestrator = ContentOrchestrator(AppSettings(), workers_ai=workers, openai_client=openai_client)

    answer = await orchestrator.complete("prompt", model="@cf/custom", max_tokens=50)

    assert answer == "workers answer"
    assert workers.calls == [("@cf/custom", "prompt", 50)]
    assert openai_client.chat.completions.kwargs is None


@pytest.mark.asyncio
async def test_falls_back_to_openai_when_workers_ai_fails() -> None:
    workers = StubWorkersAI(error=AIProviderError("rate limited"))
    openai_client = _openai("  fallback  ")
    orchestrator = ContentOrchestrator(
        AppSettings(OPENAI_MODEL="gpt-test"), workers_ai=workers, openai_client=openai_client
    )

    answer = await orchestrator.complete("prompt")

    assert answer == "fallback"
    assert openai_client.chat.completions.kwargs["model"] == "gpt-test"


@pytest.mark.asyncio
async def test_last_error_is_raised_when_every_provider_fails() -> None:
    workers = StubWorkersAI(error=AIProviderError("rate limited"))
    orchestrator = ContentOrchestrator(AppSettings(), workers_ai=workers, openai_client=_openai(""))

    with pytest.raises(AIProviderError, match="empty completion"):
        await orchestrator.complete("prompt")


@pytest.mark.asyncio
async def test_no_provider_configured() -> None:
    orchestrator = ContentOrchestrator(AppSettings(), workers_ai=StubWorkersAI(configured=False))

    assert not orchestrator.is_configured
    with pytest.raises(AIProviderError, match="No AI text provider"):
        await orchestrator.complete("prompt")


@pytest.mark.asyncio
async def test_images_use_the_configured_image_model() -> None:
    workers = StubWorkersAI()
    orchestrator = ContentOrchestrator(
        AppSettings(WORKERS_AI_IMAGE_MODEL="@cf/image"), workers_ai=workers
    )

    assert await orchestrator.generate_image({"prompt": "a cat"}) == "aW1n"
    assert workers.calls == [("@cf/image", "a cat", 0)]
