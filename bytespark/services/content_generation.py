from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from bytespark.core.config import AppSettings
from bytespark.i18n.locales import Locale, LocaleRegistry
from bytespark.integrations.llm import ContentOrchestrator
from bytespark.integrations.prompts import build_article_prompt
from bytespark.schemas.articles import (
    BatchGenerationResponse,
    GeneratedArticle,
    KeywordResult,
)
from bytespark.services.images import ImageService
from bytespark.utils.chunking import ChunkedScheduler, ChunkMode
from bytespark.utils.json_extract import ResponseFormatError, extract_json_object
from bytespark.utils.text import slugify

logger = logging.getLogger(__name__)

ARTICLE_MAX_TOKENS = 4000
_MARKDOWN_NOISE_RE = re.compile(r"[#>*_`\[\]]+")


class ArticleGenerator:
    """Turn keywords into validated article candidates via the text model."""

    def __init__(
        self,
        orchestrator: ContentOrchestrator,
        registry: LocaleRegistry,
        settings: AppSettings,
        *,
        image_service: ImageService | None = None,
    ):
        self._orchestrator = orchestrator
        self._registry = registry
        self._settings = settings
        self._image_service = image_service

    async def generate_article(
        self,
        keyword: str,
        locale: str = "en",
        *,
        with_cover_image: bool = False,
    ) -> GeneratedArticle:
        keyword = (keyword or "").strip()
        if not keyword:
            raise ValueError("Keyword is required.")
        target = self._resolve_locale(locale)

        raw = await self._orchestrator.complete(
            build_article_prompt(keyword, target),
            max_tokens=ARTICLE_MAX_TOKENS,
            temperature=0.7,
        )
        article = self._parse_article(extract_json_object(raw), keyword=keyword, locale=target.code)
        logger.info("Generated article '%s' for keyword '%s'", article.slug, keyword)

        if with_cover_image and self._image_service is not None:
            cover = await self._image_service.generate_cover(article.title)
            if cover.success:
                article.cover_image_key = cover.image_key
            else:
                logger.warning("Cover image for '%s' failed: %s", article.slug, cover.error)
        return article

    async def generate_batch(
        self,
        keywords: Sequence[str],
        locale: str = "en",
        *,
        chunk_size: int | None = None,
    ) -> BatchGenerationResponse:
        """Generate one article per keyword, ``chunk_size`` requests in flight at a time."""
        cleaned = [keyword.strip() for keyword in keywords if keyword and keyword.strip()]
        if not cleaned:
            raise ValueError("No valid keywords provided.")
        self._resolve_locale(locale)

        scheduler = ChunkedScheduler(
            chunk_size or self._settings.article_batch_size,
            mode=ChunkMode.PARALLEL,
        )

        async def generate(keyword: str) -> GeneratedArticle:
            return await self.generate_article(keyword, locale)

        outcomes = await scheduler.run(cleaned, generate)
        results = [
            KeywordResult(keyword=outcome.item, status="success", article=outcome.value)
            if outcome.succeeded
            else KeywordResult(keyword=outcome.item, status="error", error=str(outcome.error))
            for outcome in outcomes
        ]
        succeeded = sum(1 for result in results if result.status == "success")
        logger.info(
            "Batch generation finished: %d succeeded, %d failed", succeeded, len(results) - succeeded
        )
        return BatchGenerationResponse(
            succeeded=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )

    def _resolve_locale(self, code: str) -> Locale:
        try:
            return self._registry.get(code)
        except LookupError as exc:
            raise ValueError(str(exc)) from exc

    def _parse_article(self, payload: dict[str, Any], *, keyword: str, locale: str) -> GeneratedArticle:
        title = payload.get("title")
        content = payload.get("content")
        if not isinstance(title, str) or not title.strip():
            raise ResponseFormatError("Generated article is missing a title.")
        if not isinstance(content, str) or not content.strip():
            raise ResponseFormatError("Generated article is missing content.")

        slug = payload.get("slug") if isinstance(payload.get("slug"), str) else ""
        slug = slugify(slug) or slugify(title) or slugify(keyword)
        excerpt = payload.get("excerpt") if isinstance(payload.get("excerpt"), str) else ""
        if not excerpt.strip():
            excerpt = self._derive_excerpt(content)

        try:
            return GeneratedArticle(
                title=title[:200],
                slug=slug,
                excerpt=excerpt[:500],
                content=content,
                locale=locale,
            )
        except ValidationError as exc:
            raise ResponseFormatError(f"Generated article failed validation: {exc}") from exc

    def _derive_excerpt(self, content: str, limit: int = 160) -> str:
        text = " ".join(_MARKDOWN_NOISE_RE.sub(" ", content).split())
        if len(text) <= limit:
            return text
        return text[:limit].rsplit(" ", 1)[0] + "…"
