from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bytespark.integrations.storage import ObjectStorage
from bytespark.models import Article
from bytespark.schemas.articles import (
    ArticleCreate,
    ArticleItem,
    ArticleListResponse,
    ArticleSaveResult,
    ArticleUpdate,
    BatchSaveResponse,
    GeneratedArticle,
    Pagination,
)
from bytespark.utils.text import slugify, strip_or_none

logger = logging.getLogger(__name__)


class DuplicateSlugError(ValueError):
    """Raised when another article already owns the requested slug."""


class ArticleService:
    """CRUD and paginated listing for blog articles keyed by slug."""

    def __init__(self, session: AsyncSession, *, storage: ObjectStorage | None = None):
        self._session = session
        self._storage = storage

    async def create_article(self, payload: ArticleCreate) -> ArticleItem:
        slug = slugify(payload.slug or payload.title)
        if not slug:
            raise ValueError("Article slug cannot be empty.")
        await self._ensure_slug_available(slug)

        article = Article(
            slug=slug,
            title=payload.title.strip(),
            excerpt=(payload.excerpt or "").strip(),
            content=payload.content,
            locale=payload.locale,
            cover_image_key=strip_or_none(payload.cover_image_key),
            published_at=self._now() if payload.publish else None,
        )
        self._session.add(article)
        await self._flush()
        await self._session.refresh(article)
        logger.info("Created article %s (%s)", slug, "published" if payload.publish else "draft")
        return self._serialize(article)

    async def get_article(self, slug: str, *, published_only: bool = False) -> ArticleItem:
        return self._serialize(await self._get(slug, published_only=published_only))

    async def update_article(self, slug: str, payload: ArticleUpdate) -> ArticleItem:
        article = await self._get(slug)
        changes = payload.model_dump(exclude_unset=True)

        new_slug = changes.pop("slug", None)
        if new_slug is not None:
            new_slug = slugify(new_slug)
            if not new_slug:
                raise ValueError("Article slug cannot be empty.")
            if new_slug != article.slug:
                await self._ensure_slug_available(new_slug)
                article.slug = new_slug

        for field, value in changes.items():
            if value is None and field != "cover_image_key":
                continue
            if field == "cover_image_key":
                value = strip_or_none(value)
            setattr(article, field, value)

        await self._flush()
        await self._session.refresh(article)
        return self._serialize(article)

    async def delete_article(self, slug: str) -> None:
        article = await self._get(slug)
        await self._session.delete(article)
        await self._session.flush()
        logger.info("Deleted article %s", slug)

    async def publish_article(self, slug: str, *, published: bool = True) -> ArticleItem:
        article = await self._get(slug)
        if published and article.published_at is None:
            article.published_at = self._now()
        elif not published:
            article.published_at = None
        await self._flush()
        await self._session.refresh(article)
        return self._serialize(article)

    async def list_articles(
        self,
        *,
        page: int = 1,
        page_size: int = 10,
        locale: str | None = None,
        published_only: bool = False,
    ) -> ArticleListResponse:
        """Return one page of articles, newest first, with pagination metadata."""
        page = max(page, 1)
        page_size = max(page_size, 1)

        stmt = self._apply_filters(
            select(Article).order_by(Article.created_at.desc(), Article.slug),
            locale=locale,
            published_only=published_only,
        )
        stmt = stmt.limit(page_size).offset((page - 1) * page_size)
        result = await self._session.execute(stmt)
        records = result.scalars().all()

        count_stmt = self._apply_filters(
            select(func.count(Article.id)), locale=locale, published_only=published_only
        )
        total = int((await self._session.execute(count_stmt)).scalar_one() or 0)

        return ArticleListResponse(
            items=[self._serialize(record) for record in records],
            pagination=Pagination(
                current_page=page,
                page_size=page_size,
                total_items=total,
                total_pages=max(1, math.ceil(total / page_size)),
            ),
        )

    async def list_published_slugs(self) -> list[tuple[str, str, datetime | None]]:
        stmt = (
            select(Article.slug, Article.locale, Article.updated_at)
            .where(Article.published_at.is_not(None))
            .order_by(Article.published_at.desc())
        )
        result = await self._session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def save_generated_article(
        self, article: GeneratedArticle, *, publish: bool = True
    ) -> ArticleItem:
        return await self.create_article(
            ArticleCreate(
                title=article.title,
                slug=article.slug,
                excerpt=article.excerpt,
                content=article.content,
                locale=article.locale,
                cover_image_key=article.cover_image_key,
                publish=publish,
            )
        )

    async def save_batch_articles(
        self, articles: Sequence[GeneratedArticle], *, publish: bool = True
    ) -> BatchSaveResponse:
        """Persist each article independently; a failing article never blocks the rest."""
        results: list[ArticleSaveResult] = []
        for article in articles:
            try:
                saved = await self.save_generated_article(article, publish=publish)
            except ValueError as exc:
                logger.warning("Could not save generated article %s: %s", article.slug, exc)
                results.append(
                    ArticleSaveResult(
                        title=article.title,
                        slug=article.slug,
                        status="error",
                        error=str(exc),
                    )
                )
                continue
            results.append(ArticleSaveResult(title=saved.title, slug=saved.slug, status="success"))

        succeeded = sum(1 for result in results if result.status == "success")
        return BatchSaveResponse(
            succeeded=succeeded,
            failed=len(results) - succeeded,
            results=results,
        )

    def _apply_filters(
        self,
        stmt: Select,
        *,
        locale: str | None,
        published_only: bool,
    ) -> Select:
        conditions: list = []
        if locale:
            conditions.append(Article.locale == locale)
        if published_only:
            conditions.append(Article.published_at.is_not(None))
        if conditions:
            stmt = stmt.where(*conditions)
        return stmt

    async def _get(self, slug: str, *, published_only: bool = False) -> Article:
        stmt = select(Article).where(Article.slug == slug)
        if published_only:
            stmt = stmt.where(Article.published_at.is_not(None))
        article = (await self._session.execute(stmt)).scalar_one_or_none()
        if article is None:
            raise LookupError(f"Article '{slug}' not found.")
        return article

    async def _ensure_slug_available(self, slug: str) -> None:
        stmt = select(func.count(Article.id)).where(Article.slug == slug)
        if (await self._session.execute(stmt)).scalar_one():
            raise DuplicateSlugError(f"An article with slug '{slug}' already exists.")

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise DuplicateSlugError("Article violates a uniqueness constraint.") from exc

    def _serialize(self, article: Article) -> ArticleItem:
        item = ArticleItem.model_validate(article)
        if self._storage is not None:
            item.cover_image_url = self._storage.public_url(article.cover_image_key)
        return item

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)
