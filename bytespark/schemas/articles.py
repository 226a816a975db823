from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bytespark.utils.text import slugify


class ArticleBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    excerpt: str = Field(default="", max_length=500)
    content: str = Field(..., min_length=1)
    locale: str = Field(default="en", min_length=2, max_length=16)
    cover_image_key: str | None = Field(default=None, max_length=512)


class ArticleCreate(ArticleBase):
    """Payload for creating an article by hand from the admin console."""

    slug: str | None = Field(default=None, max_length=200)
    publish: bool = False


class ArticleUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=1, max_length=200)
    excerpt: str | None = Field(default=None, max_length=500)
    content: str | None = Field(default=None, min_length=1)
    locale: str | None = Field(default=None, min_length=2, max_length=16)
    cover_image_key: str | None = Field(default=None, max_length=512)


class ArticlePublishRequest(BaseModel):
    published: bool = True


class ArticleItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    title: str
    excerpt: str
    content: str
    locale: str
    cover_image_key: str | None
    cover_image_url: str | None = None
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    current_page: int
    page_size: int
    total_items: int
    total_pages: int


class ArticleListResponse(BaseModel):
    items: list[ArticleItem]
    pagination: Pagination


class GeneratedArticle(BaseModel):
    """Validated article candidate produced by the text model."""

    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)
    excerpt: str = Field(default="", max_length=500)
    content: str = Field(..., min_length=1)
    locale: str = "en"
    cover_image_key: str | None = None

    @field_validator("title", "excerpt", "content", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("slug", mode="before")
    @classmethod
    def _normalize_slug(cls, value: object) -> object:
        return slugify(value) if isinstance(value, str) else value


class ArticleGenerationRequest(BaseModel):
    keyword: str = Field(..., min_length=1, max_length=200)
    locale: str = "en"
    with_cover_image: bool = False

    @field_validator("keyword")
    @classmethod
    def _keyword_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Keyword is required.")
        return value.strip()


class BatchGenerationRequest(BaseModel):
    keywords: list[str] = Field(..., min_length=1)
    locale: str = "en"


class KeywordResult(BaseModel):
    """Per-keyword outcome of a batch generation run."""

    keyword: str
    status: Literal["success", "error"]
    article: GeneratedArticle | None = None
    error: str | None = None


class BatchGenerationResponse(BaseModel):
    succeeded: int
    failed: int
    results: list[KeywordResult]


class BatchSaveRequest(BaseModel):
    articles: list[GeneratedArticle] = Field(..., min_length=1)
    publish: bool = True


class ArticleSaveResult(BaseModel):
    title: str
    slug: str
    status: Literal["success", "error"]
    error: str | None = None


class BatchSaveResponse(BaseModel):
    succeeded: int
    failed: int
    results: list[ArticleSaveResult]
