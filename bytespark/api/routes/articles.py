from fastapi import APIRouter, Depends, HTTPException, Query, status

from bytespark.api.deps import get_article_service, get_locale_registry
from bytespark.core.config import get_settings
from bytespark.i18n.locales import LocaleRegistry
from bytespark.schemas.articles import ArticleItem, ArticleListResponse
from bytespark.services.articles import ArticleService

router = APIRouter()


@router.get(
    "",
    response_model=ArticleListResponse,
    summary="List published articles for a locale.",
)
async def list_articles(
    locale: str = Query(default="en", description="Locale code of the articles to list."),
    page: int = Query(default=1, ge=1),
    registry: LocaleRegistry = Depends(get_locale_registry),
    service: ArticleService = Depends(get_article_service),
) -> ArticleListResponse:
    if not registry.is_supported(locale):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unsupported locale '{locale}'.")
    return await service.list_articles(
        page=page,
        page_size=get_settings().blog_page_size,
        locale=locale,
        published_only=True,
    )


@router.get(
    "/{slug}",
    response_model=ArticleItem,
    summary="Fetch a published article by slug.",
)
async def get_article(
    slug: str,
    service: ArticleService = Depends(get_article_service),
) -> ArticleItem:
    try:
        return await service.get_article(slug, published_only=True)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
