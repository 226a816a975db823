from fastapi import APIRouter, Depends, Response

from bytespark.api.deps import get_article_service, get_locale_registry
from bytespark.core.config import get_settings
from bytespark.i18n.locales import LocaleRegistry
from bytespark.services.articles import ArticleService
from bytespark.services.sitemap import build_sitemap_entries, render_sitemap

router = APIRouter()


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(
    registry: LocaleRegistry = Depends(get_locale_registry),
    service: ArticleService = Depends(get_article_service),
) -> Response:
    entries = build_sitemap_entries(
        get_settings().site_base_url,
        registry,
        await service.list_published_slugs(),
    )
    return Response(content=render_sitemap(entries), media_type="application/xml")
