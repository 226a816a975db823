from fastapi import APIRouter, Depends

from bytespark.api.deps import get_locale_registry
from bytespark.i18n.locales import LocaleRegistry
from bytespark.schemas.common import LocaleItem, LocaleListResponse

router = APIRouter()


@router.get(
    "/locales",
    response_model=LocaleListResponse,
    summary="List the locales the site is published in.",
)
async def list_locales(
    registry: LocaleRegistry = Depends(get_locale_registry),
) -> LocaleListResponse:
    canonical = registry.canonical.code
    return LocaleListResponse(
        default=canonical,
        locales=[
            LocaleItem(
                code=locale.code,
                name=locale.name,
                direction=locale.direction,
                canonical=locale.code == canonical,
            )
            for locale in registry.locales
        ],
    )
