from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from bytespark.api.deps import (
    get_article_generator,
    get_article_service,
    get_image_service,
    get_locale_registry,
    require_admin,
)
from bytespark.core.config import get_settings
from bytespark.i18n.locales import LocaleRegistry
from bytespark.integrations.workers_ai import AIProviderError
from bytespark.schemas.articles import (
    ArticleCreate,
    ArticleGenerationRequest,
    ArticleItem,
    ArticleListResponse,
    ArticlePublishRequest,
    ArticleUpdate,
    BatchGenerationRequest,
    BatchGenerationResponse,
    BatchSaveRequest,
    BatchSaveResponse,
    GeneratedArticle,
)
from bytespark.schemas.images import (
    ImageGenerationRequest,
    ImageGenerationResponse,
    ImageUploadResponse,
)
from bytespark.services.articles import ArticleService, DuplicateSlugError
from bytespark.services.content_generation import ArticleGenerator
from bytespark.services.images import ImageService
from bytespark.utils.json_extract import ResponseFormatError

router = APIRouter(dependencies=[Depends(require_admin)])


def _write_error(exc: ValueError | LookupError) -> HTTPException:
    if isinstance(exc, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, DuplicateSlugError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _ensure_supported_locale(registry: LocaleRegistry, locale: str | None) -> None:
    if locale is not None and not registry.is_supported(locale):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported locale '{locale}'.",
        )


@router.get(
    "/articles",
    response_model=ArticleListResponse,
    summary="List all articles, drafts included.",
)
async def list_articles(
    page: int = Query(default=1, ge=1),
    locale: str | None = Query(default=None),
    service: ArticleService = Depends(get_article_service),
) -> ArticleListResponse:
    return await service.list_articles(
        page=page,
        page_size=get_settings().admin_page_size,
        locale=locale,
    )


@router.post(
    "/articles",
    response_model=ArticleItem,
    status_code=status.HTTP_201_CREATED,
    summary="Create an article.",
)
async def create_article(
    payload: ArticleCreate,
    service: ArticleService = Depends(get_article_service),
    registry: LocaleRegistry = Depends(get_locale_registry),
) -> ArticleItem:
    _ensure_supported_locale(registry, payload.locale)
    try:
        return await service.create_article(payload)
    except ValueError as exc:
        raise _write_error(exc) from exc


@router.post(
    "/articles/generate",
    response_model=GeneratedArticle,
    summary="Generate one article candidate from a keyword.",
)
async def generate_article(
    payload: ArticleGenerationRequest,
    generator: ArticleGenerator = Depends(get_article_generator),
) -> GeneratedArticle:
    try:
        return await generator.generate_article(
            payload.keyword,
            payload.locale,
            with_cover_image=payload.with_cover_image,
        )
    except (AIProviderError, ResponseFormatError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post(
    "/articles/batch/generate",
    response_model=BatchGenerationResponse,
    summary="Generate article candidates for many keywords in chunks.",
)
async def generate_batch(
    payload: BatchGenerationRequest,
    generator: ArticleGenerator = Depends(get_article_generator),
) -> BatchGenerationResponse:
    try:
        return await generator.generate_batch(payload.keywords, payload.locale)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post(
    "/articles/batch/save",
    response_model=BatchSaveResponse,
    summary="Persist generated article candidates.",
)
async def save_batch(
    payload: BatchSaveRequest,
    service: ArticleService = Depends(get_article_service),
) -> BatchSaveResponse:
    return await service.save_batch_articles(payload.articles, publish=payload.publish)


@router.get("/articles/{slug}", response_model=ArticleItem)
async def get_article(
    slug: str,
    service: ArticleService = Depends(get_article_service),
) -> ArticleItem:
    try:
        return await service.get_article(slug)
    except LookupError as exc:
        raise _write_error(exc) from exc


@router.put("/articles/{slug}", response_model=ArticleItem)
async def update_article(
    slug: str,
    payload: ArticleUpdate,
    service: ArticleService = Depends(get_article_service),
    registry: LocaleRegistry = Depends(get_locale_registry),
) -> ArticleItem:
    _ensure_supported_locale(registry, payload.locale)
    try:
        return await service.update_article(slug, payload)
    except (LookupError, ValueError) as exc:
        raise _write_error(exc) from exc


@router.delete("/articles/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    slug: str,
    service: ArticleService = Depends(get_article_service),
) -> Response:
    try:
        await service.delete_article(slug)
    except LookupError as exc:
        raise _write_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/articles/{slug}/publish", response_model=ArticleItem)
async def publish_article(
    slug: str,
    payload: ArticlePublishRequest,
    service: ArticleService = Depends(get_article_service),
) -> ArticleItem:
    try:
        return await service.publish_article(slug, published=payload.published)
    except LookupError as exc:
        raise _write_error(exc) from exc


@router.post(
    "/images/generate",
    response_model=ImageGenerationResponse,
    summary="Generate an image and store a copy in object storage.",
)
async def generate_image(
    payload: ImageGenerationRequest,
    response: Response,
    images: ImageService = Depends(get_image_service),
) -> ImageGenerationResponse:
    result = await images.generate_image(payload)
    if not result.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return result


@router.post(
    "/images/upload",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image to object storage.",
)
async def upload_image(
    file: UploadFile = File(...),
    images: ImageService = Depends(get_image_service),
) -> ImageUploadResponse:
    body = await file.read()
    try:
        return await images.upload_image(
            filename=file.filename or "upload",
            content_type=file.content_type,
            body=body,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
