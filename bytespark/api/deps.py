from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bytespark.core.config import get_settings
from bytespark.core.database import get_session_factory
from bytespark.i18n.locales import LocaleRegistry
from bytespark.integrations.llm import ContentOrchestrator
from bytespark.integrations.storage import ObjectStorage
from bytespark.services.articles import ArticleService
from bytespark.services.auth import AdminAuthService
from bytespark.services.content_generation import ArticleGenerator
from bytespark.services.images import ImageService

_orchestrator: ContentOrchestrator | None = None
_storage: ObjectStorage | None = None
_registry: LocaleRegistry | None = None

_bearer = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession."""
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def get_orchestrator() -> ContentOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ContentOrchestrator(get_settings())
    return _orchestrator


def get_storage() -> ObjectStorage:
    global _storage
    if _storage is None:
        _storage = ObjectStorage(get_settings())
    return _storage


def get_locale_registry() -> LocaleRegistry:
    global _registry
    if _registry is None:
        _registry = LocaleRegistry.from_settings(get_settings())
    return _registry


def get_auth_service() -> AdminAuthService:
    return AdminAuthService(get_settings())


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    auth: AdminAuthService = Depends(get_auth_service),
) -> str:
    """Reject the request with 401 unless it carries a valid admin bearer token."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return auth.verify_token(credentials.credentials)
    except (PermissionError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


async def get_article_service(
    session: AsyncSession = Depends(get_db_session),
    storage: ObjectStorage = Depends(get_storage),
) -> ArticleService:
    """Provide ArticleService bound to the request session."""
    return ArticleService(session, storage=storage)


def get_image_service(
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
    storage: ObjectStorage = Depends(get_storage),
) -> ImageService:
    return ImageService(orchestrator, storage, get_settings())


def get_article_generator(
    orchestrator: ContentOrchestrator = Depends(get_orchestrator),
    registry: LocaleRegistry = Depends(get_locale_registry),
    image_service: ImageService = Depends(get_image_service),
) -> ArticleGenerator:
    return ArticleGenerator(orchestrator, registry, get_settings(), image_service=image_service)
