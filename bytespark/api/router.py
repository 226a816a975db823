from fastapi import APIRouter

from bytespark.api.routes import admin, articles, health, locales

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(locales.router, tags=["locales"])
api_router.include_router(articles.router, prefix="/articles", tags=["articles"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
