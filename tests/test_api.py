from __future__ import annotations

import base64

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from bytespark.api.deps import (
    get_article_generator,
    get_auth_service,
    get_db_session,
    get_image_service,
    get_locale_registry,
)
from bytespark.core.app import create_app
from bytespark.core.config import AppSettings
from bytespark.i18n.locales import LocaleRegistry
from bytespark.integrations.workers_ai import AIProviderError
from bytespark.models.entities import Article
from bytespark.services.auth import AdminAuthService
from bytespark.services.content_generation import ArticleGenerator
from bytespark.services.images import ImageService

AUTH_SETTINGS = AppSettings(JWT_SECRET_KEY="test-secret", ADMIN_USER_ID="admin-1")
REGISTRY = LocaleRegistry.from_codes(["en", "zh"])


class StubOrchestrator:
    image_model = "@cf/test-image"

    def __init__(self) -> None:
        self.fail_text = False

    async def complete(self, prompt: str, **kwargs) -> str:
        if self.fail_text:
            raise AIProviderError("Workers AI error: overloaded")
        keyword = prompt.split('article about "', 1)[1].split('"', 1)[0]
        return (
            '{"title": "Guide to %s", "slug": "", "excerpt": "Short.", "content": "## %s\\n\\nBody."}'
            % (keyword, keyword)
        )

    async def generate_image(self, params: dict, *, model=None) -> str:
        return base64.b64encode(b"png").decode()


class StubStorage:
    async def put_object(self, *, key: str, body: bytes, content_type: str) -> str | None:
        return key

    def public_url(self, key: str | None) -> str | None:
        return f"https://cdn.example.com/{key}" if key else None


@pytest_asyncio.fixture()
async def client_bundle():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Article.__table__.create)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    app = create_app()
    orchestrator = StubOrchestrator()
    settings = AppSettings(SUPPORTED_LOCALES=["en", "zh"])

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    image_service = ImageService(orchestrator, StubStorage(), settings)
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_auth_service] = lambda: AdminAuthService(AUTH_SETTINGS)
    app.dependency_overrides[get_locale_registry] = lambda: REGISTRY
    app.dependency_overrides[get_image_service] = lambda: image_service
    app.dependency_overrides[get_article_generator] = lambda: ArticleGenerator(
        orchestrator, REGISTRY, settings, image_service=image_service
    )

    with TestClient(app) as client:
        yield client, orchestrator

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
def client(client_bundle) -> TestClient:
    return client_bundle[0]


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    token = AdminAuthService(AUTH_SETTINGS).issue_token().access_token
    return {"Authorization": f"Bearer {token}"}


def _create(client: TestClient, headers: dict[str, str], title: str, **extra) -> dict:
    response = client.post(
        "/api/admin/articles",
        json={"title": title, "content": f"# {title}", **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_and_locales(client: TestClient) -> None:
    assert client.get("/api/health").json()["status"] == "ok"

    payload = client.get("/api/locales").json()
    assert payload["default"] == "en"
    assert [locale["code"] for locale in payload["locales"]] == ["en", "zh"]


def test_admin_routes_require_a_valid_admin_token(client: TestClient) -> None:
    assert client.get("/api/admin/articles").status_code == 401

    bad = client.get("/api/admin/articles", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401

    other_user = AdminAuthService(AUTH_SETTINGS).issue_token("someone-else").access_token
    forbidden = client.get("/api/admin/articles", headers={"Authorization": f"Bearer {other_user}"})
    assert forbidden.status_code == 401


def test_article_lifecycle_through_admin_and_public_api(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    draft = _create(client, admin_headers, "Hello World")
    assert draft["slug"] == "hello-world"

    assert client.get("/api/articles/hello-world").status_code == 404
    assert client.get("/api/articles", params={"locale": "en"}).json()["items"] == []

    published = client.post(
        "/api/admin/articles/hello-world/publish", json={"published": True}, headers=admin_headers
    )
    assert published.json()["published_at"] is not None

    public = client.get("/api/articles", params={"locale": "en"}).json()
    assert [item["slug"] for item in public["items"]] == ["hello-world"]
    assert public["pagination"]["page_size"] == 18
    assert client.get("/api/articles/hello-world").json()["title"] == "Hello World"

    updated = client.put(
        "/api/admin/articles/hello-world", json={"title": "Hello again"}, headers=admin_headers
    )
    assert updated.json()["title"] == "Hello again"

    listing = client.get("/api/admin/articles", headers=admin_headers).json()
    assert listing["pagination"]["page_size"] == 10

    assert client.delete("/api/admin/articles/hello-world", headers=admin_headers).status_code == 204
    assert client.get("/api/admin/articles/hello-world", headers=admin_headers).status_code == 404


def test_admin_error_mapping(client: TestClient, admin_headers: dict[str, str]) -> None:
    _create(client, admin_headers, "Duplicate me")

    duplicate = client.post(
        "/api/admin/articles",
        json={"title": "Other", "slug": "duplicate-me", "content": "x"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    invalid = client.post("/api/admin/articles", json={"content": "no title"}, headers=admin_headers)
    assert invalid.status_code == 400

    missing = client.put("/api/admin/articles/nope", json={"title": "x"}, headers=admin_headers)
    assert missing.status_code == 404


def test_admin_rejects_articles_in_unsupported_locales(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    created = client.post(
        "/api/admin/articles",
        json={"title": "Bonjour", "content": "x", "locale": "fr"},
        headers=admin_headers,
    )
    assert created.status_code == 400
    assert "fr" in created.json()["detail"]

    _create(client, admin_headers, "Stay English")
    moved = client.put(
        "/api/admin/articles/stay-english", json={"locale": "xx"}, headers=admin_headers
    )
    assert moved.status_code == 400
    assert client.get("/api/admin/articles/stay-english", headers=admin_headers).json()["locale"] == "en"

    accepted = client.put(
        "/api/admin/articles/stay-english", json={"locale": "zh"}, headers=admin_headers
    )
    assert accepted.json()["locale"] == "zh"


def test_unsupported_public_locale_is_not_found(client: TestClient) -> None:
    assert client.get("/api/articles", params={"locale": "xx"}).status_code == 404


def test_generate_article_and_batch(client_bundle, admin_headers: dict[str, str]) -> None:
    client, orchestrator = client_bundle

    single = client.post(
        "/api/admin/articles/generate",
        json={"keyword": "python", "locale": "zh", "with_cover_image": True},
        headers=admin_headers,
    )
    assert single.status_code == 200
    body = single.json()
    assert body["slug"] == "guide-to-python"
    assert body["locale"] == "zh"
    assert body["cover_image_key"].startswith("images/")

    batch = client.post(
        "/api/admin/articles/batch/generate",
        json={"keywords": ["rust", "go", "  "], "locale": "en"},
        headers=admin_headers,
    )
    assert batch.json()["succeeded"] == 2

    saved = client.post(
        "/api/admin/articles/batch/save",
        json={"articles": [result["article"] for result in batch.json()["results"]], "publish": True},
        headers=admin_headers,
    )
    assert saved.json()["succeeded"] == 2
    assert client.get("/api/articles/guide-to-rust").status_code == 200

    orchestrator.fail_text = True
    failed = client.post(
        "/api/admin/articles/generate", json={"keyword": "java"}, headers=admin_headers
    )
    assert failed.status_code == 502
    assert "overloaded" in failed.json()["detail"]

    blank = client.post(
        "/api/admin/articles/batch/generate", json={"keywords": [" "]}, headers=admin_headers
    )
    assert blank.status_code == 400


def test_image_generation_and_upload(client: TestClient, admin_headers: dict[str, str]) -> None:
    generated = client.post(
        "/api/admin/images/generate",
        json={"prompt": "mountains", "ratio": "1:1", "style": "anime"},
        headers=admin_headers,
    )
    assert generated.status_code == 200
    assert generated.json()["metadata"]["width"] == 1024

    uploaded = client.post(
        "/api/admin/images/upload",
        files={"file": ("photo.png", b"\x89PNG", "image/png")},
        headers=admin_headers,
    )
    assert uploaded.status_code == 201
    assert uploaded.json()["key"].startswith("uploads/")

    rejected = client.post(
        "/api/admin/images/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert rejected.status_code == 400


def test_sitemap_lists_static_routes_and_published_articles(
    client: TestClient, admin_headers: dict[str, str]
) -> None:
    _create(client, admin_headers, "Sitemap Entry", publish=True, locale="zh")
    _create(client, admin_headers, "Hidden Draft")

    response = client.get("/sitemap.xml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    body = response.text
    assert "/en</loc>" in body
    assert "/zh/about</loc>" in body
    assert "/en/blogs</loc>" in body
    assert "/zh/blog/sitemap-entry</loc>" in body
    assert "hidden-draft" not in body
