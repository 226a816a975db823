from __future__ import annotations

import pytest
from sqlalchemy import func, select

from bytespark.core import database
from bytespark.core.config import AppSettings
from bytespark.models import Article


@pytest.fixture()
def sqlite_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    settings = AppSettings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}")
    monkeypatch.setattr(database, "get_settings", lambda: settings)
    return settings


def test_session_factory_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(database, "get_settings", lambda: AppSettings(DATABASE_URL=None))
    monkeypatch.setattr(database, "_session_factory", None)

    with pytest.raises(RuntimeError):
        database.get_session_factory()


def test_alembic_config_points_at_project_scripts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        database,
        "get_settings",
        lambda: AppSettings(DATABASE_URL="postgresql+asyncpg://blog:p%40ss@db/blog"),
    )

    config = database._alembic_config()

    assert config.get_main_option("script_location").endswith("alembic")
    assert config.get_main_option("sqlalchemy.url") == "postgresql+asyncpg://blog:p%40ss@db/blog"


@pytest.mark.asyncio
async def test_session_scope_commits_and_rolls_back(sqlite_settings) -> None:
    await database.dispose_engine()
    engine_factory = database.get_session_factory()
    async with engine_factory() as session:
        connection = await session.connection()
        await connection.run_sync(Article.__table__.create)
        await session.commit()

    async with database.session_scope() as session:
        session.add(Article(slug="kept", title="Kept", content="Body"))

    with pytest.raises(RuntimeError):
        async with database.session_scope() as session:
            session.add(Article(slug="dropped", title="Dropped", content="Body"))
            await session.flush()
            raise RuntimeError("abort")

    async with database.session_scope() as session:
        total = (await session.execute(select(func.count(Article.id)))).scalar_one()
    assert total == 1

    await database.dispose_engine()
