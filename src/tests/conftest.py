from __future__ import annotations

import os
import tempfile
from typing import AsyncGenerator

import pytest


_TMP_ROOT = tempfile.mkdtemp(prefix="cms-tests-")

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CMS_ENVIRONMENT", "development")
os.environ.setdefault("CMS_UPLOADS_DIR", os.path.join(_TMP_ROOT, "uploads"))
os.environ.setdefault("CMS_LOG_DIR", os.path.join(_TMP_ROOT, "logs"))
os.environ.setdefault("CMS_AUTH_JWKS_URL", "")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def database() -> AsyncGenerator["NewsDatabase", None]:
    from src.cms.db.session import NewsDatabase

    db = NewsDatabase("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def news_service(database):
    from src.cms.services.news_service import NewsService

    return NewsService(database)


@pytest.fixture
def article_data():
    from src.cms.schemas.news_schemas import NewsArticleData

    def _make(**overrides) -> NewsArticleData:
        fields = {
            "title": "Local Team Wins Derby",
            "content": "The home side won the derby in front of a record crowd.",
            "summary": None,
            "image_url": None,
            "category": "SPORTS",
            "is_featured": False,
        }
        fields.update(overrides)
        return NewsArticleData(**fields)

    return _make
