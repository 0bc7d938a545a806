from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.cms.core.logger import get_logger
from src.cms.db.base import Base

logger = get_logger(__name__)


def _engine_options(database_url: str) -> dict[str, Any]:
    # in-memory SQLite живёт ровно столько, сколько одно соединение
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {}


class NewsDatabase:
    """
    Владелец async-движка и фабрики сессий.

    Создаётся явно при старте приложения и передаётся в NewsService;
    при остановке обязательно вызывается dispose().
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            future=True,
            **_engine_options(database_url),
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        from src.cms import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Таблицы созданы или уже существуют")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def __aenter__(self) -> NewsDatabase:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()
