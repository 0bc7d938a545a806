from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.cms.core.constants import (
    DEFAULT_LATEST_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
)
from src.cms.core.logger import get_logger
from src.cms.db.session import NewsDatabase
from src.cms.repositories.news_repo import ChangeResult, NewsRepository
from src.cms.schemas.news_schemas import NewsArticle, NewsArticleData

logger = get_logger(__name__)


class NewsStore(Protocol):
    """Контракт, которым пользуются роуты. Реализация хранилища заменяема."""

    async def get_all_news(
        self,
        search_query: str = "",
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> list[NewsArticle]: ...

    async def get_news_by_id(self, article_id: int) -> NewsArticle | None: ...

    async def create_news(self, data: NewsArticleData) -> NewsArticle: ...

    async def update_news(self, article_id: int, data: NewsArticleData) -> ChangeResult: ...

    async def delete_news(self, article_id: int) -> ChangeResult: ...

    async def get_featured_news(self) -> NewsArticle | None: ...

    async def get_latest_news(self, limit: int = DEFAULT_LATEST_LIMIT) -> list[NewsArticle]: ...


@runtime_checkable
class CountingNewsStore(Protocol):
    """Необязательное расширение: полное число совпадений для пагинации."""

    async def count_news(self, search_query: str = "") -> int: ...


class NewsService:
    """
    NewsStore (и CountingNewsStore) поверх SQLAlchemy.

    Каждая операция берёт свою сессию у NewsDatabase и закрывает её на выходе,
    записи коммитятся внутри операции.
    """

    def __init__(self, database: NewsDatabase) -> None:
        self.database = database

    async def get_all_news(
        self,
        search_query: str = "",
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> list[NewsArticle]:
        async with self.database.session() as db:
            rows = await NewsRepository(db).list_articles(search_query, page, limit)
            return [NewsArticle.model_validate(row) for row in rows]

    async def count_news(self, search_query: str = "") -> int:
        async with self.database.session() as db:
            return await NewsRepository(db).count_articles(search_query)

    async def get_news_by_id(self, article_id: int) -> NewsArticle | None:
        async with self.database.session() as db:
            row = await NewsRepository(db).get_article(article_id)
            return NewsArticle.model_validate(row) if row is not None else None

    async def create_news(self, data: NewsArticleData) -> NewsArticle:
        async with self.database.session() as db:
            row = await NewsRepository(db).create_article(data)
            await db.commit()
            logger.info("Создана статья id=%s: %s", row.id, row.title)
            return NewsArticle.model_validate(row)

    async def update_news(self, article_id: int, data: NewsArticleData) -> ChangeResult:
        async with self.database.session() as db:
            result = await NewsRepository(db).update_article(article_id, data)
            await db.commit()
            if result.changed:
                logger.info("Обновлена статья id=%s", article_id)
            return result

    async def delete_news(self, article_id: int) -> ChangeResult:
        async with self.database.session() as db:
            result = await NewsRepository(db).delete_article(article_id)
            await db.commit()
            if result.changed:
                logger.info("Удалена статья id=%s", article_id)
            return result

    async def get_featured_news(self) -> NewsArticle | None:
        async with self.database.session() as db:
            row = await NewsRepository(db).get_featured_article()
            return NewsArticle.model_validate(row) if row is not None else None

    async def get_latest_news(self, limit: int = DEFAULT_LATEST_LIMIT) -> list[NewsArticle]:
        async with self.database.session() as db:
            rows = await NewsRepository(db).list_latest_articles(limit)
            return [NewsArticle.model_validate(row) for row in rows]
