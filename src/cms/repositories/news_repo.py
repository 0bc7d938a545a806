from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import ColumnElement, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.cms.core.constants import (
    DEFAULT_LATEST_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
)
from src.cms.models.news_models import News, utcnow
from src.cms.repositories.base import BaseRepository
from src.cms.schemas.news_schemas import NewsArticleData


@dataclass(frozen=True)
class ChangeResult:
    changed: bool


class NewsRepository(BaseRepository[News]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, News)

    @staticmethod
    def _search_clause(search_query: str) -> ColumnElement[bool]:
        return or_(
            News.title.icontains(search_query, autoescape=True),
            News.content.icontains(search_query, autoescape=True),
            News.category.icontains(search_query, autoescape=True),
        )

    async def list_articles(
        self,
        search_query: str = "",
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> list[News]:
        stmt = select(News)
        if search_query:
            stmt = stmt.where(self._search_clause(search_query))
        stmt = (
            stmt.order_by(News.created_at.desc(), News.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def count_articles(self, search_query: str = "") -> int:
        stmt = select(func.count(News.id))
        if search_query:
            stmt = stmt.where(self._search_clause(search_query))
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def get_article(self, article_id: int) -> News | None:
        return await self.get(article_id)

    async def create_article(self, data: NewsArticleData) -> News:
        now = utcnow()
        return await self.create(
            {**data.model_dump(), "created_at": now, "updated_at": now}
        )

    async def update_article(self, article_id: int, data: NewsArticleData) -> ChangeResult:
        stmt = (
            update(News)
            .where(News.id == article_id)
            .values(**data.model_dump(), updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return ChangeResult(changed=result.rowcount > 0)

    async def delete_article(self, article_id: int) -> ChangeResult:
        stmt = (
            delete(News)
            .where(News.id == article_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return ChangeResult(changed=result.rowcount > 0)

    async def get_featured_article(self) -> News | None:
        stmt = (
            select(News)
            .where(News.is_featured.is_(True))
            .order_by(News.created_at.desc(), News.id.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_latest_articles(self, limit: int = DEFAULT_LATEST_LIMIT) -> list[News]:
        stmt = (
            select(News)
            .where(News.is_featured.is_(False))
            .order_by(News.created_at.desc(), News.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())
