from __future__ import annotations

import asyncio

from src.cms.core.config import settings
from src.cms.core.constants import NewsCategory
from src.cms.core.logger import get_logger
from src.cms.db.session import NewsDatabase
from src.cms.schemas.news_schemas import NewsArticleData
from src.cms.services.news_service import NewsService

logger = get_logger(__name__)

SAMPLE_NEWS: list[NewsArticleData] = [
    NewsArticleData(
        title="Breaking News: Market Hits Record Highs",
        content=(
            "The stock market reached unprecedented levels today, with major indices "
            "posting significant gains. Investors are optimistic about the economic "
            "outlook as corporate earnings continue to exceed expectations."
        ),
        summary="The stock market reached unprecedented levels today, with major indices posting significant gains.",
        category=NewsCategory.BUSINESS.value,
        is_featured=True,
    ),
    NewsArticleData(
        title="Local Community Rallies to Support Cleanup Event",
        content=(
            "Hundreds of volunteers gathered at the city's annual cleanup event this "
            "weekend. Volunteers of all ages collected over 2 tons of litter and "
            "recyclables from local parks and waterways."
        ),
        summary="Hundreds of volunteers gathered at the city's annual cleanup event this weekend.",
        category=NewsCategory.COMMUNITY.value,
    ),
    NewsArticleData(
        title="New Restaurant Opens Downtown",
        content=(
            "A trendy new restaurant has opened in the heart of downtown, offering "
            "diverse cuisines with locally sourced ingredients and an innovative menu."
        ),
        summary="A trendy new restaurant has opened in the heart of downtown, offering diverse cuisines.",
        category=NewsCategory.BUSINESS.value,
    ),
    NewsArticleData(
        title="Tech Conference Highlights Latest Innovations",
        content=(
            "Industry leaders showcased cutting-edge technologies at the annual tech "
            "conference, from artificial intelligence to quantum computing."
        ),
        summary="Industry leaders showcased cutting-edge technologies at the annual tech conference.",
        category=NewsCategory.SCIENCE.value,
    ),
    NewsArticleData(
        title="Championship Game Ends in Thrilling Overtime",
        content=(
            "The championship game concluded in a nail-biting overtime. The winning "
            "goal came in the final minutes, securing the title for the home team."
        ),
        summary="The championship game concluded in a nail-biting overtime that kept fans on the edge of their seats.",
        category=NewsCategory.SPORTS.value,
    ),
]


async def seed(service: NewsService, articles: list[NewsArticleData] = SAMPLE_NEWS) -> int:
    for data in articles:
        created = await service.create_news(data)
        logger.info(f"Создана статья: {created.title} (ID: {created.id})")
    return len(articles)


async def main() -> None:
    logger.info("Заполняю базу тестовыми новостями...")
    async with NewsDatabase(settings.database_url) as database:
        await database.create_all()
        count = await seed(NewsService(database))
    logger.info(f"Готово, создано статей: {count}")


if __name__ == "__main__":
    asyncio.run(main())
