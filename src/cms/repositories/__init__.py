from .news_repo import ChangeResult, NewsRepository

__all__ = [
    "ChangeResult",
    "NewsRepository",
]
