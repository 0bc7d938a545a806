# src/cms/core/constants.py
from __future__ import annotations

from enum import Enum


class NewsCategory(str, Enum):
    """Рекомендуемые категории. В БД категория хранится как обычная строка."""

    COMMUNITY = "COMMUNITY"
    BUSINESS = "BUSINESS"
    SCIENCE = "SCIENCE"
    SPORTS = "SPORTS"


TITLE_MAX_LENGTH: int = 255
SUMMARY_MAX_LENGTH: int = 500

# Длина "выжимки" из content, когда summary не задан
EXCERPT_LENGTH: int = 150

DEFAULT_PAGE: int = 1
DEFAULT_PAGE_LIMIT: int = 10
DEFAULT_LATEST_LIMIT: int = 4

UPLOADS_URL_PREFIX: str = "/uploads"

ALLOWED_IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".jpeg", ".jpg", ".png", ".gif", ".webp"}
)
ALLOWED_IMAGE_CONTENT_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)
