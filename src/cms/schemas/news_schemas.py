# src/cms/schemas/news_schemas.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.cms.core.constants import SUMMARY_MAX_LENGTH, TITLE_MAX_LENGTH


class NewsArticleData(BaseModel):
  """Изменяемые поля статьи: то, что пишется при create/update."""

  title: str = Field(max_length=TITLE_MAX_LENGTH)
  content: str
  summary: str | None = Field(default=None, max_length=SUMMARY_MAX_LENGTH)
  image_url: str | None = None
  category: str
  is_featured: bool = False


class NewsArticle(NewsArticleData):
  id: int
  created_at: datetime
  updated_at: datetime

  model_config = ConfigDict(from_attributes=True)


class FieldErrorItem(BaseModel):
  field: str
  message: str


class Pagination(BaseModel):
  page: int
  limit: int
  total: int


class ArticleResponse(BaseModel):
  success: bool = True
  message: str | None = None
  data: NewsArticle | None = None


class ArticleListResponse(BaseModel):
  success: bool = True
  data: list[NewsArticle]


class PaginatedArticlesResponse(ArticleListResponse):
  pagination: Pagination


class MessageResponse(BaseModel):
  success: bool = True
  message: str


class ErrorResponse(BaseModel):
  success: bool = False
  message: str
  errors: list[FieldErrorItem] | None = None
  error: str | None = None


class HealthResponse(BaseModel):
  status: str
  timestamp: datetime
