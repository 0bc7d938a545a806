# src/cms/api/routes/news_router.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from src.cms.api.deps import get_current_editor, get_news_service, get_upload_service
from src.cms.api.forms import NewsForm, news_form
from src.cms.core.constants import DEFAULT_LATEST_LIMIT, DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from src.cms.core.exceptions import ArticleNotFound, ValidationFailed
from src.cms.core.logger import get_logger
from src.cms.schemas.news_schemas import (
  ArticleListResponse,
  ArticleResponse,
  MessageResponse,
  PaginatedArticlesResponse,
  Pagination,
)
from src.cms.services.auth_service import Editor
from src.cms.services.news_service import CountingNewsStore, NewsStore
from src.cms.services.upload_service import UploadService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/news", tags=["News"])


def parse_article_id(raw: str) -> int:
  # нечисловой id ведёт себя как несуществующая статья
  try:
    return int(raw)
  except ValueError:
    raise ArticleNotFound() from None


@router.get("", response_model=PaginatedArticlesResponse)
@router.get("/", response_model=PaginatedArticlesResponse, include_in_schema=False)
async def list_news(
  search: str = "",
  page: int = Query(DEFAULT_PAGE, ge=1),
  limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1),
  service: NewsStore = Depends(get_news_service),
) -> PaginatedArticlesResponse:
  articles = await service.get_all_news(search, page, limit)
  if isinstance(service, CountingNewsStore):
    total = await service.count_news(search)
  else:
    total = len(articles)
  return PaginatedArticlesResponse(
    data=articles,
    pagination=Pagination(page=page, limit=limit, total=total),
  )


@router.get("/featured", response_model=ArticleResponse)
async def featured_news(
  service: NewsStore = Depends(get_news_service),
) -> ArticleResponse:
  return ArticleResponse(data=await service.get_featured_news())


@router.get("/latest", response_model=ArticleListResponse)
async def latest_news(
  limit: int = Query(DEFAULT_LATEST_LIMIT, ge=1),
  service: NewsStore = Depends(get_news_service),
) -> ArticleListResponse:
  return ArticleListResponse(data=await service.get_latest_news(limit))


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_news(
  article_id: str,
  service: NewsStore = Depends(get_news_service),
) -> ArticleResponse:
  article = await service.get_news_by_id(parse_article_id(article_id))
  if article is None:
    raise ArticleNotFound()
  return ArticleResponse(data=article)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
@router.post(
  "/",
  response_model=ArticleResponse,
  status_code=status.HTTP_201_CREATED,
  include_in_schema=False,
)
async def create_news(
  form: NewsForm = Depends(news_form),
  service: NewsStore = Depends(get_news_service),
  uploads: UploadService = Depends(get_upload_service),
  editor: Editor = Depends(get_current_editor),
) -> ArticleResponse:
  errors = form.validate()
  if errors:
    raise ValidationFailed(errors)

  image_url = await uploads.save_image(form.image) if form.has_image else None
  try:
    created = await service.create_news(form.to_data(image_url))
  except Exception:
    uploads.discard(image_url)
    raise

  logger.info(f"Редактор {editor.user_id} создал статью #{created.id}")
  return ArticleResponse(message="News article created successfully", data=created)


@router.put("/{article_id}", response_model=ArticleResponse)
async def update_news(
  article_id: str,
  form: NewsForm = Depends(news_form),
  service: NewsStore = Depends(get_news_service),
  uploads: UploadService = Depends(get_upload_service),
  editor: Editor = Depends(get_current_editor),
) -> ArticleResponse:
  news_id = parse_article_id(article_id)
  existing = await service.get_news_by_id(news_id)
  if existing is None:
    raise ArticleNotFound()

  errors = form.validate()
  if errors:
    raise ValidationFailed(errors)

  new_image = await uploads.save_image(form.image) if form.has_image else None
  # без нового файла оставляем старую картинку
  image_url = new_image or existing.image_url

  try:
    result = await service.update_news(news_id, form.to_data(image_url))
  except Exception:
    uploads.discard(new_image)
    raise

  if not result.changed:
    uploads.discard(new_image)
    raise ArticleNotFound()

  if new_image and existing.image_url != new_image:
    uploads.discard(existing.image_url)

  updated = await service.get_news_by_id(news_id)
  if updated is None:
    raise ArticleNotFound()

  logger.info(f"Редактор {editor.user_id} обновил статью #{news_id}")
  return ArticleResponse(message="News article updated successfully", data=updated)


@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_news(
  article_id: str,
  service: NewsStore = Depends(get_news_service),
  editor: Editor = Depends(get_current_editor),
) -> MessageResponse:
  news_id = parse_article_id(article_id)
  result = await service.delete_news(news_id)
  if not result.changed:
    raise ArticleNotFound()

  logger.info(f"Редактор {editor.user_id} удалил статью #{news_id}")
  return MessageResponse(message="News article deleted successfully")
