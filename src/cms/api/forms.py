# src/cms/api/forms.py
from __future__ import annotations

from dataclasses import dataclass

from fastapi import File, Form, UploadFile

from src.cms.core.constants import SUMMARY_MAX_LENGTH, TITLE_MAX_LENGTH
from src.cms.core.exceptions import FieldError
from src.cms.schemas.news_schemas import NewsArticleData

_TRUE_VALUES = {"true", "1", "on", "yes"}


def coerce_featured(value: str | bool | None) -> bool:
  if isinstance(value, bool):
    return value
  if value is None:
    return False
  return value.strip().lower() in _TRUE_VALUES


@dataclass
class NewsForm:
  title: str
  content: str
  category: str
  summary: str | None
  is_featured: bool
  image: UploadFile | None

  def validate(self) -> list[FieldError]:
    errors: list[FieldError] = []

    if not self.title.strip():
      errors.append(FieldError("title", "Title is required"))
    if not self.content.strip():
      errors.append(FieldError("content", "Content is required"))
    if not self.category.strip():
      errors.append(FieldError("category", "Category is required"))
    if len(self.title) > TITLE_MAX_LENGTH:
      errors.append(FieldError("title", "Title too long"))
    if self.summary and len(self.summary) > SUMMARY_MAX_LENGTH:
      errors.append(FieldError("summary", "Summary too long"))

    return errors

  @property
  def has_image(self) -> bool:
    # браузер присылает пустое file-поле, если картинку не выбрали
    return self.image is not None and bool(self.image.filename)

  def to_data(self, image_url: str | None) -> NewsArticleData:
    return NewsArticleData(
      title=self.title,
      content=self.content,
      summary=self.summary or None,
      image_url=image_url,
      category=self.category,
      is_featured=self.is_featured,
    )


async def news_form(
  title: str = Form(""),
  content: str = Form(""),
  category: str = Form(""),
  summary: str | None = Form(None),
  is_featured: str | None = Form(None),
  image: UploadFile | None = File(None),
) -> NewsForm:
  return NewsForm(
    title=title,
    content=content,
    category=category,
    summary=summary if summary and summary.strip() else None,
    is_featured=coerce_featured(is_featured),
    image=image,
  )
