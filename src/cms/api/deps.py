# src/cms/api/deps.py
from __future__ import annotations

from fastapi import Depends, Header, Request

from src.cms.core.exceptions import AuthError
from src.cms.services.auth_service import Editor, IdentityVerifier
from src.cms.services.news_service import NewsStore
from src.cms.services.upload_service import UploadService


def get_news_service(request: Request) -> NewsStore:
  return request.app.state.news_service


def get_upload_service(request: Request) -> UploadService:
  return request.app.state.upload_service


def get_identity_verifier(request: Request) -> IdentityVerifier:
  return request.app.state.identity_verifier


def get_current_editor(
  authorization: str | None = Header(default=None),
  verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Editor:
  """
  Bearer-токен из заголовка Authorization, проверенный у провайдера.
  Обычная (не async) функция: PyJWKClient ходит за ключами синхронно,
  FastAPI выполнит её в threadpool.
  """
  if not authorization:
    raise AuthError("Authorization header is required")

  scheme, _, token = authorization.partition(" ")
  if scheme.lower() != "bearer" or not token.strip():
    raise AuthError("Bearer token is required")

  return verifier.verify(token.strip())
