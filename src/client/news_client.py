from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from src.cms.core.constants import EXCERPT_LENGTH, UPLOADS_URL_PREFIX
from src.cms.core.logger import get_logger
from src.cms.schemas.news_schemas import NewsArticle, NewsArticleData

logger = get_logger(__name__)

TokenGetter = Callable[[], Awaitable[str | None]]

DEFAULT_API_BASE_URL = "http://localhost:8000/api"

# (filename, content, content_type)
ImageFile = tuple[str, bytes, str]


class NewsApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def api_origin(api_base_url: str) -> str:
    """http://host:8000/api -> http://host:8000"""
    base = api_base_url.rstrip("/")
    if base.endswith("/api"):
        base = base[: -len("/api")]
    return base


def normalize_image_url(image_url: str | None, base_origin: str) -> str | None:
    if not image_url:
        return None

    if image_url.startswith(("http://", "https://")):
        return image_url

    if image_url.startswith(f"{UPLOADS_URL_PREFIX}/"):
        return f"{base_origin.rstrip('/')}{image_url}"

    return image_url


def excerpt(article: NewsArticle, length: int = EXCERPT_LENGTH) -> str:
    """summary, а если его нет, начало content."""
    if article.summary:
        return article.summary
    return article.content[:length] + "..."


class NewsApiClient:
    """
    Клиент HTTP API новостей.

    Публичные чтения идут без токена; create/update/delete получают
    `Authorization: Bearer <token>`, токен запрашивается у token_getter
    заново на каждый запрос.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        token_getter: TokenGetter | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.origin = api_origin(self.base_url)
        self.token_getter = token_getter
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> NewsApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def set_token_getter(self, token_getter: TokenGetter | None) -> None:
        self.token_getter = token_getter

    async def _auth_headers(self) -> dict[str, str]:
        if self.token_getter is None:
            return {}
        try:
            token = await self.token_getter()
        except Exception as exc:
            logger.error("Failed to get auth token: %s", exc, exc_info=True)
            return {}
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        auth: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = await self._auth_headers() if auth else {}
        logger.debug("API Request: %s %s", method, url)

        resp = await self._client.request(method, url, headers=headers, **kwargs)

        if resp.is_error:
            message = resp.reason_phrase or f"HTTP {resp.status_code}"
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
            logger.error("API Response Error: %s %s -> %s %s", method, url, resp.status_code, message)
            raise NewsApiError(message, status_code=resp.status_code)

        return resp.json()

    def _article(self, raw: dict[str, Any]) -> NewsArticle:
        article = NewsArticle.model_validate(raw)
        return article.model_copy(
            update={"image_url": normalize_image_url(article.image_url, self.origin)}
        )

    @staticmethod
    def _form(data: NewsArticleData) -> dict[str, str]:
        form = {
            "title": data.title,
            "content": data.content,
            "category": data.category,
            "is_featured": "true" if data.is_featured else "false",
        }
        if data.summary:
            form["summary"] = data.summary
        return form

    async def get_all(
        self,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[NewsArticle]:
        params = {
            key: value
            for key, value in {"search": search, "page": page, "limit": limit}.items()
            if value is not None
        }
        body = await self._request("GET", "/news", params=params)
        return [self._article(item) for item in body["data"]]

    async def search(self, query: str) -> list[NewsArticle]:
        return await self.get_all(search=query)

    async def get_by_id(self, article_id: int) -> NewsArticle:
        body = await self._request("GET", f"/news/{article_id}")
        return self._article(body["data"])

    async def get_featured(self) -> NewsArticle | None:
        body = await self._request("GET", "/news/featured")
        return self._article(body["data"]) if body.get("data") else None

    async def get_latest(self, limit: int = 4) -> list[NewsArticle]:
        body = await self._request("GET", "/news/latest", params={"limit": limit})
        return [self._article(item) for item in body["data"]]

    async def create(self, data: NewsArticleData, image: ImageFile | None = None) -> NewsArticle:
        files = {"image": image} if image is not None else None
        body = await self._request("POST", "/news", auth=True, data=self._form(data), files=files)
        return self._article(body["data"])

    async def update(
        self,
        article_id: int,
        data: NewsArticleData,
        image: ImageFile | None = None,
    ) -> NewsArticle:
        files = {"image": image} if image is not None else None
        body = await self._request(
            "PUT",
            f"/news/{article_id}",
            auth=True,
            data=self._form(data),
            files=files,
        )
        return self._article(body["data"])

    async def delete(self, article_id: int) -> None:
        await self._request("DELETE", f"/news/{article_id}", auth=True)
