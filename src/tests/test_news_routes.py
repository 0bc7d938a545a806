from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from src.cms.api import deps
from src.cms.api.errors import register_exception_handlers
from src.cms.api.forms import coerce_featured
from src.cms.api.routes import news_router
from src.cms.core.exceptions import AuthError
from src.cms.repositories.news_repo import ChangeResult
from src.cms.schemas.news_schemas import NewsArticle, NewsArticleData
from src.cms.services.auth_service import Editor
from src.cms.services.upload_service import UploadService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeNewsStore:
    """In-memory NewsStore: без БД, та же семантика сортировки и поиска."""

    def __init__(self) -> None:
        self.rows: dict[int, NewsArticle] = {}
        self._next_id = 1
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _ordered(self) -> list[NewsArticle]:
        return sorted(self.rows.values(), key=lambda a: (a.created_at, a.id), reverse=True)

    def _matches(self, article: NewsArticle, query: str) -> bool:
        query = query.lower()
        return any(query in value.lower() for value in (article.title, article.content, article.category))

    async def get_all_news(self, search_query: str = "", page: int = 1, limit: int = 10) -> list[NewsArticle]:
        rows = [a for a in self._ordered() if not search_query or self._matches(a, search_query)]
        offset = (page - 1) * limit
        return rows[offset:offset + limit]

    async def count_news(self, search_query: str = "") -> int:
        return len([a for a in self.rows.values() if not search_query or self._matches(a, search_query)])

    async def get_news_by_id(self, article_id: int) -> NewsArticle | None:
        return self.rows.get(article_id)

    def add(self, data: NewsArticleData) -> NewsArticle:
        now = self._tick()
        article = NewsArticle(id=self._next_id, created_at=now, updated_at=now, **data.model_dump())
        self.rows[article.id] = article
        self._next_id += 1
        return article

    async def create_news(self, data: NewsArticleData) -> NewsArticle:
        return self.add(data)

    async def update_news(self, article_id: int, data: NewsArticleData) -> ChangeResult:
        existing = self.rows.get(article_id)
        if existing is None:
            return ChangeResult(changed=False)
        self.rows[article_id] = existing.model_copy(update={**data.model_dump(), "updated_at": self._tick()})
        return ChangeResult(changed=True)

    async def delete_news(self, article_id: int) -> ChangeResult:
        return ChangeResult(changed=self.rows.pop(article_id, None) is not None)

    async def get_featured_news(self) -> NewsArticle | None:
        return next((a for a in self._ordered() if a.is_featured), None)

    async def get_latest_news(self, limit: int = 4) -> list[NewsArticle]:
        return [a for a in self._ordered() if not a.is_featured][:limit]


@pytest.fixture
def store() -> FakeNewsStore:
    return FakeNewsStore()


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def app(store: FakeNewsStore, uploads_dir: Path) -> FastAPI:
    app = FastAPI()
    app.include_router(news_router.router)
    register_exception_handlers(app)

    upload_service = UploadService(uploads_dir, max_bytes=1024)

    async def override_get_current_editor() -> Editor:
        return Editor(user_id="user_editor")

    app.dependency_overrides[deps.get_news_service] = lambda: store
    app.dependency_overrides[deps.get_upload_service] = lambda: upload_service
    app.dependency_overrides[deps.get_current_editor] = override_get_current_editor
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as client:
        yield client


def _form(**overrides) -> dict[str, str]:
    form = {
        "title": "Harbour festival returns",
        "content": "Boats, music and food stalls along the pier.",
        "category": "COMMUNITY",
    }
    form.update(overrides)
    return form


def _seed(store: FakeNewsStore, **overrides) -> NewsArticle:
    fields = {"title": "Seeded", "content": "Body", "category": "SPORTS"}
    fields.update(overrides)
    return store.add(NewsArticleData(**fields))


@pytest.mark.api
@pytest.mark.news
class TestNewsReadEndpoints:
    def test_list_returns_pagination_envelope(self, client: TestClient, store: FakeNewsStore) -> None:
        for index in range(3):
            _seed(store, title=f"Story {index}")

        response = client.get("/api/news", params={"page": 1, "limit": 2})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert [item["title"] for item in body["data"]] == ["Story 2", "Story 1"]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3}

    def test_list_passes_search(self, client: TestClient, store: FakeNewsStore) -> None:
        _seed(store, title="Stadium news", category="SPORTS")
        _seed(store, title="Bank merger", category="BUSINESS")

        body = client.get("/api/news", params={"search": "bank"}).json()

        assert [item["title"] for item in body["data"]] == ["Bank merger"]
        assert body["pagination"]["total"] == 1

    def test_list_rejects_zero_page(self, client: TestClient) -> None:
        response = client.get("/api/news", params={"page": 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "page"

    def test_featured_is_null_when_absent(self, client: TestClient) -> None:
        response = client.get("/api/news/featured")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "message": None, "data": None}

    def test_latest_excludes_featured(self, client: TestClient, store: FakeNewsStore) -> None:
        plain = _seed(store, title="Plain")
        _seed(store, title="Top story", is_featured=True)

        body = client.get("/api/news/latest", params={"limit": 5}).json()

        assert [item["id"] for item in body["data"]] == [plain.id]

    def test_get_by_id(self, client: TestClient, store: FakeNewsStore) -> None:
        article = _seed(store)

        response = client.get(f"/api/news/{article.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["title"] == "Seeded"

    def test_get_unknown_id_is_404(self, client: TestClient) -> None:
        response = client.get("/api/news/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "message": "News article not found"}


@pytest.mark.api
@pytest.mark.news
class TestNewsWriteEndpoints:
    def test_create_returns_201_with_record(self, client: TestClient, store: FakeNewsStore) -> None:
        response = client.post("/api/news", data=_form(is_featured="true", summary="Short"))

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "News article created successfully"
        assert body["data"]["is_featured"] is True
        assert body["data"]["summary"] == "Short"
        assert body["data"]["image_url"] is None
        assert body["data"]["id"] in store.rows

    def test_create_stores_blank_summary_as_null(self, client: TestClient) -> None:
        response = client.post("/api/news", data=_form(summary="   ", is_featured="no"))

        data = response.json()["data"]
        assert data["summary"] is None
        assert data["is_featured"] is False

    def test_create_collects_validation_errors(self, client: TestClient, store: FakeNewsStore) -> None:
        response = client.post(
            "/api/news",
            data={"title": "x" * 256, "content": "  ", "category": "", "summary": "s" * 501},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["message"] == "Validation errors"
        assert {(e["field"], e["message"]) for e in body["errors"]} == {
            ("content", "Content is required"),
            ("category", "Category is required"),
            ("title", "Title too long"),
            ("summary", "Summary too long"),
        }
        assert store.rows == {}

    def test_create_with_image_saves_upload(self, client: TestClient, uploads_dir: Path) -> None:
        response = client.post(
            "/api/news",
            data=_form(),
            files={"image": ("photo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == status.HTTP_201_CREATED
        image_url = response.json()["data"]["image_url"]
        assert image_url.startswith("/uploads/")
        assert image_url.endswith(".png")
        assert (uploads_dir / image_url.removeprefix("/uploads/")).read_bytes() == PNG_BYTES

    def test_create_rejects_non_image(self, client: TestClient, store: FakeNewsStore) -> None:
        response = client.post(
            "/api/news",
            data=_form(),
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            "success": False,
            "message": "File upload error",
            "error": "Only image files are allowed",
        }
        assert store.rows == {}

    def test_update_keeps_existing_image(self, client: TestClient, store: FakeNewsStore) -> None:
        article = _seed(store, image_url="/uploads/old.png")

        response = client.put(f"/api/news/{article.id}", data=_form(title="Renamed"))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["title"] == "Renamed"
        assert data["image_url"] == "/uploads/old.png"
        assert data["created_at"] == article.created_at.isoformat().replace("+00:00", "Z")
        assert data["updated_at"] > data["created_at"]

    def test_update_replaces_image_when_uploaded(self, client: TestClient, store: FakeNewsStore) -> None:
        article = _seed(store, image_url="/uploads/old.png")

        response = client.put(
            f"/api/news/{article.id}",
            data=_form(),
            files={"image": ("new.webp", PNG_BYTES, "image/webp")},
        )

        assert response.json()["data"]["image_url"].endswith(".webp")

    def test_update_unknown_id_is_404(self, client: TestClient, store: FakeNewsStore) -> None:
        response = client.put("/api/news/77", data=_form())

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert store.rows == {}

    def test_update_validates_form(self, client: TestClient, store: FakeNewsStore) -> None:
        article = _seed(store)

        response = client.put(f"/api/news/{article.id}", data=_form(title=""))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert store.rows[article.id].title == "Seeded"

    def test_delete(self, client: TestClient, store: FakeNewsStore) -> None:
        article = _seed(store)

        response = client.delete(f"/api/news/{article.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "message": "News article deleted successfully"}
        assert article.id not in store.rows

    def test_delete_unknown_id_is_404(self, client: TestClient) -> None:
        response = client.delete("/api/news/5")

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.api
@pytest.mark.auth
class TestWriteEndpointsRequireAuth:
    @pytest.fixture
    def client(self, app: FastAPI) -> Generator[TestClient, None, None]:
        def reject() -> Editor:
            raise AuthError("Bearer token is required")

        app.dependency_overrides[deps.get_current_editor] = reject
        with TestClient(app) as client:
            yield client

    def test_create_without_token_is_401(self, client: TestClient, store: FakeNewsStore) -> None:
        response = client.post("/api/news", data=_form())

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Not authenticated"
        assert store.rows == {}

    def test_delete_without_token_is_401(self, client: TestClient) -> None:
        assert client.delete("/api/news/1").status_code == status.HTTP_401_UNAUTHORIZED

    def test_reads_stay_public(self, client: TestClient) -> None:
        assert client.get("/api/news").status_code == status.HTTP_200_OK


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, False),
        (True, True),
        (False, False),
        ("true", True),
        ("TRUE", True),
        ("1", True),
        ("on", True),
        ("false", False),
        ("", False),
        ("maybe", False),
    ],
)
def test_coerce_featured(raw, expected) -> None:
    assert coerce_featured(raw) is expected


class BrokenNewsStore(FakeNewsStore):
    async def create_news(self, data: NewsArticleData) -> NewsArticle:
        raise RuntimeError("db down")

    async def update_news(self, article_id: int, data: NewsArticleData) -> ChangeResult:
        raise RuntimeError("db down")


class ListOnlyStore:
    """Хранилище без count_news: total берётся по длине страницы."""

    def __init__(self, store: FakeNewsStore) -> None:
        self.store = store

    async def get_all_news(self, search_query: str = "", page: int = 1, limit: int = 10) -> list[NewsArticle]:
        return await self.store.get_all_news(search_query, page, limit)


@pytest.mark.api
@pytest.mark.news
class TestNewsRouting:
    def test_list_with_trailing_slash(self, client: TestClient, store: FakeNewsStore) -> None:
        _seed(store)

        response = client.get("/api/news/", follow_redirects=False)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["pagination"]["total"] == 1

    def test_create_with_trailing_slash(self, client: TestClient, store: FakeNewsStore) -> None:
        response = client.post("/api/news/", data=_form(), follow_redirects=False)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["id"] in store.rows

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    def test_non_numeric_id_is_404(self, client: TestClient, method: str) -> None:
        data = _form() if method == "PUT" else None

        response = client.request(method, "/api/news/abc", data=data)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "message": "News article not found"}

    def test_total_without_counting_store(self, app: FastAPI, store: FakeNewsStore) -> None:
        for index in range(3):
            _seed(store, title=f"Story {index}")
        app.dependency_overrides[deps.get_news_service] = lambda: ListOnlyStore(store)

        with TestClient(app) as client:
            body = client.get("/api/news", params={"limit": 2}).json()

        assert [item["title"] for item in body["data"]] == ["Story 2", "Story 1"]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 2}


@pytest.mark.api
@pytest.mark.news
class TestNewsFieldLimits:
    @pytest.mark.parametrize(
        ("field", "size", "message"),
        [
            ("title", 255, None),
            ("title", 256, "Title too long"),
            ("summary", 500, None),
            ("summary", 501, "Summary too long"),
        ],
    )
    def test_length_boundaries(
        self,
        client: TestClient,
        store: FakeNewsStore,
        field: str,
        size: int,
        message: str | None,
    ) -> None:
        response = client.post("/api/news", data=_form(**{field: "x" * size}))

        if message is None:
            assert response.status_code == status.HTTP_201_CREATED
            assert response.json()["data"][field] == "x" * size
        else:
            assert response.status_code == status.HTTP_400_BAD_REQUEST
            assert response.json()["errors"] == [{"field": field, "message": message}]
            assert store.rows == {}

    def test_long_category_is_accepted(self, client: TestClient) -> None:
        category = "REGIONAL-" + "X" * 120

        response = client.post("/api/news", data=_form(category=category))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["category"] == category


@pytest.mark.api
@pytest.mark.upload
class TestUploadCleanup:
    @pytest.fixture
    def broken_client(self, app: FastAPI) -> Generator[TestClient, None, None]:
        broken = BrokenNewsStore()
        broken.add(NewsArticleData(title="Seeded", content="Body", category="SPORTS"))
        app.dependency_overrides[deps.get_news_service] = lambda: broken
        with TestClient(app, raise_server_exceptions=False) as client:
            yield client

    def test_failed_create_discards_upload(self, broken_client: TestClient, uploads_dir: Path) -> None:
        response = broken_client.post(
            "/api/news",
            data=_form(),
            files={"image": ("photo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert list(uploads_dir.glob("*")) == []

    def test_failed_update_discards_upload(self, broken_client: TestClient, uploads_dir: Path) -> None:
        response = broken_client.put(
            "/api/news/1",
            data=_form(),
            files={"image": ("photo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert list(uploads_dir.glob("*")) == []

    def test_replacing_image_removes_previous_file(
        self,
        client: TestClient,
        store: FakeNewsStore,
        uploads_dir: Path,
    ) -> None:
        uploads_dir.mkdir(parents=True)
        (uploads_dir / "old.png").write_bytes(PNG_BYTES)
        article = _seed(store, image_url="/uploads/old.png")

        response = client.put(
            f"/api/news/{article.id}",
            data=_form(),
            files={"image": ("new.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == status.HTTP_200_OK
        new_name = response.json()["data"]["image_url"].removeprefix("/uploads/")
        assert [p.name for p in uploads_dir.iterdir()] == [new_name]

    def test_update_without_image_keeps_file(
        self,
        client: TestClient,
        store: FakeNewsStore,
        uploads_dir: Path,
    ) -> None:
        uploads_dir.mkdir(parents=True)
        (uploads_dir / "old.png").write_bytes(PNG_BYTES)
        article = _seed(store, image_url="/uploads/old.png")

        client.put(f"/api/news/{article.id}", data=_form(title="Renamed"))

        assert (uploads_dir / "old.png").exists()
