from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.cms.api.errors import register_exception_handlers
from src.cms.api.routes.news_router import router as news_router
from src.cms.core.config import BASE_DIR, ENV_PATH, config
from src.cms.core.constants import UPLOADS_URL_PREFIX
from src.cms.core.logger import configure_root_logger, get_logger
from src.cms.db.session import NewsDatabase
from src.cms.schemas.news_schemas import HealthResponse
from src.cms.services.auth_service import IdentityVerifier
from src.cms.services.news_service import NewsService
from src.cms.services.upload_service import UploadService


configure_root_logger()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Запуск Mini CMS Server...")
    logger.info(f"Читаю .env, Base = {BASE_DIR}, path = {ENV_PATH}, env = {config.environment}")

    database = NewsDatabase(config.database_url)
    if config.auto_create_tables:
        await database.create_all()

    app.state.news_service = NewsService(database)
    app.state.upload_service = UploadService(config.uploads_path, config.max_upload_bytes)
    app.state.identity_verifier = IdentityVerifier(
        jwks_url=config.auth_jwks_url,
        issuer=config.auth_issuer,
        authorized_parties=config.auth_authorized_parties,
    )

    try:
        yield
    finally:
        logger.info("Остановка Mini CMS Server...")
        await database.dispose()


app = FastAPI(lifespan=lifespan, title="Mini CMS Server")


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_mutating_requests(request: Request, call_next):
    if request.method != "GET":
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Content-Type: {request.headers.get('content-type')} - "
            f"Size: {request.headers.get('content-length')}"
        )
    return await call_next(request)


config.uploads_path.mkdir(parents=True, exist_ok=True)
app.mount(
    UPLOADS_URL_PREFIX,
    StaticFiles(directory=config.uploads_path, check_dir=False),
    name="uploads",
)

app.include_router(news_router)


@app.get("/api/health", tags=["Health"], response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))


register_exception_handlers(app)
