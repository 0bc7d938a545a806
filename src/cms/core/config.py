from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"


class Settings(BaseSettings):
    environment: str = Field("development", validation_alias="CMS_ENVIRONMENT")

    server_host: str = Field("0.0.0.0", validation_alias="CMS_SERVER_HOST")
    server_port: int = Field(8000, validation_alias="CMS_SERVER_PORT")
    server_reload: bool = Field(True, validation_alias="CMS_SERVER_RELOAD")
    server_log_level: str = Field("info", validation_alias="CMS_SERVER_LOG_LEVEL")
    log_dir: str = Field("logs", validation_alias="CMS_LOG_DIR")

    database_url: str = Field(
        "sqlite+aiosqlite:///./news.db",
        validation_alias="DATABASE_URL",
    )
    auto_create_tables: bool = Field(True, validation_alias="CMS_AUTO_CREATE_TABLES")

    uploads_dir: str = Field("./uploads", validation_alias="CMS_UPLOADS_DIR")
    max_upload_bytes: int = Field(
        20 * 1024 * 1024,
        validation_alias="CMS_MAX_UPLOAD_BYTES",
    )

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3049", "http://localhost:3000"],
        validation_alias="CMS_CORS_ORIGINS",
    )

    # Внешний провайдер идентификации (JWKS + issuer + azp)
    auth_jwks_url: str = Field("", validation_alias="CMS_AUTH_JWKS_URL")
    auth_issuer: str = Field("", validation_alias="CMS_AUTH_ISSUER")
    auth_authorized_parties: list[str] = Field(
        default_factory=list,
        validation_alias="CMS_AUTH_AUTHORIZED_PARTIES",
    )

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    @property
    def uploads_path(self) -> Path:
        return Path(self.uploads_dir)

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )


settings = Settings()
config = settings
