from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from src.cms.core.constants import (
    ALLOWED_IMAGE_CONTENT_TYPES,
    ALLOWED_IMAGE_EXTENSIONS,
    UPLOADS_URL_PREFIX,
)
from src.cms.core.exceptions import UploadError
from src.cms.core.logger import get_logger

logger = get_logger(__name__)


class UploadService:
    def __init__(self, uploads_dir: Path, max_bytes: int) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.max_bytes = max_bytes

    def _check_type(self, upload: UploadFile) -> str:
        ext = Path(upload.filename or "").suffix.lower()
        content_type = (upload.content_type or "").lower()

        if ext not in ALLOWED_IMAGE_EXTENSIONS or content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise UploadError("Only image files are allowed")
        return ext

    async def save_image(self, upload: UploadFile) -> str:
        """Сохраняет картинку под случайным именем и возвращает /uploads/<name>."""
        ext = self._check_type(upload)

        data = await upload.read()
        if len(data) > self.max_bytes:
            raise UploadError(f"File too large, max {self.max_bytes} bytes")

        name = f"{uuid4().hex}{ext}"
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        (self.uploads_dir / name).write_bytes(data)

        logger.info(
            "Загружено изображение %s -> %s (%s байт)",
            upload.filename,
            name,
            len(data),
        )
        return f"{UPLOADS_URL_PREFIX}/{name}"

    def discard(self, image_url: str | None) -> None:
        """Удаляет файл, на который указывает /uploads/<name>. Внешние URL не трогает."""
        prefix = f"{UPLOADS_URL_PREFIX}/"
        if not image_url or not image_url.startswith(prefix):
            return

        name = image_url[len(prefix):]
        if not name or Path(name).name != name:
            logger.warning("Пропущен подозрительный путь загрузки: %s", image_url)
            return

        (self.uploads_dir / name).unlink(missing_ok=True)
        logger.info("Удалено изображение %s", name)
