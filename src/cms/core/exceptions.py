# src/cms/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class CMSError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class ArticleNotFound(CMSError):
    status_code = 404
    message = "News article not found"


class ValidationFailed(CMSError):
    status_code = 400
    message = "Validation errors"

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__(", ".join(f"{e.field}: {e.message}" for e in errors))
        self.errors = errors


class UploadError(CMSError):
    status_code = 400
    message = "File upload error"


class AuthError(CMSError):
    status_code = 401
    message = "Not authenticated"
