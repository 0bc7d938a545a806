# src/cms/api/errors.py
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.cms.core.config import settings
from src.cms.core.exceptions import CMSError, ValidationFailed
from src.cms.core.logger import get_logger
from src.cms.schemas.news_schemas import ErrorResponse, FieldErrorItem

logger = get_logger(__name__)


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
  return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def cms_error_handler(request: Request, exc: CMSError) -> JSONResponse:
  if isinstance(exc, ValidationFailed):
    body = ErrorResponse(
      message=exc.message,
      errors=[FieldErrorItem(field=e.field, message=e.message) for e in exc.errors],
    )
  else:
    body = ErrorResponse(message=exc.message, error=exc.detail)

  if exc.status_code >= 500:
    logger.error(f"{request.method} {request.url.path}: {exc}")
  return _error_response(exc.status_code, body)


async def request_validation_handler(
  request: Request,
  exc: RequestValidationError,
) -> JSONResponse:
  errors = [
    FieldErrorItem(
      field=".".join(str(part) for part in err.get("loc", ())[1:]) or "request",
      message=err.get("msg", "Invalid value"),
    )
    for err in exc.errors()
  ]
  return _error_response(
    status.HTTP_400_BAD_REQUEST,
    ErrorResponse(message="Validation errors", errors=errors),
  )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
  logger.error(f"Необработанное исключение: {exc}", exc_info=True)
  return _error_response(
    status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorResponse(
      message="Internal server error",
      error=str(exc) if settings.is_development else None,
    ),
  )


def register_exception_handlers(app: FastAPI) -> None:
  app.add_exception_handler(CMSError, cms_error_handler)
  app.add_exception_handler(RequestValidationError, request_validation_handler)
  app.add_exception_handler(Exception, unhandled_error_handler)
