"""
Response envelope and centralized error handlers.

Every endpoint answers with the same shape:
{"status_code": int, "data": ..., "message": str, "success": bool}
"""
import logging
from typing import Generic, Optional, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.errors import BookServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    status_code: int
    data: Optional[T] = None
    message: str
    success: bool = True


def api_response(status_code: int, data, message: str) -> ApiResponse:
    return ApiResponse(
        status_code=status_code,
        data=data,
        message=message,
        success=status_code < 400,
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ApiResponse(status_code=status_code, data=None, message=message, success=False)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def book_service_error_handler(request: Request, exc: BookServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Invalid request to %s: %s", request.url.path, exc.errors())
    return error_response(400, "Invalid request.")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error.")


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on an app."""
    app.add_exception_handler(BookServiceError, book_service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
