"""FastAPI exception handlers producing the notebook API error envelope."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...services.note_repository import NoteNotFoundError
from ...services.search_index import CorpusFetchError
from ...services.search_service import SearchValidationError

logger = logging.getLogger(__name__)

# status code -> (error code, fallback message)
ERROR_CODES: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("validation_error", "Invalid request"),
    status.HTTP_404_NOT_FOUND: ("not_found", "Resource not found"),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("method_not_allowed", "Method not allowed"),
    status.HTTP_409_CONFLICT: ("conflict", "Resource conflict"),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("internal_error", "Internal server error"),
    status.HTTP_503_SERVICE_UNAVAILABLE: ("corpus_unavailable", "Note store unavailable"),
}


def error_body(
    status_code: int, message: Optional[str] = None, detail: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build ``{"error", "message", "detail"}`` for a status code."""
    error, fallback = ERROR_CODES.get(
        status_code, ERROR_CODES[status.HTTP_500_INTERNAL_SERVER_ERROR]
    )
    return {"error": error, "message": message or fallback, "detail": detail}


def _json(
    status_code: int, message: Optional[str] = None, detail: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(status_code, message, detail))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _json(
        status.HTTP_400_BAD_REQUEST,
        "Invalid request payload",
        {"errors": jsonable_encoder(exc.errors())},
    )


async def search_validation_handler(
    request: Request, exc: SearchValidationError
) -> JSONResponse:
    detail = {"errors": jsonable_encoder(exc.errors)} if exc.errors else None
    return _json(status.HTTP_400_BAD_REQUEST, exc.message, detail)


async def note_not_found_handler(request: Request, exc: NoteNotFoundError) -> JSONResponse:
    return _json(status.HTTP_404_NOT_FOUND, str(exc), {"note_id": exc.note_id})


async def corpus_unavailable_handler(request: Request, exc: CorpusFetchError) -> JSONResponse:
    logger.error("Note corpus unavailable", extra={"path": request.url.path, "reason": str(exc)})
    return _json(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else None
    return _json(exc.status_code, message)


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", extra={"path": request.url.path})
    return _json(status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the notebook exception handlers to the FastAPI application."""
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SearchValidationError, search_validation_handler)
    app.add_exception_handler(NoteNotFoundError, note_not_found_handler)
    app.add_exception_handler(CorpusFetchError, corpus_unavailable_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "ERROR_CODES",
    "error_body",
    "register_error_handlers",
    "request_validation_handler",
    "search_validation_handler",
    "note_not_found_handler",
    "corpus_unavailable_handler",
    "http_exception_handler",
    "internal_exception_handler",
]
