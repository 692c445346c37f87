"""FastAPI middleware for error handling."""

from .error_handlers import (
    ERROR_CODES,
    corpus_unavailable_handler,
    error_body,
    http_exception_handler,
    internal_exception_handler,
    note_not_found_handler,
    register_error_handlers,
    request_validation_handler,
    search_validation_handler,
)

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
