"""
Centralized Validation Module

Typed failures raised by the services layer and the handlers that turn
them into the standard JSON error envelope.
"""

from .errors import (
    APIError,
    ErrorCode,
    ErrorResponse,
    FieldError,
    Forbidden,
    InvalidDocument,
    InvalidTransition,
    NotFound,
    PDFUnavailable,
    StorageError,
    Unauthorized,
    ValidationError,
    format_validation_errors,
)

__all__ = [
    "APIError",
    "ErrorCode",
    "ErrorResponse",
    "FieldError",
    "Forbidden",
    "InvalidDocument",
    "InvalidTransition",
    "NotFound",
    "PDFUnavailable",
    "StorageError",
    "Unauthorized",
    "ValidationError",
    "format_validation_errors",
]
