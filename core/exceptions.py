"""
Shared exception classes and error handling utilities for the Eye Pressure Dashboard.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import ConfigurationError, RecordSourceError

    # In the record source - raise domain exceptions
    raise RecordSourceError("Notion query failed", upstream_status=401)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASS
# =============================================================================

class IOPServiceError(Exception):
    """
    Base exception for all dashboard domain errors.

    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(IOPServiceError):
    """Raised when required external credentials or identifiers are absent."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Service is not configured"


# =============================================================================
# RECORD SOURCE EXCEPTIONS
# =============================================================================

class RecordSourceError(IOPServiceError):
    """Raised when the external record source cannot be queried."""

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Failed to load records"


# =============================================================================
# GROUP EXCEPTIONS
# =============================================================================

class GroupNotFoundError(IOPServiceError):
    """Raised when a record group id is not part of the current grouping."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Record group not found"

    def __init__(self, group_id: Optional[str] = None, **kwargs: Any):
        detail = f"Record group '{group_id}' not found" if group_id else self.detail
        super().__init__(detail=detail, group_id=group_id, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def iop_service_exception_handler(
    request: Request,
    exc: IOPServiceError
) -> JSONResponse:
    """
    Handle IOPServiceError exceptions and return consistent JSON responses.
    """
    logger.warning(
        f"IOPServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(IOPServiceError, iop_service_exception_handler)
