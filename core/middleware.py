"""
FastAPI middleware for request logging.

This module provides:
- Request/Response logging with request_id propagation
- Slow-render detection: every dashboard or API request waits on a full
  Notion fetch, so latency above IOP_SLOW_REQUEST_MS is logged as a warning
- Request ID in response headers for debugging
"""

import logging
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from core.config import settings
from core.logging_config import set_request_id, clear_request_id

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/Response logging middleware with request_id propagation.

    Log Output (JSON):
    {
        "message": "Slow request",
        "request_id": "abc-123",
        "extra": {
            "method": "GET",
            "path": "/",
            "query": "view=chart&x_axis=uniform",
            "status_code": 200,
            "duration_ms": 4210.7,
            "slow_request_ms": 3000.0
        }
    }
    """

    # Liveness and docs traffic never touches Notion
    EXCLUDED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    def __init__(self, app: ASGIApp, slow_request_ms: Optional[float] = None):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms or settings.iop_slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with logging."""
        request_id = str(uuid.uuid4())[:8]
        set_request_id(request_id)

        path = request.url.path
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": request.method, "path": path, "error": str(e)}
            )
            clear_request_id()
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        if path not in self.EXCLUDED_PATHS:
            self._log_completion(request, response, duration_ms)

        clear_request_id()
        response.headers["X-Request-ID"] = request_id
        return response

    def _log_completion(self, request: Request, response: Response, duration_ms: float) -> None:
        extra = {
            "method": request.method,
            "path": request.url.path,
            "query": str(request.query_params) if request.query_params else None,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        if duration_ms > self.slow_request_ms:
            extra["slow_request_ms"] = self.slow_request_ms
            logger.warning("Slow request", extra=extra)
        elif response.status_code >= 400:
            logger.warning("Request completed", extra=extra)
        else:
            logger.info("Request completed", extra=extra)
