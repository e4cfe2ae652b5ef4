"""
Liveness endpoint for operational visibility.

No authentication and no dependency checks: the Notion source is only
contacted while rendering, so liveness does not depend on it.
"""
import logging

from fastapi import APIRouter

from core.datetime_utils import utc_now
from schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Check if the application is running. Returns immediately without contacting Notion."
)
async def health_check() -> HealthResponse:
    """Liveness check - is the application process alive?"""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")
    )
