"""
Health check route.

This endpoint is PUBLIC (no authentication required) and provides a simple
status check for load balancers and deployment verification. It does not
touch the database.
"""

from fastapi import APIRouter

from invoice_dashboard.schemas.health import HealthResponse
from invoice_dashboard.utils.logging import get_logger

logger = get_logger(__name__)

# Mounted at root level in main.py
router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    status_code=200,
)
async def health_check() -> HealthResponse:
    """Public health check; always {"status": "ok"} while the app is serving."""
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok")
