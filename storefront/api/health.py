"""Health check endpoint."""
import logging

from fastapi import APIRouter, Request

from storefront.core.config import settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request):
    """Report liveness and which storefront is serving."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {"status": "healthy", "restaurant": settings.restaurant_name}
