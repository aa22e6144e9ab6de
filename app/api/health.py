"""Health check endpoint."""
import logging
from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """Report liveness and the active call store backend."""
    logger.debug("[HEALTH] Health check requested")
    return {"status": "healthy", "callStore": settings.call_store_backend}
