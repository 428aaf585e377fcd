"""Health check and system status endpoints."""

from fastapi import APIRouter
from datetime import datetime, timezone
from typing import Dict, Any

from .. import __version__
from ..config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "position_source": settings.position_source
    }
