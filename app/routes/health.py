"""
Liveness and readiness checks. Neither needs a principal.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from app.config.firebase import get_db
from app.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def liveness():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": _now_iso(),
    }


@router.get("/db")
async def readiness():
    """
    Store round trip (lists collection ids); 503 when unreachable.
    """
    backend = "mock" if settings.USE_MOCK_DB else "firestore"
    try:
        collections = sorted(c.id for c in get_db().collections(timeout=settings.FIRESTORE_TIMEOUT_SECONDS))
    except Exception as e:
        logger.error(f"Readiness check against {backend} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {str(e)}",
        )

    return {
        "status": "healthy",
        "database": backend,
        "collections": collections,
        "timestamp": _now_iso(),
    }
