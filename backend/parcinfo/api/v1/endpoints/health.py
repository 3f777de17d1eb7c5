"""
Readiness check.

- /health/ready - database round-trip and session store ping, 503 when degraded

Liveness stays at /health on the application root.
"""
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcinfo.core.database import get_db
from parcinfo.core.exceptions import StorageError
from parcinfo.core.logging_config import logger
from parcinfo.core.session_store import SessionStore, get_session_store

router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database(db: AsyncSession) -> Dict[str, Any]:
    """Check database connectivity"""
    start = time.time()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "message": "Database connection failed",
        }
    return {
        "status": "healthy",
        "latency_ms": round((time.time() - start) * 1000, 2),
        "message": "Database connection successful",
    }


async def check_session_store(store: SessionStore) -> Dict[str, Any]:
    """Check the session store backend"""
    start = time.time()
    try:
        ok = await store.ping()
    except StorageError as e:
        logger.warning(f"[HealthCheck] Session store check failed: {e}")
        ok = False
    return {
        "status": "healthy" if ok else "unhealthy",
        "latency_ms": round((time.time() - start) * 1000, 2),
        "backend": type(store).__name__,
    }


@router.get("/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    checks = {
        "database": await check_database(db),
        "session_store": await check_session_store(store),
    }
    healthy = all(check["status"] == "healthy" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if healthy else "degraded", "checks": checks},
    )
