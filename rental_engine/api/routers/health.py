"""
Health check endpoints for monitoring and orchestration (K8s, Docker, etc.)

Provides multiple health check endpoints:
- /health: Basic liveness check (always returns 200)
- /health/live: Alias for the liveness check
- /health/ready: Readiness check (store reachable, scheduler state)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from rental_engine.api.dependencies import get_session, get_worker
from rental_engine.config import Settings, get_settings
from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "rental-engine"


@router.get("/health")
async def health_check():
    """
    Basic liveness probe.

    Returns 200 OK if the application is running.
    """
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/live")
async def health_check_live():
    """Alias for /health for Kubernetes liveness probe."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/ready")
async def health_check_ready(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
    worker: ReconciliationWorker | None = Depends(get_worker),
):
    """
    Readiness probe.

    - Store connectivity (skipped for the in-memory store)
    - Reconciliation scheduler state

    Returns 503 if the store is not reachable.
    """
    health_status = {
        "status": "ready",
        "checks": {
            "store": "in_memory" if settings.use_in_memory else "unknown",
            "scheduler": "running" if worker is not None and worker.is_running else "stopped",
        },
    }

    if session is not None:
        try:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["store"] = "healthy"
        except Exception as e:
            logger.error("Readiness check: store unhealthy", exc_info=e)
            health_status["status"] = "not_ready"
            health_status["checks"]["store"] = "unhealthy"
            return JSONResponse(status_code=503, content=health_status)

    return health_status
