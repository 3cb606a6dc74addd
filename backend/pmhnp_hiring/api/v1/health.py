"""
Health Check API v1 Endpoints

System health and status monitoring endpoints.
"""

from datetime import datetime
from typing import Dict, Any

import psutil
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.database import db_manager
from pmhnp_hiring.utils.logger import get_logger
from pmhnp_hiring.utils.metrics import metrics

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"

# A failing critical check makes the whole service unhealthy
CRITICAL_CHECKS = {"database"}


def overall_status(checks: Dict[str, Dict[str, str]]) -> str:
    """Fold individual dependency checks into one service status."""
    failing = {name for name, check in checks.items() if check.get("status") != HEALTHY}
    if not failing:
        return HEALTHY
    if failing & CRITICAL_CHECKS:
        return UNHEALTHY
    return DEGRADED


def status_code_for(health_status: str) -> int:
    """HTTP status for a service status; only ``unhealthy`` is a 503."""
    if health_status == UNHEALTHY:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_200_OK


def system_info() -> Dict[str, float]:
    cpu_percent = psutil.cpu_percent(interval=None)
    memory_percent = psutil.virtual_memory().percent
    metrics.update_system_metrics(cpu_percent, memory_percent)
    return {"cpu_percent": cpu_percent, "memory_percent": memory_percent}


@router.get("")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    settings = get_settings()
    return {
        "status": HEALTHY,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }


@router.get("/detailed")
async def detailed_health_check() -> JSONResponse:
    """Check the database and Redis and report the combined status."""
    settings = get_settings()
    checks = await db_manager.check_health()
    health_status = overall_status(checks)

    if health_status != HEALTHY:
        logger.warning("Health check not healthy", status=health_status, checks=checks)

    try:
        system = system_info()
    except (psutil.Error, OSError) as e:
        logger.warning(f"Could not read system metrics: {e}")
        system = {}

    return JSONResponse(
        status_code=status_code_for(health_status),
        content={
            "status": health_status,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "checks": checks,
            "system": system
        }
    )
