"""
Health check endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from shared.config.settings import settings
from shared.infrastructure import db as database
from shared.utils.health import HealthStatus, check_database


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """Basic liveness check."""
    return {
        "status": HealthStatus.HEALTHY.value,
        "service": "rest-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check():
    """
    Readiness check that verifies database connectivity.
    Returns 503 when the database is unreachable.
    """
    result = check_database(database.SessionLocal)
    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "status": HealthStatus.HEALTHY.value if result.is_healthy else HealthStatus.DEGRADED.value,
        "dependencies": {"database": result.to_dict()},
    }
    if not result.is_healthy:
        return JSONResponse(content=checks, status_code=503)
    return checks
