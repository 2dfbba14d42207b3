"""
Health Check Utilities.

Provides consistent response formatting for dependency health checks.

Usage:
    from shared.utils.health import check_database

    result = check_database(SessionLocal)
    result.to_dict()  # {"status": "healthy", "component": "database", "latency_ms": 1.2}
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class HealthCheckResult:
    """
    Result of a health check operation.

    Provides consistent structure for all health check responses.
    """
    status: HealthStatus
    component: str
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "status": self.status.value,
            "component": self.component,
        }
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


def check_database(session_factory: Callable[[], Session]) -> HealthCheckResult:
    """Run ``SELECT 1`` and report latency."""
    start = time.perf_counter()
    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        return HealthCheckResult(
            status=HealthStatus.UNHEALTHY,
            component="database",
            error=type(e).__name__,
        )
    return HealthCheckResult(
        status=HealthStatus.HEALTHY,
        component="database",
        latency_ms=(time.perf_counter() - start) * 1000,
    )
