"""Health check endpoints."""
from typing import Any, Dict

from fastapi import APIRouter, Request

from socialapi.db import utcnow
from socialapi.server.schemas import HealthResponse

router = APIRouter(tags=["health"])


def service_health(request: Request, message: str) -> HealthResponse:
    """Body of the per-service ``/api/.../health`` endpoints."""
    database = request.app.state.database
    return HealthResponse(
        service=request.app.state.service_title,
        status="UP",
        database=database.dialect,
        message=message,
        timestamp=utcnow(),
    )


@router.get("/healthz")
def health_check() -> Dict[str, str]:
    """Basic liveness check.

    Returns:
        Simple status response
    """
    return {"status": "ok"}


@router.get("/readyz")
def readiness_check(request: Request) -> Dict[str, Any]:
    """Readiness check endpoint.

    Checks that the service database answers a trivial query.

    Returns:
        Status response with readiness info
    """
    checks = {"database": request.app.state.database.ping()}
    ready = all(checks.values())

    return {
        "status": "ok" if ready else "not_ready",
        "checks": checks,
    }
