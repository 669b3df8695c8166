"""
Health check and monitoring router.

Provides endpoints for liveness and readiness probes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import __version__
from ..config import settings
from ..database import get_db, get_db_stats, ping_db

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=settings.SERVICE_NAME,
        version=__version__,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unavailable"}},
    summary="Readiness check",
)
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness check.

    Returns 200 when the database answers, 503 otherwise.
    """
    database_ok = ping_db(db)
    body = ReadinessResponse(
        ready=database_ok,
        checks={
            "database": "healthy" if database_ok else "unavailable",
            "pool": get_db_stats(),
        },
        timestamp=datetime.now(timezone.utc).isoformat(),
    )

    if not database_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump()
        )
    return body
