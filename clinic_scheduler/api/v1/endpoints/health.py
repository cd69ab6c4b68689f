"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from clinic_scheduler.config import settings
from clinic_scheduler.core.redis_client import check_redis_connection
from clinic_scheduler.database import check_database_connection
from clinic_scheduler.dependencies import EventPublisher

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(BaseModel):
    """Detailed health check response model."""

    status: str
    version: str
    environment: str
    database: str
    events: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(publisher: EventPublisher) -> DetailedHealthResponse:
    """
    Detailed health check with database and event transport status.

    Event transport trouble only degrades the report; appointments keep working.

    Returns:
        Detailed health status including dependencies
    """
    db_healthy = await check_database_connection()

    if not publisher.enabled:
        events = "disabled"
    elif publisher.running and await check_redis_connection():
        events = "healthy"
    else:
        events = "unhealthy"

    return DetailedHealthResponse(
        status="healthy" if db_healthy and events != "unhealthy" else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        events=events,
    )
