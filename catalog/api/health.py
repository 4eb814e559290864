import time
from datetime import datetime, UTC

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from catalog.monitoring.logger import SERVICE_NAME

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str
    version: str


class DetailedHealthResponse(HealthResponse):
    database: str
    uptime_seconds: float


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health(request: Request):
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        service=SERVICE_NAME,
        version=request.app.state.settings.VERSION,
    )


@router.get("/health/detailed", response_model=DetailedHealthResponse, status_code=status.HTTP_200_OK)
async def health_detailed(request: Request):
    database = getattr(request.app.state, "database", None)
    database_healthy = database is not None and await database.check_health()

    started_at = getattr(request.app.state, "started_at", None)
    uptime = time.monotonic() - started_at if started_at is not None else 0.0

    return DetailedHealthResponse(
        status="healthy" if database_healthy else "degraded",
        timestamp=datetime.now(UTC),
        service=SERVICE_NAME,
        version=request.app.state.settings.VERSION,
        database="healthy" if database_healthy else "unhealthy",
        uptime_seconds=uptime,
    )
