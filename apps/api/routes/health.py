"""Health check route."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from routes.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        message="Backend is running",
        time=datetime.now(tz=timezone.utc).isoformat(),
    )
