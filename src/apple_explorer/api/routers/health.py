"""Health endpoint (root level, no API prefix) for container healthchecks."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from apple_explorer import __version__
from apple_explorer.api.deps import Settings
from apple_explorer.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service="apple-explorer",
        version=__version__,
        store_backend=settings.store_backend,
        timestamp=datetime.now(UTC).isoformat(),
    )
