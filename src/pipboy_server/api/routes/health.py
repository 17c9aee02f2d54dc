"""Health and root endpoints.

Provides the root ``/`` endpoint (API identity and version) and the
``/api/health`` liveness check. Neither requires a token.
"""

from datetime import UTC, datetime

from fastapi import APIRouter

from pipboy_server import __version__
from pipboy_server.api.models import HealthResponse

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint showing API identity and current version."""
    return {"message": "Pip-Boy Party Server API", "version": __version__}


@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    timestamp = datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return HealthResponse(status="OK", timestamp=timestamp)
