"""Health check endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from app import __version__
from src.change_engine import __engine_version__

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    engine_version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(
        status="ok",
        version=__version__,
        engine_version=__engine_version__,
    )
