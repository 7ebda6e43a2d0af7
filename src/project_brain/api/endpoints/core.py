"""Core API endpoints for Project Brain."""

from fastapi import APIRouter

from project_brain import __version__
from project_brain.core.logging import get_logger
from project_brain.domain.models.utils import utc_now

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with application status."""
    return {
        "message": "Project Brain API",
        "version": __version__,
        "status": "running",
    }


@router.get("/health", operation_id="health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": utc_now().isoformat()}
