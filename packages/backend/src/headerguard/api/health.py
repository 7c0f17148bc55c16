"""Health check endpoint."""

from fastapi import APIRouter

from headerguard import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Server is up; the policy was built or the app would not exist."""
    return {"status": "ok", "version": __version__}
