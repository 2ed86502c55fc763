from fastapi import APIRouter

from dropjournal.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Simple health endpoint for monitoring."""
    return {"status": "healthy", "service": settings.SERVICE_NAME}
