"""Service health endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Status, timestamp in ISO8601 format, and database status
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    from catering_admin.database import health_check as db_health_check

    health_status["database"] = "healthy" if await db_health_check() else "unhealthy"
    return health_status
