"""
Health Check Routes
Liveness probe for the edge; never touches the backend
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Basic health check"""
    return {
        "status": "healthy",
        "service": request.app.state.settings.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
