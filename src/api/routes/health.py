"""
Health check API route
"""

from datetime import datetime, timezone
from fastapi import APIRouter

router = APIRouter()

@router.get("/health")
async def health_check():
    """Liveness probe - always 200 while the process serves requests"""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    }
