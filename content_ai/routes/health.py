from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from ..config import Settings
from ..dependencies import get_settings

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check(app_settings: Settings = Depends(get_settings)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": app_settings.api_version,
        "checks": {
            "gateway_credential": "configured" if app_settings.openrouter_api_key else "missing",
            "models": len(app_settings.models),
        },
    }

