"""
Health API Routes
"""
from fastapi import APIRouter, Depends

from workflow_center.config import Settings, get_settings

router = APIRouter()


@router.get("/health")
async def health_check(config: Settings = Depends(get_settings)) -> dict:
    """Liveness plus the backends this console is wired to."""
    return {
        "status": "healthy",
        "environment": config.app_env,
        "backends": {
            "workflow_api": config.workflow_api_base_url,
            "login_api": config.login_api_base_url,
        },
        "login_url": config.login_redirect_url,
    }
