# routers/health.py

from fastapi import APIRouter, Depends

from core.config import settings
from core.permission_store import PermissionStore, get_permission_store

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
    }


# -----------------------------------------------------
# GET /health/permissions
# Checks the permission store backend + tables
# No auth required
# -----------------------------------------------------
@router.get("/permissions", summary="Permission store health check")
def health_permissions(store: PermissionStore = Depends(get_permission_store)):
    """
    Reports the configured backend and, for Supabase, whether each
    permission table answers a one-row query.
    """
    try:
        return store.ping()
    except Exception as e:
        return {
            "backend": store.backend,
            "status": "error",
            "error": str(e),
        }
