# routers/health.py

from fastapi import APIRouter
from core.supabase_client import ping_supabase_auth

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/auth
# Checks the Supabase Auth configuration
# No auth required
# -----------------------------------------------------
@router.get("/auth", summary="Supabase Auth health check")
async def health_auth():
    """
    Reports whether Supabase Auth is configured and a client can be built.
    Safe for external health monitors (no auth required).
    """
    status = ping_supabase_auth()
    return {
        "service": "Supabase Auth",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": "Tov Portal API",
        "status": "ok",
    }
