from fastapi import APIRouter, HTTPException, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from typing import Optional
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.rate_limiter import require_rate_limit, get_rate_limit_identifier
from core.roles import default_dashboard
from core.session import (
    IdentitySource,
    get_identity_source,
    identity_from_auth_user,
    issue_demo_token,
)
from core.supabase_client import get_anon_client
from dependencies.auth import (
    get_access_token,
    get_current_identity,
    get_session_resolver,
)
from models.enums import Role
from models.identity import Identity


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# MODELS
# ============================================================
class LoginRequest(BaseModel):
    email: str
    password: str


class BypassLoginRequest(BaseModel):
    role: Role


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role
    redirect_to: str


def _set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


# ============================================================
# SIGN-IN PAGE (public)
# ============================================================
@router.get("", summary="Sign-in page")
async def auth_page(resolver=Depends(get_session_resolver)):
    """
    Public. A user who is already signed in is sent to their dashboard.
    """
    state = await resolver.resolve()
    identity = state.identity
    if identity is not None and identity.is_active:
        return RedirectResponse(
            url=default_dashboard(identity.role),
            status_code=status.HTTP_303_SEE_OTHER,
        )

    return {
        "page": {"path": settings.AUTH_PATH, "title": "Sign in"},
        "roles": Role.list(),
        "bypass_enabled": settings.bypass_enabled,
    }


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=SessionResponse, summary="Authenticate user")
async def login(payload: LoginRequest, request: Request, response: Response):

    email = payload.email.strip().lower()

    identifier = get_rate_limit_identifier(request, user_id=email)
    require_rate_limit(request, identifier=identifier, max_requests=10, window_seconds=300)

    client = get_anon_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        auth_resp = await run_in_threadpool(
            client.auth.sign_in_with_password,
            {"email": email, "password": payload.password},
        )
    except Exception as e:
        # Log the error for debugging but don't expose details to user
        logger.warning(f"Login attempt failed for {email}: {extract_supabase_error(e)}")
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password"
        )

    session = getattr(auth_resp, "session", None)
    if not session or not session.access_token:
        raise HTTPException(401, "Invalid email or password")

    identity = identity_from_auth_user(auth_resp.user) if auth_resp.user else None
    if identity is None or not identity.is_active:
        logger.warning(f"Login refused for {email}: no usable role or inactive account")
        raise HTTPException(403, "Account is not permitted to sign in")

    _set_session_cookie(response, session.access_token)
    logger.info(f"User {identity.id} signed in as {identity.role}")

    return SessionResponse(
        access_token=session.access_token,
        role=identity.role,
        redirect_to=default_dashboard(identity.role),
    )


# ============================================================
# DEMO LOGIN (bypass mode, never in production)
# ============================================================
@router.post("/bypass-login", response_model=SessionResponse, summary="DEV: sign in as a demo role")
def bypass_login(payload: BypassLoginRequest, response: Response):
    """
    ⚠️ DEMO ONLY: issues a signed demo token for the requested role.
    Returns 404 unless AUTH_BYPASS_ENABLED is set outside production.
    """
    if not settings.bypass_enabled:
        raise HTTPException(404, "Not found")

    token = issue_demo_token(payload.role)
    _set_session_cookie(response, token)
    logger.info(f"Demo sign-in as {payload.role}")

    return SessionResponse(
        access_token=token,
        role=payload.role,
        redirect_to=default_dashboard(payload.role),
    )


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Sign out")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_access_token),
    source: IdentitySource = Depends(get_identity_source),
):
    if token:
        source.invalidate(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True, "redirect_to": settings.AUTH_PATH}


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=Identity, summary="Current authenticated user")
def read_me(identity: Identity = Depends(get_current_identity)):
    return identity
