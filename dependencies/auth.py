from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.config import settings
from core.route_guard import PageRenderer, RequestNavigator, RouteGuard
from core.session import IdentitySource, RequestSessionResolver, get_identity_source
from models.identity import Identity


optional_bearer = HTTPBearer(auto_error=False)


# ============================================================
# ACCESS TOKEN (Authorization header first, then session cookie)
# ============================================================
def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


# ============================================================
# SESSION RESOLVER (explicit dependency, overridable in tests)
# ============================================================
def get_session_resolver(
    token: Optional[str] = Depends(get_access_token),
    source: IdentitySource = Depends(get_identity_source),
) -> RequestSessionResolver:
    return RequestSessionResolver(source, token)


# ============================================================
# ROUTE GUARD (page routes)
# ============================================================
def get_route_guard(
    request: Request,
    resolver: RequestSessionResolver = Depends(get_session_resolver),
) -> RouteGuard:
    return RouteGuard(resolver, RequestNavigator(request), PageRenderer())


# ============================================================
# CURRENT IDENTITY (JSON endpoints)
# ============================================================
async def get_current_identity(
    resolver: RequestSessionResolver = Depends(get_session_resolver),
) -> Identity:
    """
    Resolves the signed-in, active identity or fails closed:
      • still resolving → 503 with Retry-After
      • anonymous / inactive → 401
    """
    state = await resolver.resolve()

    if state.pending:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session check in progress",
            headers={"Retry-After": str(PageRenderer.retry_after_seconds)},
        )

    identity = state.identity
    if identity is None or not identity.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return identity
