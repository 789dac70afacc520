# core/session.py

"""
Session resolution: turns a request's access token into a SessionState.

The auth collaborator (Supabase Auth) is reached through an IdentitySource.
The resolver reports `pending=True` when the identity check has not
finished within SESSION_CHECK_TIMEOUT_SECONDS; the lookup keeps running
in the background and its result lands in the identity cache for the
next request.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from jose import JWTError, jwt
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from core.cache import IdentityCache, get_identity_cache, token_key
from core.config import settings
from core.errors import SessionCheckFailed
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.enums import Role
from models.identity import Identity, SessionState, UserMetadata


# ============================================================
# Collaborator contracts
# ============================================================
class IdentitySource(Protocol):
    async def get_current_identity(self, token: str) -> Optional[Identity]:
        ...

    def invalidate(self, token: str) -> None:
        """The 'logged out' signal."""
        ...


class SessionResolver(Protocol):
    async def resolve(self) -> SessionState:
        ...


# ============================================================
# Supabase-backed identity source
# ============================================================
DEFAULT_ROLE = Role.tenant


def identity_from_auth_user(auth_user) -> Optional[Identity]:
    """
    Build an Identity from a GoTrue user. A missing role defaults to
    tenant; a role outside the closed set yields no identity.
    """
    try:
        metadata = UserMetadata(**(auth_user.user_metadata or {}))
    except ValidationError:
        logger.warning(f"Malformed user_metadata for user {auth_user.id}")
        return None

    try:
        role = Role(metadata.role or DEFAULT_ROLE)
    except ValueError:
        logger.warning(f"User {auth_user.id} has unknown role '{metadata.role}'")
        return None

    return Identity(
        id=str(auth_user.id),
        role=role,
        is_active=metadata.is_active is not False,
        email=auth_user.email,
        full_name=metadata.full_name,
        phone=metadata.phone,
    )


class SupabaseIdentitySource:
    """
    Validates access tokens via Supabase GoTrue.

    Owns the identity cache and de-duplicates concurrent lookups of
    the same token so a slow GoTrue call is made once.
    """

    def __init__(
        self,
        client_factory: Callable = get_supabase_client,
        cache: Optional[IdentityCache] = None,
    ):
        self._client_factory = client_factory
        self._cache = cache if cache is not None else get_identity_cache()
        self._inflight: dict[str, asyncio.Task] = {}

    async def get_current_identity(self, token: str) -> Optional[Identity]:
        entry = self._cache.lookup(token)
        if entry is not None:
            return entry.identity

        key = token_key(token)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._lookup(token))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._finish(key, done))
        return await task

    def invalidate(self, token: str) -> None:
        # A lookup still in flight no longer owns the key, so it will not store
        self._inflight.pop(token_key(token), None)
        self._cache.invalidate(token)

    def _finish(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Nobody may be awaiting a lookup that outlived its request
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Background identity lookup failed: {task.exception()}")

    async def _lookup(self, token: str) -> Optional[Identity]:
        key = token_key(token)
        client = self._client_factory()
        if client is None:
            raise SessionCheckFailed(RuntimeError("Supabase client not configured"))

        try:
            auth_resp = await run_in_threadpool(client.auth.get_user, token)
        except Exception as e:
            raise SessionCheckFailed(e) from e

        auth_user = getattr(auth_resp, "user", None) if auth_resp else None
        identity = identity_from_auth_user(auth_user) if auth_user else None

        if self._inflight.get(key) is asyncio.current_task():
            self._cache.store(token, identity)
        else:
            logger.debug("Identity lookup finished after logout; result not cached")
        return identity


# ============================================================
# Demo identities ("bypass login" mode)
# ============================================================
DEMO_TOKEN_TYPE = "demo"

# Seeded demo accounts
DEMO_USER_IDS = {
    Role.tenant: "4",
    Role.landlord: "17",
    Role.agency: "13",
    Role.maintenance: "15",
}


def issue_demo_token(role: Role) -> str:
    role = Role(role)
    payload = {
        "sub": DEMO_USER_IDS[role],
        "role": role.value,
        "typ": DEMO_TOKEN_TYPE,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.DEMO_TOKEN_TTL_MINUTES),
    }
    return jwt.encode(payload, settings.DEMO_TOKEN_SECRET, algorithm=settings.DEMO_TOKEN_ALGORITHM)


def decode_demo_token(token: str) -> Optional[Identity]:
    """Returns the demo identity for a valid demo token, else None."""
    try:
        payload = jwt.decode(
            token,
            settings.DEMO_TOKEN_SECRET,
            algorithms=[settings.DEMO_TOKEN_ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("typ") != DEMO_TOKEN_TYPE:
        return None

    try:
        role = Role(payload.get("role"))
    except ValueError:
        return None

    return Identity(
        id=str(payload.get("sub")),
        role=role,
        is_active=True,
        email=f"demo@{role.value}.com",
        full_name="Demo User",
    )


class DemoIdentitySource:
    """
    Accepts signed demo tokens when bypass mode is enabled outside
    production; everything else goes to the wrapped source.
    """

    def __init__(self, wrapped: IdentitySource):
        self.wrapped = wrapped

    async def get_current_identity(self, token: str) -> Optional[Identity]:
        if settings.bypass_enabled:
            identity = decode_demo_token(token)
            if identity is not None:
                return identity
        return await self.wrapped.get_current_identity(token)

    def invalidate(self, token: str) -> None:
        self.wrapped.invalidate(token)


_source: Optional[IdentitySource] = None


def get_identity_source() -> IdentitySource:
    """Process-wide identity source (FastAPI dependency)."""
    global _source
    if _source is None:
        _source = DemoIdentitySource(SupabaseIdentitySource())
    return _source


# ============================================================
# Per-request resolver
# ============================================================
def _log_abandoned_check(task: asyncio.Task) -> None:
    """Retrieves the outcome of a check that outlived its request."""
    if task.cancelled():
        return
    error = task.exception()
    if error is None:
        return
    if not isinstance(error, SessionCheckFailed):
        error = SessionCheckFailed(error)
    logger.warning(f"Background session check failed: {error}")


class RequestSessionResolver:
    def __init__(
        self,
        source: IdentitySource,
        token: Optional[str],
        timeout_seconds: float = settings.SESSION_CHECK_TIMEOUT_SECONDS,
    ):
        self.source = source
        self.token = token
        self.timeout_seconds = timeout_seconds

    async def resolve(self) -> SessionState:
        if not self.token:
            return SessionState(identity=None)

        check = asyncio.ensure_future(self.source.get_current_identity(self.token))
        try:
            identity = await asyncio.wait_for(
                asyncio.shield(check),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.info("Session check still running; answering pending")
            check.add_done_callback(_log_abandoned_check)
            return SessionState(pending=True)
        except SessionCheckFailed as e:
            logger.warning(f"Session check failed, treating as signed out: {e}")
            return SessionState(identity=None)
        except Exception as e:
            failure = SessionCheckFailed(e)
            logger.warning(f"Session check failed, treating as signed out: {failure}")
            return SessionState(identity=None)

        return SessionState(identity=identity)
