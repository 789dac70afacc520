# core/rate_limiter.py

"""
In-memory sliding-window rate limiting for the sign-in endpoints.

Each identifier keeps the expiry times of its recent attempts; identifiers
whose attempts have all expired are swept periodically.
"""

from collections import deque
from threading import Lock
from typing import Deque, Dict, Optional, Tuple
import time

from fastapi import HTTPException, Request

from core.logging_config import logger


SWEEP_INTERVAL_SECONDS = 60

# Per identifier (login email or client IP): expiry time of each attempt
_attempts: Dict[str, Deque[float]] = {}
_next_sweep = 0.0
_lock = Lock()


def _sweep(now: float) -> None:
    # Caller holds the lock
    stale = [key for key, expiries in _attempts.items() if not expiries or expiries[-1] <= now]
    for key in stale:
        del _attempts[key]


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record one attempt for `identifier` if the window allows it.

    Args:
        identifier: Rate limit key (see get_rate_limit_identifier)
        max_requests: Attempts allowed per window
        window_seconds: Window length in seconds

    Returns:
        Tuple of (allowed, remaining attempts in the window)
    """
    global _next_sweep
    now = time.monotonic()

    with _lock:
        if now >= _next_sweep:
            _sweep(now)
            _next_sweep = now + SWEEP_INTERVAL_SECONDS

        expiries = _attempts.get(identifier)
        if expiries is None:
            expiries = _attempts[identifier] = deque()
        while expiries and expiries[0] <= now:
            expiries.popleft()

        if len(expiries) >= max_requests:
            return False, 0

        expiries.append(now + window_seconds)
        return True, max_requests - len(expiries)


def tracked_identifiers() -> int:
    """
    Returns:
        Number of identifiers currently held by the limiter
    """
    with _lock:
        return len(_attempts)


def reset_rate_limits():
    """Forget every recorded attempt."""
    global _next_sweep
    with _lock:
        _attempts.clear()
        _next_sweep = 0.0


def get_rate_limit_identifier(request: Request, user_id: Optional[str] = None) -> str:
    """
    Get identifier for rate limiting.

    Prefers the user (login email) when known, otherwise the client IP,
    honouring the first X-Forwarded-For hop when behind a proxy.

    Args:
        request: FastAPI request object
        user_id: Optional user identifier (login email)

    Returns:
        Identifier string for rate limiting
    """
    if user_id:
        return f"user:{user_id}"

    client_ip = request.client.host if request.client else "unknown"
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    return f"ip:{client_ip}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    """
    Enforce the rate limit for a request.

    Args:
        request: FastAPI request object
        identifier: Rate limit key (defaults to the client IP)
        max_requests: Attempts allowed per window
        window_seconds: Window length in seconds

    Returns:
        Remaining attempts in the window

    Raises:
        HTTPException: 429 Too Many Requests if the limit is exceeded
    """
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        logger.warning(f"Rate limit exceeded for {identifier}")
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            }
        )

    return remaining
