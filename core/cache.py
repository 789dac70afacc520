# core/cache.py

"""
In-memory identity cache owned by the auth collaborator.

Keys are SHA-256 digests of access tokens so raw tokens are never held
in memory longer than a request. The route guard only reads identities
through an IdentitySource; it never touches this cache directly.
"""

import hashlib
from datetime import datetime, timedelta
from threading import Lock
from typing import Optional

from core.config import settings
from core.logging_config import logger
from models.identity import Identity


def token_key(token: str) -> str:
    """SHA-256 hex digest used as the cache key for a token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class CacheEntry:
    """A resolved identity (or confirmed anonymous) with expiration time."""

    def __init__(self, identity: Optional[Identity], ttl_seconds: int):
        self.identity = identity
        self.expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

    def is_expired(self) -> bool:
        """Check if the cache entry has expired."""
        return datetime.now() >= self.expires_at


class IdentityCache:
    """
    Token → identity cache with TTL.

    A role change in Supabase takes effect once the entry expires or
    the user logs out (which invalidates the entry). Expired entries are
    swept on write at most once per `sweep_interval_seconds`, so tokens
    that are never presented again do not pile up.
    """

    def __init__(self, ttl_seconds: int = 60, sweep_interval_seconds: Optional[int] = None):
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = (
            ttl_seconds if sweep_interval_seconds is None else sweep_interval_seconds
        )
        self._entries: dict[str, CacheEntry] = {}
        self._next_sweep = datetime.now()
        self._lock = Lock()

    def lookup(self, token: str) -> Optional[CacheEntry]:
        """
        Get the live entry for a token.

        Args:
            token: Raw access token

        Returns:
            The entry, or None on a miss. An entry whose identity is None
            means "checked, not signed in".
        """
        key = token_key(token)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                del self._entries[key]
                return None

            return entry

    def store(self, token: str, identity: Optional[Identity], ttl_seconds: Optional[int] = None):
        """
        Cache the resolved identity for a token.

        Args:
            token: Raw access token (only its digest is kept)
            identity: Resolved identity, or None for "not signed in"
            ttl_seconds: Time to live in seconds (defaults to the cache TTL)
        """
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            now = datetime.now()
            if now >= self._next_sweep:
                self._drop_expired()
                self._next_sweep = now + timedelta(seconds=self.sweep_interval_seconds)
            self._entries[token_key(token)] = CacheEntry(identity, ttl)

    def invalidate(self, token: str):
        """
        Drop the entry for a token (the logout signal).

        Args:
            token: Raw access token
        """
        with self._lock:
            removed = self._entries.pop(token_key(token), None)
        if removed is not None:
            logger.debug("Identity cache entry invalidated")

    def clear(self):
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries from cache.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._drop_expired()

    def _drop_expired(self) -> int:
        # Caller holds the lock
        expired_keys = [
            key for key, entry in self._entries.items()
            if entry.is_expired()
        ]
        for key in expired_keys:
            del self._entries[key]
        if expired_keys:
            logger.debug(f"Swept {len(expired_keys)} expired identity cache entries")
        return len(expired_keys)

    def size(self) -> int:
        """Get the number of entries in cache."""
        with self._lock:
            return len(self._entries)


# Global cache instance
_cache = IdentityCache(ttl_seconds=settings.IDENTITY_CACHE_TTL_SECONDS)


def get_identity_cache() -> IdentityCache:
    """Get the global identity cache instance."""
    return _cache


def cache_clear():
    """Clear all cache entries."""
    _cache.clear()
