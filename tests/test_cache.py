# tests/test_cache.py

"""
Tests for the identity cache.
"""

from datetime import datetime, timedelta

from core.cache import IdentityCache, get_identity_cache, cache_clear
from models.enums import Role
from tests.conftest import make_identity


def test_store_and_lookup():
    cache = IdentityCache(ttl_seconds=60)
    identity = make_identity(Role.tenant)

    cache.store("token", identity)

    assert cache.lookup("token").identity == identity


def test_miss_is_distinct_from_cached_anonymous():
    cache = IdentityCache(ttl_seconds=60)
    cache.store("anonymous", None)

    assert cache.lookup("never-seen") is None
    assert cache.lookup("anonymous").identity is None


def test_expired_entries_are_dropped():
    cache = IdentityCache(ttl_seconds=60)
    cache.store("token", make_identity(Role.agency))
    cache.lookup("token").expires_at = datetime.now() - timedelta(seconds=1)

    assert cache.lookup("token") is None
    assert cache.size() == 0


def test_cleanup_expired():
    cache = IdentityCache(ttl_seconds=60)
    cache.store("stale", make_identity(Role.agency), ttl_seconds=0)
    cache.store("fresh", make_identity(Role.landlord))

    cache.cleanup_expired()

    assert cache.size() == 1


def test_invalidate():
    cache = IdentityCache(ttl_seconds=60)
    cache.store("token", make_identity(Role.maintenance))

    cache.invalidate("token")

    assert cache.lookup("token") is None


def test_raw_tokens_are_not_kept_as_keys():
    cache = IdentityCache(ttl_seconds=60)
    cache.store("secret-access-token", make_identity(Role.tenant))

    assert "secret-access-token" not in cache._entries


def test_cache_clear():
    get_identity_cache().store("key1", make_identity(Role.tenant))
    get_identity_cache().store("key2", None)

    cache_clear()

    assert get_identity_cache().size() == 0


def test_expired_entries_are_swept_on_store():
    cache = IdentityCache(ttl_seconds=60, sweep_interval_seconds=0)

    for i in range(1000):
        cache.store(f"rotated-token-{i}", make_identity(Role.tenant), ttl_seconds=0)

    # Only the entry written last survives the sweep
    assert cache.size() == 1


def test_sweep_keeps_live_entries():
    cache = IdentityCache(ttl_seconds=60, sweep_interval_seconds=0)
    cache.store("live", make_identity(Role.landlord))
    cache.store("stale", make_identity(Role.agency), ttl_seconds=0)
    cache.store("other", None)

    assert cache.lookup("live") is not None
    assert cache.lookup("stale") is None
    assert cache.size() == 2
