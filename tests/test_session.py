# tests/test_session.py

"""
Tests for session resolution against Supabase Auth and demo tokens.
"""

import asyncio
import gc
import logging
import threading
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from core.cache import IdentityCache
from core.config import settings
from core.errors import SessionCheckFailed
from core.session import (
    DemoIdentitySource,
    RequestSessionResolver,
    SupabaseIdentitySource,
    decode_demo_token,
    identity_from_auth_user,
    issue_demo_token,
)
from models.enums import Role
from tests.conftest import FakeIdentitySource, make_identity


def auth_user(role="landlord", is_active=True, user_id="user-1"):
    metadata = {"full_name": "Eliad Khosa"}
    if role is not None:
        metadata["role"] = role
    if is_active is not None:
        metadata["is_active"] = is_active
    return SimpleNamespace(id=user_id, email="eliad@example.com", user_metadata=metadata)


def supabase_returning(user):
    client = Mock()
    client.auth.get_user.return_value = SimpleNamespace(user=user)
    return client


# -----------------------------------------------------
# RequestSessionResolver
# -----------------------------------------------------
def test_no_token_is_resolved_anonymous():
    source = FakeIdentitySource()
    state = asyncio.run(RequestSessionResolver(source, None).resolve())

    assert state.pending is False
    assert state.identity is None
    assert source.calls == []


def test_known_token_resolves_identity():
    identity = make_identity(Role.tenant)
    source = FakeIdentitySource({"t": identity})
    state = asyncio.run(RequestSessionResolver(source, "t").resolve())

    assert state.pending is False
    assert state.identity == identity


def test_slow_check_reports_pending():
    source = FakeIdentitySource({"t": make_identity(Role.tenant)}, delay=0.5)
    state = asyncio.run(RequestSessionResolver(source, "t", timeout_seconds=0.01).resolve())

    assert state.pending is True
    assert state.identity is None


def test_failed_check_is_unauthenticated():
    source = FakeIdentitySource(error=ConnectionError("gotrue unreachable"))
    state = asyncio.run(RequestSessionResolver(source, "t").resolve())

    assert state.pending is False
    assert state.identity is None
    assert source.calls == ["t"]


def test_abandoned_failed_check_is_logged_not_leaked(caplog):
    source = FakeIdentitySource(error=ConnectionError("gotrue unreachable"), delay=0.05)
    loop_errors = []

    async def resolve_then_wait():
        asyncio.get_running_loop().set_exception_handler(
            lambda loop, context: loop_errors.append(context["message"])
        )
        state = await RequestSessionResolver(source, "t", timeout_seconds=0.01).resolve()
        await asyncio.sleep(0.1)
        gc.collect()
        return state

    with caplog.at_level(logging.WARNING, logger="tov"):
        state = asyncio.run(resolve_then_wait())

    assert state.pending is True
    assert loop_errors == []
    assert "Background session check failed: gotrue unreachable" in caplog.text


# -----------------------------------------------------
# Supabase identity mapping
# -----------------------------------------------------
def test_identity_from_auth_user_reads_metadata():
    identity = identity_from_auth_user(auth_user(role="agency"))

    assert identity.id == "user-1"
    assert identity.role is Role.agency
    assert identity.is_active is True
    assert identity.full_name == "Eliad Khosa"


def test_missing_role_defaults_to_tenant():
    assert identity_from_auth_user(auth_user(role=None)).role is Role.tenant


def test_unknown_role_yields_no_identity():
    assert identity_from_auth_user(auth_user(role="super_admin")) is None


def test_inactive_flag_is_carried():
    assert identity_from_auth_user(auth_user(is_active=False)).is_active is False


# -----------------------------------------------------
# SupabaseIdentitySource
# -----------------------------------------------------
def test_supabase_source_caches_identity():
    client = supabase_returning(auth_user())
    source = SupabaseIdentitySource(client_factory=lambda: client, cache=IdentityCache(60))

    async def twice():
        return (
            await source.get_current_identity("jwt"),
            await source.get_current_identity("jwt"),
        )

    first, second = asyncio.run(twice())

    assert first == second
    assert first.role is Role.landlord
    client.auth.get_user.assert_called_once_with("jwt")


def test_supabase_source_caches_anonymous_result():
    client = supabase_returning(None)
    cache = IdentityCache(60)
    source = SupabaseIdentitySource(client_factory=lambda: client, cache=cache)

    assert asyncio.run(source.get_current_identity("expired")) is None
    entry = cache.lookup("expired")
    assert entry is not None and entry.identity is None


def test_supabase_source_failure_is_not_cached():
    client = Mock()
    client.auth.get_user.side_effect = RuntimeError("timeout talking to GoTrue")
    cache = IdentityCache(60)
    source = SupabaseIdentitySource(client_factory=lambda: client, cache=cache)

    with pytest.raises(SessionCheckFailed):
        asyncio.run(source.get_current_identity("jwt"))
    assert cache.lookup("jwt") is None


def test_unconfigured_supabase_is_a_failed_check():
    source = SupabaseIdentitySource(client_factory=lambda: None, cache=IdentityCache(60))
    state = asyncio.run(RequestSessionResolver(source, "jwt").resolve())
    assert state.identity is None


def test_concurrent_lookups_share_one_call():
    client = supabase_returning(auth_user())
    source = SupabaseIdentitySource(client_factory=lambda: client, cache=IdentityCache(60))

    async def together():
        return await asyncio.gather(*(source.get_current_identity("jwt") for _ in range(3)))

    results = asyncio.run(together())

    assert len({r.id for r in results}) == 1
    client.auth.get_user.assert_called_once()


def test_logout_invalidates_cached_identity():
    client = supabase_returning(auth_user())
    cache = IdentityCache(60)
    source = SupabaseIdentitySource(client_factory=lambda: client, cache=cache)

    asyncio.run(source.get_current_identity("jwt"))
    source.invalidate("jwt")

    assert cache.lookup("jwt") is None


def test_logout_during_lookup_keeps_result_out_of_cache():
    gate = threading.Event()

    def slow_get_user(token):
        gate.wait(5)
        return SimpleNamespace(user=auth_user())

    client = Mock()
    client.auth.get_user.side_effect = slow_get_user
    cache = IdentityCache(60)
    source = SupabaseIdentitySource(client_factory=lambda: client, cache=cache)

    async def logout_mid_flight():
        lookup = asyncio.ensure_future(source.get_current_identity("jwt"))
        await asyncio.sleep(0.05)
        source.invalidate("jwt")
        gate.set()
        return await lookup

    identity = asyncio.run(logout_mid_flight())

    assert identity.role is Role.landlord
    assert cache.lookup("jwt") is None


# -----------------------------------------------------
# Demo tokens
# -----------------------------------------------------
@pytest.fixture
def bypass_mode(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "development")
    monkeypatch.setattr(settings, "AUTH_BYPASS_ENABLED", True)
    monkeypatch.setattr(settings, "DEMO_TOKEN_SECRET", "test-demo-secret")


def test_demo_token_round_trip(bypass_mode):
    identity = decode_demo_token(issue_demo_token(Role.maintenance))

    assert identity.role is Role.maintenance
    assert identity.id == "15"


def test_demo_source_accepts_demo_tokens(bypass_mode):
    wrapped = FakeIdentitySource()
    source = DemoIdentitySource(wrapped)

    identity = asyncio.run(source.get_current_identity(issue_demo_token(Role.tenant)))

    assert identity.role is Role.tenant
    assert wrapped.calls == []


def test_demo_source_delegates_other_tokens(bypass_mode):
    real = make_identity(Role.landlord)
    wrapped = FakeIdentitySource({"supabase-jwt": real})

    assert asyncio.run(DemoIdentitySource(wrapped).get_current_identity("supabase-jwt")) == real


def test_demo_tokens_ignored_in_production(bypass_mode, monkeypatch):
    token = issue_demo_token(Role.agency)
    monkeypatch.setattr(settings, "ENV", "production")
    wrapped = FakeIdentitySource()

    assert asyncio.run(DemoIdentitySource(wrapped).get_current_identity(token)) is None
    assert wrapped.calls == [token]
