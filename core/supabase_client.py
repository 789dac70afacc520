# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client for token validation.
    Prefers the SERVICE ROLE KEY and falls back to the anon key;
    auth.get_user(token) works with either.
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


def get_anon_client() -> Optional[Client]:
    """
    Client used for password sign-in. Sign-in must go through the
    anon key so the session belongs to the user, not the service role.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        logger.error("Missing Supabase anon credentials")
        return None

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Auth health check
# ============================================================

def ping_supabase_auth() -> dict:
    """
    Reports whether Supabase Auth is configured and a client can be
    built. No user data is read.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase Auth", "status": "not_configured"}

    try:
        client.auth.get_session()
        return {"service": "Supabase Auth", "status": "ok"}
    except Exception as e:
        logger.error(f"Supabase Auth Ping Error: {e}", exc_info=True)
        return {"service": "Supabase Auth", "status": "error", "detail": str(e)}
