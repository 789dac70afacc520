from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Tov Portal API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:5000",
        "http://localhost:5173",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Auth / session store)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # Route guard
    # -------------------------------------------------
    AUTH_PATH: str = "/auth"
    SESSION_COOKIE_NAME: str = "tov_session"
    SESSION_CHECK_TIMEOUT_SECONDS: float = Field(
        2.0,
        env="SESSION_CHECK_TIMEOUT_SECONDS",
        description="How long a page request waits on the identity check before answering 'loading'",
    )
    IDENTITY_CACHE_TTL_SECONDS: int = Field(60, env="IDENTITY_CACHE_TTL_SECONDS")

    # -------------------------------------------------
    # Demo mode (bypass login)
    # -------------------------------------------------
    AUTH_BYPASS_ENABLED: bool = Field(False, env="AUTH_BYPASS_ENABLED")
    DEMO_TOKEN_SECRET: Optional[str] = Field(None, env="DEMO_TOKEN_SECRET")
    DEMO_TOKEN_ALGORITHM: str = "HS256"
    DEMO_TOKEN_TTL_MINUTES: int = Field(480, env="DEMO_TOKEN_TTL_MINUTES")

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def bypass_enabled(self) -> bool:
        """Demo logins are never honoured in production."""
        return (
            self.AUTH_BYPASS_ENABLED
            and not self.is_production
            and bool(self.DEMO_TOKEN_SECRET)
        )

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
settings.BACKEND_CORS_ORIGINS = sorted(
    {d.rstrip("/") for d in settings.FRONTEND_DOMAINS}
)
