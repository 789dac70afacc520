# core/config_validator.py

from typing import List, Optional
from core.config import settings
from core.logging_config import logger
from core.navigation import validate_navigation_table
from core.route_table import validate_route_table


def validate_required_config() -> List[str]:
    """
    Validate that the Supabase Auth settings are present.
    Returns list of missing required variables.
    """
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not (settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY):
        missing.append("SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """
    Optional but recommended configuration (warnings only).
    """
    warnings = []

    if not settings.SUPABASE_ANON_KEY:
        warnings.append("SUPABASE_ANON_KEY (password login disabled without it)")
    if settings.AUTH_BYPASS_ENABLED and not settings.DEMO_TOKEN_SECRET:
        warnings.append("DEMO_TOKEN_SECRET (bypass mode stays off without it)")
    if settings.AUTH_BYPASS_ENABLED and settings.is_production:
        warnings.append("AUTH_BYPASS_ENABLED is ignored in production")

    return warnings


def validate_guard_tables():
    """
    Route table + role mappings + navigation tables.
    Raises GuardConfigError subclasses; these are always fatal.
    """
    validate_route_table()
    validate_navigation_table()


def validate_config_on_startup(strict: Optional[bool] = None):
    """
    Guard tables are always validated. Missing Supabase settings raise
    RuntimeError in production and are only logged otherwise.
    """
    validate_guard_tables()

    if strict is None:
        strict = settings.is_production

    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        if strict:
            raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Optional configuration missing: {warning}")

    logger.info("Configuration validation passed")
