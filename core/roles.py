# ============================================
# CENTRALIZED ROLE → DEFAULT DASHBOARD MAP
# ============================================
from typing import Iterable, Mapping

from core.errors import MissingRoleMapping
from models.enums import Role


DEFAULT_DASHBOARDS: Mapping[Role, str] = {

    # =====================================================
    # TENANT
    # =====================================================
    Role.tenant: "/tenant/dashboard",

    # =====================================================
    # LANDLORD
    # =====================================================
    Role.landlord: "/landlord/dashboard",

    # =====================================================
    # AGENCY
    # =====================================================
    Role.agency: "/agency/dashboard",

    # =====================================================
    # MAINTENANCE PROVIDER
    # =====================================================
    Role.maintenance: "/maintenance/dashboard",
}


def default_dashboard(role: Role) -> str:
    """Canonical landing path for a role (redirect target)."""
    try:
        return DEFAULT_DASHBOARDS[Role(role)]
    except (KeyError, ValueError):
        raise MissingRoleMapping(role)


def validate_role_mapping(
    mapping: Mapping[Role, str] = DEFAULT_DASHBOARDS,
    roles: Iterable[Role] = Role,
) -> None:
    """
    Every role in the closed set must have a dashboard that is an
    absolute in-app path. Raises MissingRoleMapping otherwise.
    """
    for role in roles:
        path = mapping.get(role)
        if not path or not path.startswith("/"):
            raise MissingRoleMapping(role)
