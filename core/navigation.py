# core/navigation.py

"""
Role-based sidebar navigation.

The tables below are static. `entries()` turns them into the links for
one render, computing each link's active flag from the current path.
"""

from dataclasses import dataclass
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict

from core.errors import MissingRoleMapping
from core.roles import default_dashboard
from models.enums import Role


# ============================================================
# Active-link matching
# ============================================================
@dataclass(frozen=True)
class ActiveMatcher:
    exact: Tuple[str, ...] = ()
    contains: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()

    def is_active(self, current_path: str) -> bool:
        if any(fragment in current_path for fragment in self.excludes):
            return False
        if current_path in self.exact:
            return True
        return any(fragment in current_path for fragment in self.contains)


@dataclass(frozen=True)
class NavigationEntry:
    path: str
    label: str
    icon: str
    matcher: ActiveMatcher

    def is_active(self, current_path: str) -> bool:
        return self.matcher.is_active(current_path)


class NavigationLink(BaseModel):
    """One rendered sidebar link."""
    model_config = ConfigDict(frozen=True)

    path: str
    label: str
    icon: str
    active: bool


def _entry(path, label, icon, *contains, exact=(), excludes=()):
    return NavigationEntry(
        path, label, icon,
        ActiveMatcher(exact=tuple(exact), contains=tuple(contains), excludes=tuple(excludes)),
    )


def _marketplace(icon="calendar"):
    return _entry("/maintenance/marketplace", "Service Marketplace", icon, "/marketplace")


# ============================================================
# STATIC TABLES
# ============================================================
def _base_entries(role: Role) -> Tuple[NavigationEntry, ...]:
    dashboard = default_dashboard(role)
    return (
        _entry(dashboard, "Dashboard", "home", exact=(dashboard, "/dashboard")),
        _entry("/messages", "Messages", "message-square", "/messages"),
        _entry("/documents", "Documents", "file-text", "/documents"),
    )


ROLE_ENTRIES: Mapping[Role, Tuple[NavigationEntry, ...]] = {

    # =====================================================
    # TENANT
    # =====================================================
    Role.tenant: (
        _entry("/tenant/maintenance", "Maintenance", "wrench", "/tenant/maintenance"),
        _marketplace(),
        _entry("/tenant/properties", "My Property", "building", "/tenant/properties"),
        _entry("/tenant/payments", "Payments", "dollar-sign", "/tenant/payments"),
        _entry("/tenant/search", "Find Properties", "search", "/tenant/search"),
    ),

    # =====================================================
    # LANDLORD
    # =====================================================
    Role.landlord: (
        _entry("/landlord/properties", "Properties", "building", "/landlord/properties"),
        _entry("/landlord/tenants", "Tenants", "users", "/landlord/tenants"),
        _entry("/landlord/maintenance", "Maintenance", "wrench", "/landlord/maintenance"),
        _entry(
            "/landlord/document-management", "Document Management", "file-text",
            "/landlord/document-management",
        ),
        _marketplace(),
        _entry(
            "/landlord/financials", "Financials", "dollar-sign",
            "/landlord/financials", "/landlord/financial-management",
        ),
        _entry("/landlord/analytics", "Analytics", "bar-chart", "/landlord/analytics"),
    ),

    # =====================================================
    # AGENCY
    # =====================================================
    Role.agency: (
        _entry("/agency/properties", "Property Marketing", "building", "/agency/properties"),
        _entry("/agency/property-listings", "Listings", "panel-left", "/agency/property-listings"),
        _entry("/agency/leads-management", "Leads", "users", "/agency/leads-management"),
        _entry("/agency/landlords", "Landlords", "user", "/agency/landlords"),
        _entry(
            "/agency/commission-tracker", "Commissions", "dollar-sign",
            "/agency/commission-tracker",
        ),
        _entry(
            "/agency/expiring-leases", "Expiring Leases", "calendar",
            "/agency/expiring-leases",
        ),
        _marketplace(icon="wrench"),
    ),

    # =====================================================
    # MAINTENANCE PROVIDER
    # =====================================================
    Role.maintenance: (
        _entry(
            "/maintenance/jobs", "My Jobs", "wrench",
            "/maintenance/jobs", excludes=("/marketplace",),
        ),
        _marketplace(),
        _entry("/maintenance/earnings", "Earnings", "dollar-sign", "/maintenance/earnings"),
        _entry("/maintenance/schedule", "Schedule", "calendar", "/maintenance/schedule"),
    ),
}

BOTTOM_ENTRIES: Tuple[NavigationEntry, ...] = (
    _entry("/settings", "Settings", "settings", exact=("/settings",)),
    _entry("/contact", "Support", "phone", exact=("/contact",)),
)


def validate_navigation_table(table: Mapping[Role, tuple] = ROLE_ENTRIES) -> None:
    """Every role needs a sidebar table, even an empty one."""
    for role in Role:
        if role not in table:
            raise MissingRoleMapping(role)


# ============================================================
# PUBLIC API
# ============================================================
def role_entries(role: Role) -> Tuple[NavigationEntry, ...]:
    """Ordered static entries for a role, de-duplicated by path."""
    role = Role(role)
    if role not in ROLE_ENTRIES:
        raise MissingRoleMapping(role)

    seen = set()
    ordered = []
    for entry in _base_entries(role) + ROLE_ENTRIES[role] + BOTTOM_ENTRIES:
        if entry.path in seen:
            continue
        seen.add(entry.path)
        ordered.append(entry)
    return tuple(ordered)


def entries(role: Role, current_path: str) -> Tuple[NavigationLink, ...]:
    return tuple(
        NavigationLink(
            path=entry.path,
            label=entry.label,
            icon=entry.icon,
            active=entry.is_active(current_path),
        )
        for entry in role_entries(role)
    )
