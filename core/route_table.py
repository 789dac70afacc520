# core/route_table.py

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from core.errors import RouteTableError, UnknownRequiredRole
from core.roles import DEFAULT_DASHBOARDS, validate_role_mapping
from models.enums import Role


# ============================================================
# RouteSpec: static, defined at startup, immutable
# ============================================================
@dataclass(frozen=True)
class RouteSpec:
    path: str
    required_role: Optional[Role] = None
    title: str = field(default="", compare=False)

    def __post_init__(self):
        role = self.required_role
        if role is None or isinstance(role, Role):
            return
        try:
            object.__setattr__(self, "required_role", Role(role))
        except ValueError:
            raise UnknownRequiredRole(self.path, role)


def _role_pages(role: Role, pages: Sequence[tuple]) -> list:
    return [RouteSpec(f"/{role.value}/{slug}", role, title) for slug, title in pages]


# ============================================================
# PAGE ROUTES
# ============================================================
SHARED_ROUTES = [
    RouteSpec("/", None, "Home"),
    RouteSpec("/dashboard", None, "Dashboard"),
    RouteSpec("/properties", None, "Properties"),
    RouteSpec("/tenants", None, "Tenants"),
    RouteSpec("/maintenance", None, "Maintenance"),
    RouteSpec("/documents", None, "Documents"),
    RouteSpec("/messages", None, "Messages"),
    RouteSpec("/settings", None, "Settings"),
    RouteSpec("/contact", None, "Support"),
    # Tenants, landlords and agencies all browse the provider marketplace
    RouteSpec("/maintenance/marketplace", None, "Service Marketplace"),
]

TENANT_ROUTES = _role_pages(Role.tenant, [
    ("dashboard", "Tenant Dashboard"),
    ("properties", "My Property"),
    ("maintenance", "Maintenance Requests"),
    ("payments", "Payments"),
    ("applications", "Applications"),
    ("lease-history", "Lease History"),
    ("search", "Find Properties"),
    ("settings", "Tenant Settings"),
])

LANDLORD_ROUTES = _role_pages(Role.landlord, [
    ("dashboard", "Landlord Dashboard"),
    ("properties", "Properties"),
    ("tenants", "Tenants"),
    ("maintenance", "Maintenance"),
    ("document-management", "Document Management"),
    ("financials", "Financials"),
    ("financial-management", "Financial Management"),
    ("analytics", "Analytics"),
    ("market-intelligence", "Market Intelligence"),
    ("settings", "Landlord Settings"),
])

AGENCY_ROUTES = _role_pages(Role.agency, [
    ("dashboard", "Agency Dashboard"),
    ("properties", "Property Marketing"),
    ("properties/{property_id}", "Property Detail"),
    ("property-listings", "Listings"),
    ("leads-management", "Leads"),
    ("landlords", "Landlords"),
    ("commission-tracker", "Commissions"),
    ("expiring-leases", "Expiring Leases"),
    ("settings", "Agency Settings"),
])

MAINTENANCE_ROUTES = _role_pages(Role.maintenance, [
    ("dashboard", "Maintenance Dashboard"),
    ("jobs", "My Jobs"),
    ("earnings", "Earnings"),
    ("schedule", "Schedule"),
    ("settings", "Maintenance Settings"),
])

ROUTES = (
    SHARED_ROUTES
    + TENANT_ROUTES
    + LANDLORD_ROUTES
    + AGENCY_ROUTES
    + MAINTENANCE_ROUTES
)


# ============================================================
# VALIDATION (run once at startup and in tests)
# ============================================================
def validate_route_table(
    routes: Iterable[RouteSpec] = ROUTES,
    dashboards=DEFAULT_DASHBOARDS,
) -> None:
    """
    Raises:
        MissingRoleMapping: a required role has no default dashboard
        RouteTableError: duplicate paths, or a dashboard that is not
            itself a route guarded by its own role
    """
    validate_role_mapping(dashboards)

    routes = list(routes)
    by_path = {}
    for spec in routes:
        if spec.path in by_path:
            raise RouteTableError(f"Duplicate route path '{spec.path}'")
        by_path[spec.path] = spec

    # Every role can be redirected to its dashboard, even one no route requires
    for role in Role:
        target = dashboards[role]
        dashboard_spec = by_path.get(target)
        if dashboard_spec is None or dashboard_spec.required_role != role:
            raise RouteTableError(
                f"Dashboard '{target}' for role '{role}' "
                f"is not a route guarded by that role"
            )


def find_route(path: str, routes: Iterable[RouteSpec] = ROUTES) -> Optional[RouteSpec]:
    for spec in routes:
        if spec.path == path:
            return spec
    return None
