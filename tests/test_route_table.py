# tests/test_route_table.py

"""
Tests for the static route table and its startup validation.
"""

import pytest

from core.errors import MissingRoleMapping, RouteTableError, UnknownRequiredRole
from core.roles import DEFAULT_DASHBOARDS
from core.route_table import ROUTES, RouteSpec, find_route, validate_route_table
from models.enums import Role


def test_shipped_route_table_is_valid():
    validate_route_table()


def test_every_dashboard_is_guarded_by_its_role():
    for role, path in DEFAULT_DASHBOARDS.items():
        spec = find_route(path)
        assert spec is not None
        assert spec.required_role == role


def test_route_spec_coerces_role_strings():
    spec = RouteSpec("/tenant/payments", "tenant", "Payments")
    assert spec.required_role is Role.tenant


def test_route_spec_rejects_unknown_role():
    with pytest.raises(UnknownRequiredRole) as exc:
        RouteSpec("/admin/dashboard", "admin")
    assert exc.value.path == "/admin/dashboard"


def test_route_spec_is_immutable():
    spec = find_route("/tenant/dashboard")
    with pytest.raises(AttributeError):
        spec.required_role = Role.landlord


def test_duplicate_paths_are_rejected():
    routes = list(ROUTES) + [RouteSpec("/messages", None, "Messages again")]
    with pytest.raises(RouteTableError):
        validate_route_table(routes)


def test_dashboard_missing_from_routes_is_rejected():
    routes = [spec for spec in ROUTES if spec.path != "/maintenance/dashboard"]
    with pytest.raises(RouteTableError):
        validate_route_table(routes)


def test_dashboard_guarded_by_wrong_role_is_rejected():
    routes = [
        RouteSpec(spec.path, Role.tenant, spec.title) if spec.path == "/agency/dashboard" else spec
        for spec in ROUTES
    ]
    with pytest.raises(RouteTableError):
        validate_route_table(routes)


def test_missing_role_mapping_is_rejected():
    dashboards = {r: p for r, p in DEFAULT_DASHBOARDS.items() if r != Role.landlord}
    with pytest.raises(MissingRoleMapping):
        validate_route_table(ROUTES, dashboards)


def test_find_route_unknown_path():
    assert find_route("/nowhere") is None
