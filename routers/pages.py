# routers/pages.py

from fastapi import APIRouter, Depends, Request

from core.route_guard import RouteGuard
from core.route_table import ROUTES, RouteSpec
from dependencies.auth import get_route_guard
from models.identity import Identity

router = APIRouter(tags=["Pages"])


def view_name(path: str) -> str:
    """
    Client view key for a route pattern:
      "/"                         → "home"
      "/landlord/financials"      → "landlord.financials"
      "/agency/properties/{id}"   → "agency.properties.detail"
    """
    parts = []
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        parts.append("detail" if segment.startswith("{") else segment)
    return ".".join(parts) or "home"


def _page_endpoint(spec: RouteSpec):
    async def page(request: Request, guard: RouteGuard = Depends(get_route_guard)):
        def children(identity: Identity) -> dict:
            return {
                "view": view_name(spec.path),
                "params": dict(request.path_params),
            }

        return await guard.guard(spec, children)

    page.__name__ = f"page_{view_name(spec.path).replace('.', '_').replace('-', '_')}"
    return page


# -----------------------------------------------------
# One guarded GET route per RouteSpec
# -----------------------------------------------------
for _spec in ROUTES:
    router.add_api_route(
        _spec.path,
        _page_endpoint(_spec),
        methods=["GET"],
        summary=_spec.title,
        description=(
            f"Requires role '{_spec.required_role}'."
            if _spec.required_role
            else "Any signed-in user."
        ),
    )
