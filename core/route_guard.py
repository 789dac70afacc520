# core/route_guard.py

"""
Route guard: composes session resolution, the role policy and the
navigation model into one response per page request.

Only this layer performs navigation, and it does so at most once per
evaluation. Page content is produced lazily so a redirect can never
leak protected content.
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from core.logging_config import logger
from core.navigation import entries
from core.role_policy import decide
from core.route_table import RouteSpec
from core.session import SessionResolver
from models.decision import Pending, RedirectTo
from models.identity import Identity


PageChildren = Callable[[Identity], Union[Any, Awaitable[Any]]]


# ============================================================
# Router collaborator
# ============================================================
class Navigator(Protocol):
    def current_path(self) -> str:
        ...

    async def is_current(self, path: str) -> bool:
        ...

    def navigate(self, path: str) -> Response:
        ...

    def discard(self) -> Response:
        ...


class RequestNavigator:
    """Navigator over one HTTP request; redirects are 303 See Other."""

    def __init__(self, request: Request):
        self.request = request

    def current_path(self) -> str:
        return self.request.url.path

    async def is_current(self, path: str) -> bool:
        # A client that hung up has navigated elsewhere
        if self.request.url.path != path:
            return False
        return not await self.request.is_disconnected()

    def navigate(self, path: str) -> Response:
        return RedirectResponse(url=path, status_code=status.HTTP_303_SEE_OTHER)

    def discard(self) -> Response:
        return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================
# Page envelope
# ============================================================
class PageRenderer:
    retry_after_seconds = 1

    def loading(self) -> Response:
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={"status": "loading"},
            headers={"Retry-After": str(self.retry_after_seconds)},
        )

    def render(self, spec: RouteSpec, identity: Identity, content: Any, current_path: str) -> Response:
        return JSONResponse(
            content={
                "page": {"path": current_path, "title": spec.title},
                "user": identity.model_dump(mode="json"),
                "navigation": [
                    link.model_dump() for link in entries(identity.role, current_path)
                ],
                "content": content,
            }
        )


# ============================================================
# Guard
# ============================================================
class RouteGuard:
    def __init__(
        self,
        resolver: SessionResolver,
        navigator: Navigator,
        renderer: Optional[PageRenderer] = None,
    ):
        self.resolver = resolver
        self.navigator = navigator
        self.renderer = renderer or PageRenderer()

    async def guard(self, spec: RouteSpec, children: PageChildren) -> Response:
        issued_for = self.navigator.current_path()
        state = await self.resolver.resolve()

        if not await self.navigator.is_current(issued_for):
            logger.info(f"Discarding stale session resolution for {issued_for}")
            return self.navigator.discard()

        decision = decide(spec.path, spec.required_role, state)
        logger.debug(
            f"Guard {issued_for} (requires {spec.required_role or 'any role'}): "
            f"{decision.kind}"
        )

        if isinstance(decision, Pending):
            return self.renderer.loading()

        if isinstance(decision, RedirectTo):
            return self.navigator.navigate(decision.path)

        content = children(state.identity)
        if inspect.isawaitable(content):
            content = await content
        return self.renderer.render(spec, state.identity, content, issued_for)
