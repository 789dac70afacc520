# core/role_policy.py

"""
Pure allow/redirect policy for page navigation.

`decide()` never performs I/O or navigation; the route guard consumes
its result and performs the single side effect (if any).
"""

from typing import Optional

from core.config import settings
from core.roles import default_dashboard
from models.decision import GuardDecision, Pending, RedirectTo, Render
from models.enums import Role
from models.identity import SessionState


def decide(
    path: str,
    required_role: Optional[Role],
    state: SessionState,
) -> GuardDecision:
    """
    Rules, in order:
      1. session still resolving          → Pending
      2. nobody signed in / inactive user → RedirectTo(auth page)
      3. wrong role for this route        → RedirectTo(own dashboard)
      4. otherwise                        → Render
    """
    if state.pending:
        return Pending()

    identity = state.identity
    if identity is None or not identity.is_active:
        return RedirectTo(path=settings.AUTH_PATH)

    if required_role is not None and identity.role != required_role:
        return RedirectTo(path=default_dashboard(identity.role))

    return Render()
