# core/errors.py


# ============================================================
# CONFIGURATION ERRORS (fatal, raised at startup / in tests)
# ============================================================
class GuardConfigError(RuntimeError):
    """Base class for route guard configuration mistakes."""


class MissingRoleMapping(GuardConfigError):
    """A role has no default dashboard (or no navigation table)."""

    def __init__(self, role):
        self.role = role
        super().__init__(f"No default dashboard mapped for role '{role}'")


class UnknownRequiredRole(GuardConfigError):
    """A RouteSpec references a role outside the closed role set."""

    def __init__(self, path: str, role):
        self.path = path
        self.role = role
        super().__init__(f"Route '{path}' requires unknown role '{role}'")


class RouteTableError(GuardConfigError):
    """The static route table is inconsistent."""


# ============================================================
# RUNTIME ERRORS (non-fatal, fail closed)
# ============================================================
class SessionCheckFailed(Exception):
    """
    The auth collaborator could not resolve an identity
    (network error, Supabase outage, malformed response).
    The guard treats this as unauthenticated.
    """

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(extract_supabase_error(cause))


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • GoTrue (Auth) errors
      • Errors carrying args
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if error.args:
        return str(error.args[0])

    # Case 3: class name fallback
    return type(error).__name__
