# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    DecisionKind,
)

# -------------------------
# Identity Models
# -------------------------
from .identity import (
    Identity,
    UserMetadata,
    SessionState,
)

# -------------------------
# Guard Decisions
# -------------------------
from .decision import (
    GuardDecision,
    Render,
    RedirectTo,
    Pending,
)
