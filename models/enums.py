from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Closed set of portal roles. Every role gets its own dashboard."""

    tenant = "tenant"
    landlord = "landlord"
    agency = "agency"
    maintenance = "maintenance"


# -----------------------------------------------------
# GUARD DECISION KIND
# -----------------------------------------------------
class DecisionKind(BaseStrEnum):
    """Discriminator for GuardDecision variants."""

    render = "render"
    redirect = "redirect"
    pending = "pending"
