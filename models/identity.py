# models/identity.py

from typing import Optional
from pydantic import BaseModel, ConfigDict

from models.enums import Role


# ===============================================================
# AUTHENTICATED IDENTITY (read-only view of the auth collaborator)
# ===============================================================

class Identity(BaseModel):
    """
    The signed-in user as resolved from Supabase Auth.
    The guard only reads it; it is never mutated after resolution.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    is_active: bool = True

    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None


class UserMetadata(BaseModel):
    """
    Mirrors auth.users.user_metadata (or raw_user_meta_data).
    Role stays a plain string here; it is checked against the
    closed role set when the Identity is built.
    """
    role: Optional[str] = None
    is_active: Optional[bool] = True
    full_name: Optional[str] = None
    phone: Optional[str] = None


class SessionState(BaseModel):
    """
    Result of one session resolution. `pending` means the identity
    check is still outstanding; `identity=None` with `pending=False`
    means the check completed and nobody is signed in.
    """
    model_config = ConfigDict(frozen=True)

    identity: Optional[Identity] = None
    pending: bool = False
