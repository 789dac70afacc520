# routers/navigation.py

from typing import List
from fastapi import APIRouter, Depends, Query

from core.navigation import NavigationLink, entries
from dependencies.auth import get_current_identity
from models.identity import Identity

router = APIRouter(
    prefix="/navigation",
    tags=["Navigation"],
)


# -----------------------------------------------------
# GET /navigation?path=/landlord/tenants
# Sidebar links for the signed-in user's role
# -----------------------------------------------------
@router.get("", response_model=List[NavigationLink], summary="Sidebar navigation")
def read_navigation(
    path: str = Query("/", description="Path the client is currently showing"),
    identity: Identity = Depends(get_current_identity),
):
    return list(entries(identity.role, path))
