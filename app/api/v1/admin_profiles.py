# app/api/v1/admin_profiles.py
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.v1.presenters import profile_to_schema
from app.core.auth_deps import access_denied, get_current_principal
from app.db.session import get_db
from app.policies.rbac import ACTION_MANAGE_ROLES, Principal, require_action
from app.schemas.auth import ProfileOut
from app.schemas.profiles import RoleUpdateRequest
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/admin/profiles", tags=["admin"])


def _admin_only(principal: Principal) -> None:
    try:
        require_action(principal, ACTION_MANAGE_ROLES)
    except PermissionError:
        raise access_denied("Access denied. Only admins can manage users.")


# LIST PROFILES (user management table)
@router.get("", response_model=list[ProfileOut])
def list_profiles(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _admin_only(principal)
    return [profile_to_schema(p) for p in ProfileService().list_profiles(db)]


# CHANGE ROLE (in-place overwrite)
@router.patch("/{profile_id}", response_model=ProfileOut)
def update_role(
    profile_id: uuid.UUID,
    req: RoleUpdateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _admin_only(principal)

    p = ProfileService().change_role(
        db, profile_id=profile_id, role=req.role, changed_by=principal.profile_id
    )
    if not p:
        raise HTTPException(status_code=404, detail="Profile not found")

    return profile_to_schema(p)
