# app/api/v1/dashboards.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.presenters import issue_to_schema, listing_to_schema, profile_to_schema
from app.core.auth_deps import get_current_principal, require_role
from app.db.session import get_db
from app.models.enums import Role
from app.models.profile import Profile
from app.policies.rbac import Principal
from app.schemas.dashboards import (
    AdminDashboardResponse,
    AuthorityDashboardResponse,
    AuthorityQueueItem,
    CitizenDashboardResponse,
)
from app.services.dashboard_service import DashboardService, available_transitions

router = APIRouter(prefix="/dashboard")


def _me(db: Session, principal: Principal) -> Profile:
    return db.get(Profile, uuid.UUID(principal.profile_id))


@router.get("/citizen", response_model=CitizenDashboardResponse)
def citizen_dashboard(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.CITIZEN, "citizen dashboard")

    data = DashboardService().citizen(db, citizen_id=uuid.UUID(principal.profile_id))
    return CitizenDashboardResponse(
        profile=profile_to_schema(_me(db, principal)),
        stats=data["stats"],
        achievement=data["achievement"],
        next_achievement_hint=data["next_achievement_hint"],
        issues=[listing_to_schema(r) for r in data["issues"]],
    )


@router.get("/authority", response_model=AuthorityDashboardResponse)
def authority_dashboard(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.AUTHORITY, "authority dashboard")

    data = DashboardService().authority(db, authority_id=uuid.UUID(principal.profile_id))
    return AuthorityDashboardResponse(
        profile=profile_to_schema(_me(db, principal)),
        stats=data["stats"],
        issues=[
            AuthorityQueueItem(
                **listing_to_schema(r).model_dump(),
                available_transitions=available_transitions(r.issue.status),
            )
            for r in data["issues"]
        ],
    )


@router.get("/admin", response_model=AdminDashboardResponse)
def admin_dashboard(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.ADMIN, "admin dashboard")

    data = DashboardService().admin(db)
    return AdminDashboardResponse(
        profile=profile_to_schema(_me(db, principal)),
        stats=data["stats"],
        role_breakdown=data["role_breakdown"],
        profiles=[profile_to_schema(p) for p in data["profiles"]],
        issues=[issue_to_schema(i) for i in data["issues"]],
    )
