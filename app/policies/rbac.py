#app/policies/rbac.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Set

from app.models.enums import Role


@dataclass(frozen=True)
class Principal:
    profile_id: str
    session_id: str
    role: Role
    name: str
    email: str


# --- Core action constants ---
ACTION_REPORT_ISSUE = "REPORT_ISSUE"
ACTION_UPVOTE = "UPVOTE"
ACTION_VERIFY = "VERIFY"
ACTION_COMMENT = "COMMENT"
ACTION_UPDATE_STATUS = "UPDATE_STATUS"
ACTION_MANAGE_ROLES = "MANAGE_ROLES"

_ENGAGEMENT = {ACTION_UPVOTE, ACTION_VERIFY, ACTION_COMMENT}


def allowed_actions(role: Role) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    """

    if role == Role.CITIZEN:
        return {ACTION_REPORT_ISSUE} | _ENGAGEMENT

    if role == Role.AUTHORITY:
        return {ACTION_UPDATE_STATUS} | _ENGAGEMENT

    if role == Role.ADMIN:
        return {ACTION_MANAGE_ROLES} | _ENGAGEMENT

    return set()


def require_action(principal: Principal, action: str) -> None:
    if action not in allowed_actions(principal.role):
        raise PermissionError(
            f"Role {principal.role.value} not permitted for action {action}."
        )
