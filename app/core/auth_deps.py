#app/core/auth_deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import InvalidToken, decode_session_token
from app.db.session import get_db
from app.models.enums import Role
from app.models.profile import Profile
from app.policies.rbac import Principal
from app.services.auth_service import get_active_session

bearer = HTTPBearer(auto_error=False)

BACK_TO_ISSUES = "/issues"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_principal(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Canonical authentication dependency.

    Guarantees:
    - JWT is valid and carries sub + sid
    - the session it names exists and is not revoked
    - role comes from the current profile row, so admin role edits apply
      on the very next request
    """
    if creds is None:
        raise _unauthorized("Please sign in to continue.")

    try:
        claims = decode_session_token(creds.credentials)
    except InvalidToken as e:
        raise _unauthorized(str(e))

    profile_id, session_id = claims.profile_id, claims.session_id

    session = get_active_session(db, session_id)
    if not session or session.profile_id != profile_id:
        raise _unauthorized("Session has ended. Please sign in again.")

    profile = db.get(Profile, profile_id)
    if not profile:
        raise _unauthorized("Could not verify user role")

    principal = Principal(
        profile_id=str(profile.id),
        session_id=str(session.id),
        role=Role(profile.role),
        name=profile.name,
        email=profile.email,
    )

    # Make principal available to downstream middleware / handlers
    request.state.principal = principal

    return principal


def access_denied(message: str, back_to: str = BACK_TO_ISSUES) -> HTTPException:
    return HTTPException(
        status_code=403,
        detail={"message": message, "back_to": back_to},
    )


def require_role(principal: Principal, role: Role, screen: str) -> None:
    if principal.role != role:
        raise access_denied(
            f"Access denied. The {screen} is only available to {role.value} accounts."
        )
