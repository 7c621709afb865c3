# app/services/auth_service.py
from __future__ import annotations

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.security import verify_password, hash_password, create_session_token
from app.db.base import utcnow
from app.models.auth_session import AuthSession
from app.models.enums import Role
from app.models.profile import Profile

logger = logging.getLogger(__name__)

AUTHORITY_ONLY_MESSAGE = "Only Authority members can access this portal"
ROLE_UNVERIFIABLE_MESSAGE = "Could not verify user role"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_profile_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.execute(
        select(Profile).where(Profile.email == normalize_email(email))
    ).scalar_one_or_none()


def sign_up(db: Session, *, name: str, email: str, password: str) -> Tuple[Profile, AuthSession]:
    """
    Create an identity and its CITIZEN profile, then open a session for it.
    """
    if find_profile_by_email(db, email):
        raise ValueError("An account with this email already exists.")

    p = Profile(
        email=normalize_email(email),
        name=name.strip(),
        role=Role.CITIZEN.value,
        password_hash=hash_password(password),
    )
    db.add(p)
    db.flush()

    s = AuthSession(profile_id=p.id)
    db.add(s)
    db.commit()
    db.refresh(p)

    logger.info("[auth] signed up profile=%s", p.id)
    return p, s


def authenticate(db: Session, email: str, password: str) -> Optional[Profile]:
    p = find_profile_by_email(db, email)

    if not p:
        return None

    if not verify_password(password, p.password_hash):
        return None

    return p


def open_session(db: Session, profile: Profile) -> AuthSession:
    s = AuthSession(profile_id=profile.id)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def revoke_session(db: Session, session_id: uuid.UUID) -> None:
    db.execute(
        update(AuthSession)
        .where(AuthSession.id == session_id, AuthSession.revoked_at.is_(None))
        .values(revoked_at=utcnow())
    )
    db.commit()


def get_active_session(db: Session, session_id: uuid.UUID) -> Optional[AuthSession]:
    return db.execute(
        select(AuthSession).where(
            AuthSession.id == session_id,
            AuthSession.revoked_at.is_(None),
        )
    ).scalar_one_or_none()


def issue_token(profile: Profile, session: AuthSession) -> str:
    return create_session_token(profile.id, session.id, profile.role)


def sign_in(db: Session, email: str, password: str) -> Optional[Tuple[Profile, AuthSession]]:
    p = authenticate(db, email, password)
    if not p:
        logger.info("[auth] failed sign-in")
        return None
    return p, open_session(db, p)


def authority_sign_in(db: Session, email: str, password: str) -> Optional[Tuple[Profile, AuthSession]]:
    """
    Authenticate, then authorize, then revoke on failure.

    Returns None on bad credentials. Raises PermissionError after revoking the
    freshly opened session when the account is not an AUTHORITY.
    """
    result = sign_in(db, email, password)
    if not result:
        return None

    p, s = result

    # re-read the role from the record store, not from what authenticate saw
    db.expire(p)
    current = db.get(Profile, p.id)

    if current is None:
        revoke_session(db, s.id)
        logger.warning("[auth] authority portal: no profile for session=%s", s.id)
        raise PermissionError(ROLE_UNVERIFIABLE_MESSAGE)

    if current.role != Role.AUTHORITY.value:
        revoke_session(db, s.id)
        logger.warning(
            "[auth] authority portal denied profile=%s role=%s; session revoked",
            current.id,
            current.role,
        )
        raise PermissionError(AUTHORITY_ONLY_MESSAGE)

    return current, s
