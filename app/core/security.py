# app/core/security.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

# pbkdf2_sha256 is pure passlib; bcrypt>=4.1 breaks passlib's backend probe
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class InvalidToken(Exception):
    pass


@dataclass(frozen=True)
class SessionClaims:
    """
    What a bearer token asserts. `role` is the role at sign-in time and is
    informational; access checks always re-read the profile.
    """
    profile_id: uuid.UUID
    session_id: uuid.UUID
    role: Optional[str]


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    return pwd_context.verify(raw, hashed)


def create_session_token(
    profile_id: uuid.UUID,
    session_id: uuid.UUID,
    role: str,
    expires_minutes: Optional[int] = None,
) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    ttl = timedelta(minutes=expires_minutes or settings.jwt_access_token_minutes)
    payload = {
        "sub": str(profile_id),
        "sid": str(session_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> SessionClaims:
    """
    Verify signature and expiry, then parse the session claims.
    Raises InvalidToken for anything unusable.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidToken("Invalid or expired token.") from e

    try:
        return SessionClaims(
            profile_id=uuid.UUID(str(payload["sub"])),
            session_id=uuid.UUID(str(payload["sid"])),
            role=payload.get("role"),
        )
    except (KeyError, ValueError) as e:
        raise InvalidToken("Token missing required claims.") from e
