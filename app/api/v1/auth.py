#app/api/v1/auth.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from app.api.v1.presenters import profile_to_schema
from app.core.auth_deps import get_current_principal, access_denied
from app.db.session import get_db
from app.models.profile import Profile
from app.policies.rbac import Principal
from app.schemas.auth import LoginRequest, SignupRequest, TokenResponse, ProfileOut
from app.services import auth_service

router = APIRouter()

INVALID_CREDENTIALS = "Invalid login credentials"


@router.post("/auth/signup", response_model=TokenResponse, status_code=201)
def signup(req: SignupRequest, db: Session = Depends(get_db)):
    try:
        profile, session = auth_service.sign_up(
            db, name=req.name, email=req.email, password=req.password
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return TokenResponse(
        access_token=auth_service.issue_token(profile, session),
        profile=profile_to_schema(profile),
    )


@router.post("/auth/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    result = auth_service.sign_in(db, req.email, req.password)
    if not result:
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    profile, session = result
    return TokenResponse(
        access_token=auth_service.issue_token(profile, session),
        profile=profile_to_schema(profile),
    )


@router.post("/authority/login", response_model=TokenResponse)
def authority_login(req: LoginRequest, db: Session = Depends(get_db)):
    """
    Authority portal: authenticate, then require AUTHORITY, revoking the new
    session when the role check fails.
    """
    try:
        result = auth_service.authority_sign_in(db, req.email, req.password)
    except PermissionError as e:
        raise access_denied(str(e), back_to="/login")

    if not result:
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    profile, session = result
    return TokenResponse(
        access_token=auth_service.issue_token(profile, session),
        profile=profile_to_schema(profile),
        redirect_to="/dashboard/authority",
    )


@router.post("/auth/logout", status_code=204)
def logout(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    auth_service.revoke_session(db, uuid.UUID(principal.session_id))


@router.get("/auth/me", response_model=ProfileOut)
def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return profile_to_schema(db.get(Profile, uuid.UUID(principal.profile_id)))
