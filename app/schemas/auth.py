from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.models.enums import Role


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(..., min_length=6, description="at least 6 characters")


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileOut(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileOut
    redirect_to: str = Field("/issues", description="view to open after sign-in")
