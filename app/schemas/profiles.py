# app/schemas/profiles.py

from pydantic import BaseModel

from app.models.enums import Role


class RoleUpdateRequest(BaseModel):
    role: Role
