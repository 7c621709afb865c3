# app/models/profile.py
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, CheckConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow
from app.models.enums import Role, ROLE_SQL_VALUES


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text(f"'{Role.CITIZEN.value}'")
    )

    # 🔐 AUTH (identity provider side)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        CheckConstraint(f"role IN ({ROLE_SQL_VALUES})", name="ck_profiles_role"),
    )
