# /app/models/issue.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    Text,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow
from app.models.enums import IssueStatus, CATEGORY_SQL_VALUES, STATUS_SQL_VALUES


class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    location: Mapped[str] = mapped_column(String(512), nullable=False)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text(f"'{IssueStatus.OPEN.value}'")
    )

    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # reporter
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id"), nullable=False
    )
    # authority that performed the latest status update
    assigned_to: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("profiles.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    reporter = relationship("Profile", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint(f"category IN ({CATEGORY_SQL_VALUES})", name="ck_issues_category"),
        CheckConstraint(f"status IN ({STATUS_SQL_VALUES})", name="ck_issues_status"),
        Index("ix_issues_user", "user_id"),
        Index("ix_issues_status", "status"),
        Index("ix_issues_assigned_to", "assigned_to"),
    )
