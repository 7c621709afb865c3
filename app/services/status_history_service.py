from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.models.status_history import StatusHistoryEntry


class StatusHistoryService:
    """
    Insert-only trail of issue status changes.

    `write` does not commit: the entry belongs to the same transaction as the
    status change it records.
    """

    def write(
        self,
        db: Session,
        *,
        issue_id: uuid.UUID,
        status: str,
        changed_by: uuid.UUID,
        comment: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> StatusHistoryEntry:
        row = StatusHistoryEntry(
            issue_id=issue_id,
            status=status,
            changed_by=changed_by,
            comment=comment,
            image_url=image_url,
        )
        db.add(row)
        return row

    def list_for_issue(self, db: Session, issue_id: uuid.UUID) -> List[StatusHistoryEntry]:
        return list(
            db.execute(
                select(StatusHistoryEntry)
                .options(joinedload(StatusHistoryEntry.actor))
                .where(StatusHistoryEntry.issue_id == issue_id)
                .order_by(StatusHistoryEntry.created_at.asc())
            )
            .scalars()
            .all()
        )
