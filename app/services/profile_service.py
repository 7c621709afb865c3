from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.enums import Role
from app.models.profile import Profile

logger = logging.getLogger(__name__)


class ProfileService:
    def list_profiles(self, db: Session) -> List[Profile]:
        return list(
            db.execute(select(Profile).order_by(Profile.created_at.desc())).scalars().all()
        )

    def change_role(
        self, db: Session, *, profile_id: uuid.UUID, role: Role, changed_by: str
    ) -> Optional[Profile]:
        """
        Direct overwrite; no history is kept for role edits.
        """
        p = db.get(Profile, profile_id)
        if not p:
            return None

        previous = p.role
        p.role = role.value
        db.commit()
        db.refresh(p)

        logger.info(
            "[admin] profile=%s role %s -> %s by admin=%s", p.id, previous, p.role, changed_by
        )
        return p
