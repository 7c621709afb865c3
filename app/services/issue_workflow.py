# app/services/issue_workflow.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, func, delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.base import utcnow
from app.models.comment import Comment
from app.models.enums import (
    IssueCategory,
    IssueStatus,
    AUTHORITY_SETTABLE_STATUSES,
    status_index,
)
from app.models.issue import Issue
from app.models.upvote import Upvote
from app.models.verification import Verification
from app.services.blob_store import LocalBlobStore
from app.services.status_history_service import StatusHistoryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    filename: Optional[str]
    data: bytes


@dataclass(frozen=True)
class UpvoteState:
    issue_id: uuid.UUID
    upvote_count: int
    user_upvoted: bool


@dataclass(frozen=True)
class VerificationState:
    issue_id: uuid.UUID
    verification_count: int
    user_verified: bool
    status: str
    promoted: bool


def _required(value: str, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError(f"{field} is required.")
    return cleaned


class IssueWorkflow:
    """
    Write side of the issue lifecycle.

    Rules:
    - issues are created OPEN with no assignee
    - status only moves forward along OPEN -> VERIFIED -> IN_PROGRESS -> RESOLVED
    - VERIFIED is reached only by enough distinct verifications on an OPEN issue
    - IN_PROGRESS / RESOLVED are set only by an authority, who becomes the assignee
    - every status change writes a status_history row in the same transaction

    Lookups of unknown issues raise LookupError; rule violations raise ValueError.
    """

    def __init__(self, history: Optional[StatusHistoryService] = None):
        self.history = history or StatusHistoryService()

    # ─────────────────────────────────────────────
    # INTERNAL READ HELPERS
    # ─────────────────────────────────────────────

    def _get_issue(self, db: Session, issue_id: uuid.UUID) -> Issue:
        issue = db.get(Issue, issue_id)
        if not issue:
            raise LookupError("Issue not found")
        return issue

    def _count(self, db: Session, model, issue_id: uuid.UUID) -> int:
        return db.execute(
            select(func.count()).select_from(model).where(model.issue_id == issue_id)
        ).scalar_one()

    def _has_row(self, db: Session, model, issue_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return (
            db.execute(
                select(model.id).where(model.issue_id == issue_id, model.user_id == user_id)
            ).first()
            is not None
        )

    def _store_image(
        self, blob_store: LocalBlobStore, owner_id: uuid.UUID, image: ImageUpload
    ) -> str:
        handle = blob_store.store_image(str(owner_id), image.filename, image.data)
        return blob_store.public_url(handle)

    # ─────────────────────────────────────────────
    # CREATION
    # ─────────────────────────────────────────────

    def create_issue(
        self,
        db: Session,
        *,
        reporter_id: uuid.UUID,
        title: str,
        description: str,
        category: str,
        location: str,
        image: Optional[ImageUpload] = None,
        blob_store: Optional[LocalBlobStore] = None,
    ) -> Issue:
        """
        Image first, then the row. A failed upload aborts before anything is
        written; an image orphaned by a failed insert is left in place.
        """
        title = _required(title, "Title")
        description = _required(description, "Description")
        location = _required(location, "Location")
        category = IssueCategory(_required(category, "Category")).value

        image_url = None
        if image is not None and image.data:
            if blob_store is None:
                raise RuntimeError("An image was supplied but no blob store is configured.")
            image_url = self._store_image(blob_store, reporter_id, image)

        issue = Issue(
            title=title,
            description=description,
            category=category,
            location=location,
            status=IssueStatus.OPEN.value,
            image_url=image_url,
            user_id=reporter_id,
            assigned_to=None,
        )
        db.add(issue)
        db.flush()

        self.history.write(
            db,
            issue_id=issue.id,
            status=IssueStatus.OPEN.value,
            changed_by=reporter_id,
        )
        db.commit()
        db.refresh(issue)

        logger.info("[issues] created issue=%s reporter=%s image=%s", issue.id, reporter_id, bool(image_url))
        return issue

    # ─────────────────────────────────────────────
    # UPVOTES
    # ─────────────────────────────────────────────

    def toggle_upvote(self, db: Session, *, issue_id: uuid.UUID, user_id: uuid.UUID) -> UpvoteState:
        """
        Delete the voter's upvote if present, otherwise insert one.

        The (issue_id, user_id) unique constraint makes a racing second insert
        fail instead of double counting.
        """
        self._get_issue(db, issue_id)

        removed = db.execute(
            delete(Upvote).where(Upvote.issue_id == issue_id, Upvote.user_id == user_id)
        ).rowcount

        if removed:
            db.commit()
        else:
            db.add(Upvote(issue_id=issue_id, user_id=user_id))
            try:
                db.commit()
            except IntegrityError:
                # a concurrent toggle from the same voter inserted first; the vote stands
                db.rollback()
                logger.info("[issues] concurrent upvote insert issue=%s user=%s", issue_id, user_id)

        return UpvoteState(
            issue_id=issue_id,
            upvote_count=self._count(db, Upvote, issue_id),
            user_upvoted=self._has_row(db, Upvote, issue_id, user_id),
        )

    # ─────────────────────────────────────────────
    # VERIFICATIONS
    # ─────────────────────────────────────────────

    def cast_verification(
        self, db: Session, *, issue_id: uuid.UUID, user_id: uuid.UUID
    ) -> VerificationState:
        """
        Record one verification per verifier, then promote OPEN -> VERIFIED once
        the fresh count reaches the threshold. The promotion is a compare-and-set
        on status, so concurrent casts promote at most once and a repeat on an
        already VERIFIED issue changes nothing.
        """
        issue = self._get_issue(db, issue_id)

        if self._has_row(db, Verification, issue_id, user_id):
            raise ValueError("You have already verified this issue.")

        db.add(Verification(issue_id=issue_id, user_id=user_id))
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ValueError("You have already verified this issue.")

        count = self._count(db, Verification, issue_id)
        threshold = get_settings().verification_threshold

        promoted = False
        if count >= threshold:
            res = db.execute(
                update(Issue)
                .where(Issue.id == issue_id, Issue.status == IssueStatus.OPEN.value)
                .values(status=IssueStatus.VERIFIED.value, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if res.rowcount == 1:
                promoted = True
                self.history.write(
                    db,
                    issue_id=issue_id,
                    status=IssueStatus.VERIFIED.value,
                    changed_by=user_id,
                )

        db.commit()
        db.refresh(issue)

        if promoted:
            logger.info("[issues] issue=%s promoted to VERIFIED after %d verifications", issue_id, count)

        return VerificationState(
            issue_id=issue_id,
            verification_count=count,
            user_verified=True,
            status=issue.status,
            promoted=promoted,
        )

    # ─────────────────────────────────────────────
    # AUTHORITY STATUS UPDATES
    # ─────────────────────────────────────────────

    def update_status(
        self,
        db: Session,
        *,
        issue_id: uuid.UUID,
        authority_id: uuid.UUID,
        new_status: str,
        comment: Optional[str] = None,
        proof_image: Optional[ImageUpload] = None,
        blob_store: Optional[LocalBlobStore] = None,
    ) -> Issue:
        """
        Rules:
        - target must be IN_PROGRESS or RESOLVED
        - target must be strictly after the current status
        - status + assignee are written together, guarded by the status read
        - a history row is always written; a comment row too when a note is given
        """
        issue = self._get_issue(db, issue_id)

        target = IssueStatus(new_status)
        if target not in AUTHORITY_SETTABLE_STATUSES:
            raise ValueError(f"Authorities cannot set status {target.value}.")

        current = issue.status
        if status_index(target.value) <= status_index(current):
            raise ValueError(f"Cannot move issue from {current} to {target.value}.")

        note = (comment or "").strip() or None

        image_url = None
        if proof_image is not None and proof_image.data:
            if blob_store is None:
                raise RuntimeError("An image was supplied but no blob store is configured.")
            image_url = self._store_image(blob_store, authority_id, proof_image)

        res = db.execute(
            update(Issue)
            .where(Issue.id == issue_id, Issue.status == current)
            .values(status=target.value, assigned_to=authority_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            db.rollback()
            raise ValueError("Issue status changed while updating. Reload and try again.")

        self.history.write(
            db,
            issue_id=issue_id,
            status=target.value,
            changed_by=authority_id,
            comment=note,
            image_url=image_url,
        )
        if note:
            db.add(Comment(issue_id=issue_id, user_id=authority_id, content=note))

        db.commit()
        db.refresh(issue)

        logger.info(
            "[issues] issue=%s %s -> %s by authority=%s",
            issue_id,
            current,
            target.value,
            authority_id,
        )
        return issue

    # ─────────────────────────────────────────────
    # COMMENTS
    # ─────────────────────────────────────────────

    def add_comment(
        self, db: Session, *, issue_id: uuid.UUID, user_id: uuid.UUID, content: str
    ) -> Comment:
        self._get_issue(db, issue_id)
        row = Comment(issue_id=issue_id, user_id=user_id, content=_required(content, "Comment"))
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
