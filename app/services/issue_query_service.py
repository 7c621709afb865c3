from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, func, desc, or_
from sqlalchemy.orm import Session, joinedload

from app.models.comment import Comment
from app.models.enums import STATUS_SEQUENCE, status_index
from app.models.issue import Issue
from app.models.profile import Profile
from app.models.status_history import StatusHistoryEntry
from app.models.upvote import Upvote
from app.models.verification import Verification
from app.services.status_history_service import StatusHistoryService

SORT_LATEST = "latest"
SORT_UPVOTES = "upvotes"
ALL = "All"


@dataclass
class IssueListing:
    issue: Issue
    reporter_name: Optional[str]
    upvote_count: int
    user_upvoted: bool = False


@dataclass
class IssueDetails:
    issue: Issue
    reporter_name: Optional[str]
    upvote_count: int
    user_upvoted: bool
    verification_count: int
    user_verified: bool
    comments: List[Comment] = field(default_factory=list)
    history: List[StatusHistoryEntry] = field(default_factory=list)
    timeline: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def can_verify(self) -> bool:
        return not self.user_verified and self.issue.status == "OPEN"


def build_timeline(current_status: str, history: Sequence[StatusHistoryEntry]) -> List[Dict[str, Any]]:
    """
    One step per lifecycle status; a step is completed once the issue has
    reached it. The first history row for a status supplies when/by whom.
    """
    current = status_index(current_status)
    steps = []
    for index, status in enumerate(STATUS_SEQUENCE):
        entry = next((h for h in history if h.status == status.value), None)
        steps.append(
            {
                "status": status.value,
                "completed": index <= current,
                "changed_at": entry.created_at if entry else None,
                "changed_by_name": entry.actor.name if entry and entry.actor else None,
            }
        )
    return steps


def _upvote_counts():
    return (
        select(Upvote.issue_id, func.count(Upvote.id).label("upvote_count"))
        .group_by(Upvote.issue_id)
        .subquery()
    )


class IssueQueryService:
    """
    Read side. Per-issue aggregates are computed in the same query as the
    issues they belong to.
    """

    def _listing_query(self, viewer_id: Optional[uuid.UUID]):
        counts = _upvote_counts()
        count_col = func.coalesce(counts.c.upvote_count, 0).label("upvote_count")

        cols = [Issue, Profile.name.label("reporter_name"), count_col]
        q_from = (
            select(*cols)
            .join(Profile, Profile.id == Issue.user_id, isouter=True)
            .join(counts, counts.c.issue_id == Issue.id, isouter=True)
        )
        if viewer_id is not None:
            mine = (
                select(Upvote.issue_id)
                .where(Upvote.user_id == viewer_id)
                .subquery()
            )
            q_from = q_from.add_columns(
                mine.c.issue_id.is_not(None).label("user_upvoted")
            ).join(mine, mine.c.issue_id == Issue.id, isouter=True)

        return q_from, count_col

    def _to_listings(self, rows, with_viewer: bool) -> List[IssueListing]:
        out = []
        for row in rows:
            out.append(
                IssueListing(
                    issue=row[0],
                    reporter_name=row[1],
                    upvote_count=int(row[2] or 0),
                    user_upvoted=bool(row[3]) if with_viewer else False,
                )
            )
        return out

    def list_issues(
        self,
        db: Session,
        *,
        viewer_id: Optional[uuid.UUID],
        category: Optional[str] = None,
        status: Optional[str] = None,
        sort: str = SORT_LATEST,
    ) -> List[IssueListing]:
        q, count_col = self._listing_query(viewer_id)

        if category and category != ALL:
            q = q.where(Issue.category == category)
        if status and status != ALL:
            q = q.where(Issue.status == status)

        if sort == SORT_UPVOTES:
            q = q.order_by(desc(count_col), desc(Issue.created_at))
        else:
            q = q.order_by(desc(Issue.created_at))

        return self._to_listings(db.execute(q).all(), viewer_id is not None)

    def list_reported_by(self, db: Session, *, reporter_id: uuid.UUID) -> List[IssueListing]:
        q, _ = self._listing_query(None)
        q = q.where(Issue.user_id == reporter_id).order_by(desc(Issue.created_at))
        return self._to_listings(db.execute(q).all(), False)

    def list_authority_queue(self, db: Session, *, authority_id: uuid.UUID) -> List[IssueListing]:
        """
        Issues assigned to this authority, plus every VERIFIED / IN_PROGRESS issue.
        """
        q, _ = self._listing_query(None)
        q = q.where(
            or_(
                Issue.assigned_to == authority_id,
                Issue.status.in_(["VERIFIED", "IN_PROGRESS"]),
            )
        ).order_by(desc(Issue.created_at))
        return self._to_listings(db.execute(q).all(), False)

    def get_details(
        self, db: Session, *, issue_id: uuid.UUID, viewer_id: uuid.UUID
    ) -> Optional[IssueDetails]:
        row = db.execute(
            select(Issue, Profile.name)
            .join(Profile, Profile.id == Issue.user_id, isouter=True)
            .where(Issue.id == issue_id)
        ).first()
        if not row:
            return None

        issue, reporter_name = row

        upvote_count = db.execute(
            select(func.count()).select_from(Upvote).where(Upvote.issue_id == issue_id)
        ).scalar_one()
        user_upvoted = db.execute(
            select(Upvote.id).where(Upvote.issue_id == issue_id, Upvote.user_id == viewer_id)
        ).first() is not None

        verification_count = db.execute(
            select(func.count()).select_from(Verification).where(Verification.issue_id == issue_id)
        ).scalar_one()
        user_verified = db.execute(
            select(Verification.id).where(
                Verification.issue_id == issue_id, Verification.user_id == viewer_id
            )
        ).first() is not None

        comments = list(
            db.execute(
                select(Comment)
                .options(joinedload(Comment.author))
                .where(Comment.issue_id == issue_id)
                .order_by(Comment.created_at.asc())
            )
            .scalars()
            .all()
        )
        history = StatusHistoryService().list_for_issue(db, issue_id)

        return IssueDetails(
            issue=issue,
            reporter_name=reporter_name,
            upvote_count=upvote_count,
            user_upvoted=user_upvoted,
            verification_count=verification_count,
            user_verified=user_verified,
            comments=comments,
            history=history,
            timeline=build_timeline(issue.status, history),
        )
