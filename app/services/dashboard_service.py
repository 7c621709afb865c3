from __future__ import annotations

import math
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.models.enums import (
    IssueStatus,
    Role,
    AUTHORITY_SETTABLE_STATUSES,
    STATUS_SEQUENCE,
    status_index,
)
from app.models.issue import Issue
from app.models.profile import Profile
from app.services.issue_query_service import IssueListing, IssueQueryService

# (minimum issue count, tier) from highest to lowest
ACHIEVEMENT_TIERS = [
    (10, "Gold Reporter"),
    (5, "Silver Reporter"),
    (1, "Bronze Reporter"),
    (0, "New Citizen"),
]


def achievement_tier(total_issues: int) -> str:
    for minimum, tier in ACHIEVEMENT_TIERS:
        if total_issues >= minimum:
            return tier
    return "New Citizen"


def next_tier_hint(total_issues: int) -> Optional[str]:
    if total_issues < 5:
        return f"{5 - total_issues} more issues to reach Silver!"
    if total_issues < 10:
        return f"{10 - total_issues} more issues to reach Gold!"
    return None


def resolution_rate(resolved: int, total: int) -> int:
    """
    Percentage of issues resolved, rounded half up; 0 when there are no issues.
    """
    if total <= 0:
        return 0
    return int(math.floor(resolved * 100 / total + 0.5))


def available_transitions(status: str) -> List[str]:
    current = status_index(status)
    return [
        s.value
        for s in STATUS_SEQUENCE
        if s in AUTHORITY_SETTABLE_STATUSES and status_index(s.value) > current
    ]


def _count_status(rows: List[IssueListing], status: IssueStatus) -> int:
    return sum(1 for r in rows if r.issue.status == status.value)


class DashboardService:
    def __init__(self, queries: Optional[IssueQueryService] = None):
        self.queries = queries or IssueQueryService()

    def citizen(self, db: Session, *, citizen_id: uuid.UUID) -> Dict[str, Any]:
        rows = self.queries.list_reported_by(db, reporter_id=citizen_id)
        total = len(rows)
        return {
            "issues": rows,
            "stats": {
                "total_issues": total,
                "open_issues": _count_status(rows, IssueStatus.OPEN),
                "verified_issues": _count_status(rows, IssueStatus.VERIFIED),
                "in_progress_issues": _count_status(rows, IssueStatus.IN_PROGRESS),
                "resolved_issues": _count_status(rows, IssueStatus.RESOLVED),
                "total_upvotes": sum(r.upvote_count for r in rows),
            },
            "achievement": achievement_tier(total),
            "next_achievement_hint": next_tier_hint(total),
        }

    def authority(self, db: Session, *, authority_id: uuid.UUID) -> Dict[str, Any]:
        rows = self.queries.list_authority_queue(db, authority_id=authority_id)
        return {
            "issues": rows,
            "stats": {
                "total": len(rows),
                "verified": _count_status(rows, IssueStatus.VERIFIED),
                "in_progress": _count_status(rows, IssueStatus.IN_PROGRESS),
                "resolved": _count_status(rows, IssueStatus.RESOLVED),
            },
        }

    def admin(self, db: Session) -> Dict[str, Any]:
        profiles = list(
            db.execute(select(Profile).order_by(Profile.created_at.desc())).scalars().all()
        )
        issues = list(
            db.execute(select(Issue).order_by(Issue.created_at.desc())).scalars().all()
        )

        by_status = dict(
            db.execute(select(Issue.status, func.count()).group_by(Issue.status)).all()
        )
        total_issues = len(issues)
        resolved = int(by_status.get(IssueStatus.RESOLVED.value, 0))

        return {
            "profiles": profiles,
            "issues": issues,
            "stats": {
                "total_users": len(profiles),
                "total_issues": total_issues,
                "resolved_issues": resolved,
                "open_issues": int(by_status.get(IssueStatus.OPEN.value, 0)),
                "resolution_rate": resolution_rate(resolved, total_issues),
            },
            "role_breakdown": {
                role.value: sum(1 for p in profiles if p.role == role.value) for role in Role
            },
        }
