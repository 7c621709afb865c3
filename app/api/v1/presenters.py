# app/api/v1/presenters.py
from __future__ import annotations

from typing import Optional

from app.models.comment import Comment
from app.models.issue import Issue
from app.models.profile import Profile
from app.models.status_history import StatusHistoryEntry
from app.schemas.auth import ProfileOut
from app.schemas.issues import CommentOut, IssueListItem, IssueOut, StatusHistoryOut
from app.services.issue_query_service import IssueListing


def _str_or_none(v) -> Optional[str]:
    return str(v) if v is not None else None


def profile_to_schema(p: Profile) -> ProfileOut:
    return ProfileOut(
        id=str(p.id),
        email=p.email,
        name=p.name,
        role=p.role,
        created_at=p.created_at,
    )


def issue_to_schema(i: Issue) -> IssueOut:
    return IssueOut(
        id=str(i.id),
        title=i.title,
        description=i.description,
        category=i.category,
        location=i.location,
        status=i.status,
        image_url=i.image_url,
        user_id=str(i.user_id),
        assigned_to=_str_or_none(i.assigned_to),
        created_at=i.created_at,
        updated_at=i.updated_at,
    )


def listing_to_schema(row: IssueListing) -> IssueListItem:
    return IssueListItem(
        **issue_to_schema(row.issue).model_dump(),
        reporter_name=row.reporter_name,
        upvote_count=row.upvote_count,
        user_upvoted=row.user_upvoted,
    )


def comment_to_schema(c: Comment) -> CommentOut:
    return CommentOut(
        id=str(c.id),
        issue_id=str(c.issue_id),
        content=c.content,
        created_at=c.created_at,
        user_id=str(c.user_id),
        author_name=c.author.name if c.author else None,
        author_role=c.author.role if c.author else None,
    )


def history_to_schema(h: StatusHistoryEntry) -> StatusHistoryOut:
    return StatusHistoryOut(
        id=str(h.id),
        status=h.status,
        comment=h.comment,
        image_url=h.image_url,
        created_at=h.created_at,
        changed_by=str(h.changed_by),
        changed_by_name=h.actor.name if h.actor else None,
        changed_by_role=h.actor.role if h.actor else None,
    )
