from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.enums import IssueCategory, IssueStatus, Role


class IssueOut(BaseModel):
    id: str
    title: str
    description: str
    category: IssueCategory
    location: str
    status: IssueStatus
    image_url: Optional[str] = None
    user_id: str
    assigned_to: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class IssueListItem(IssueOut):
    reporter_name: Optional[str] = None
    upvote_count: int = 0
    user_upvoted: bool = False


class IssueCreatedResponse(BaseModel):
    issue: IssueOut
    message: str = "Issue reported successfully"
    redirect_to: str = "/issues"
    redirect_after_ms: int = Field(..., description="display delay before navigating")


class UpvoteResponse(BaseModel):
    issue_id: str
    upvote_count: int
    user_upvoted: bool


class VerificationResponse(BaseModel):
    issue_id: str
    verification_count: int
    user_verified: bool
    status: IssueStatus
    promoted: bool = Field(False, description="this verification moved the issue to VERIFIED")


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)


class CommentOut(BaseModel):
    id: str
    issue_id: str
    content: str
    created_at: datetime
    user_id: str
    author_name: Optional[str] = None
    author_role: Optional[Role] = None


class StatusHistoryOut(BaseModel):
    id: str
    status: IssueStatus
    comment: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    changed_by: str
    changed_by_name: Optional[str] = None
    changed_by_role: Optional[Role] = None


class TimelineStep(BaseModel):
    status: IssueStatus
    completed: bool
    changed_at: Optional[datetime] = None
    changed_by_name: Optional[str] = None


class IssueDetailsResponse(BaseModel):
    issue: IssueOut
    reporter_name: Optional[str] = None
    upvote_count: int
    user_upvoted: bool
    verification_count: int
    user_verified: bool
    can_verify: bool
    comments: List[CommentOut]
    status_history: List[StatusHistoryOut]
    timeline: List[TimelineStep]
