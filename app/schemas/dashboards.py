from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel

from app.schemas.auth import ProfileOut
from app.schemas.issues import IssueListItem, IssueOut


class CitizenStats(BaseModel):
    total_issues: int
    open_issues: int
    verified_issues: int
    in_progress_issues: int
    resolved_issues: int
    total_upvotes: int


class CitizenDashboardResponse(BaseModel):
    profile: ProfileOut
    stats: CitizenStats
    achievement: str
    next_achievement_hint: Optional[str] = None
    issues: List[IssueListItem]


class AuthorityStats(BaseModel):
    total: int
    verified: int
    in_progress: int
    resolved: int


class AuthorityQueueItem(IssueListItem):
    available_transitions: List[str]


class AuthorityDashboardResponse(BaseModel):
    profile: ProfileOut
    stats: AuthorityStats
    issues: List[AuthorityQueueItem]


class AdminStats(BaseModel):
    total_users: int
    total_issues: int
    resolved_issues: int
    open_issues: int
    resolution_rate: int


class AdminDashboardResponse(BaseModel):
    profile: ProfileOut
    stats: AdminStats
    role_breakdown: Dict[str, int]
    profiles: List[ProfileOut]
    issues: List[IssueOut]
