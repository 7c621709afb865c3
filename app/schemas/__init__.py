from app.schemas.auth import SignupRequest, LoginRequest, ProfileOut, TokenResponse
from app.schemas.issues import IssueOut, IssueListItem, IssueDetailsResponse
from app.schemas.dashboards import (
    CitizenDashboardResponse,
    AuthorityDashboardResponse,
    AdminDashboardResponse,
)
