# app/api/v1/issues.py
from __future__ import annotations

import logging
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.api.v1.presenters import (
    comment_to_schema,
    history_to_schema,
    issue_to_schema,
    listing_to_schema,
)
from app.core.auth_deps import BACK_TO_ISSUES, access_denied, get_current_principal
from app.core.config import get_settings
from app.db.session import get_db
from app.models.enums import IssueCategory, IssueStatus
from app.policies.rbac import (
    ACTION_COMMENT,
    ACTION_REPORT_ISSUE,
    ACTION_UPDATE_STATUS,
    ACTION_UPVOTE,
    ACTION_VERIFY,
    Principal,
    require_action,
)
from app.schemas.issues import (
    CommentCreate,
    CommentOut,
    IssueCreatedResponse,
    IssueDetailsResponse,
    IssueListItem,
    IssueOut,
    TimelineStep,
    UpvoteResponse,
    VerificationResponse,
)
from app.services.blob_store import LocalBlobStore, get_blob_store
from app.services.issue_query_service import IssueQueryService
from app.services.issue_workflow import ImageUpload, IssueWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/issues")


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"message": "Issue not found", "back_to": BACK_TO_ISSUES},
    )


def _parse_issue_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise _not_found()


def _authorize(principal: Principal, action: str) -> None:
    try:
        require_action(principal, action)
    except PermissionError as e:
        raise access_denied(str(e))


async def _read_upload(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    if not data:
        return None
    return ImageUpload(filename=upload.filename, data=data)


# ─────────────────────────────────────────────────────────────
# LIST
# ─────────────────────────────────────────────────────────────

@router.get("", response_model=list[IssueListItem])
def list_issues(
    category: str = Query("All"),
    status: str = Query("All"),
    sort: Literal["latest", "upvotes"] = Query("latest"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if category != "All" and category not in IssueCategory.__members__:
        raise HTTPException(status_code=422, detail=f"Unknown category: {category}")
    if status != "All" and status not in IssueStatus.__members__:
        raise HTTPException(status_code=422, detail=f"Unknown status: {status}")

    rows = IssueQueryService().list_issues(
        db,
        viewer_id=uuid.UUID(principal.profile_id),
        category=category,
        status=status,
        sort=sort,
    )
    logger.debug("[issues] list category=%s status=%s sort=%s -> %d", category, status, sort, len(rows))
    return [listing_to_schema(r) for r in rows]


# ─────────────────────────────────────────────────────────────
# REPORT
# ─────────────────────────────────────────────────────────────

@router.post("", response_model=IssueCreatedResponse, status_code=201)
async def report_issue(
    title: str = Form(...),
    description: str = Form(...),
    category: IssueCategory = Form(...),
    location: str = Form(...),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    _authorize(principal, ACTION_REPORT_ISSUE)

    upload = await _read_upload(image)

    try:
        issue = IssueWorkflow().create_issue(
            db,
            reporter_id=uuid.UUID(principal.profile_id),
            title=title,
            description=description,
            category=category.value,
            location=location,
            image=upload,
            blob_store=blob_store,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return IssueCreatedResponse(
        issue=issue_to_schema(issue),
        redirect_after_ms=get_settings().report_redirect_delay_ms,
    )


# ─────────────────────────────────────────────────────────────
# DETAILS
# ─────────────────────────────────────────────────────────────

@router.get("/{issue_id}", response_model=IssueDetailsResponse)
def get_issue(
    issue_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    details = IssueQueryService().get_details(
        db, issue_id=_parse_issue_id(issue_id), viewer_id=uuid.UUID(principal.profile_id)
    )
    if not details:
        raise _not_found()

    return IssueDetailsResponse(
        issue=issue_to_schema(details.issue),
        reporter_name=details.reporter_name,
        upvote_count=details.upvote_count,
        user_upvoted=details.user_upvoted,
        verification_count=details.verification_count,
        user_verified=details.user_verified,
        can_verify=details.can_verify,
        comments=[comment_to_schema(c) for c in details.comments],
        status_history=[history_to_schema(h) for h in details.history],
        timeline=[TimelineStep(**step) for step in details.timeline],
    )


# ─────────────────────────────────────────────────────────────
# ENGAGEMENT
# ─────────────────────────────────────────────────────────────

@router.post("/{issue_id}/upvote", response_model=UpvoteResponse)
def toggle_upvote(
    issue_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _authorize(principal, ACTION_UPVOTE)
    try:
        state = IssueWorkflow().toggle_upvote(
            db, issue_id=_parse_issue_id(issue_id), user_id=uuid.UUID(principal.profile_id)
        )
    except LookupError:
        raise _not_found()

    return UpvoteResponse(
        issue_id=str(state.issue_id),
        upvote_count=state.upvote_count,
        user_upvoted=state.user_upvoted,
    )


@router.post("/{issue_id}/verify", response_model=VerificationResponse)
def verify_issue(
    issue_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _authorize(principal, ACTION_VERIFY)
    try:
        state = IssueWorkflow().cast_verification(
            db, issue_id=_parse_issue_id(issue_id), user_id=uuid.UUID(principal.profile_id)
        )
    except LookupError:
        raise _not_found()
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return VerificationResponse(
        issue_id=str(state.issue_id),
        verification_count=state.verification_count,
        user_verified=state.user_verified,
        status=state.status,
        promoted=state.promoted,
    )


@router.post("/{issue_id}/comments", response_model=CommentOut, status_code=201)
def post_comment(
    issue_id: str,
    req: CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    _authorize(principal, ACTION_COMMENT)
    try:
        row = IssueWorkflow().add_comment(
            db,
            issue_id=_parse_issue_id(issue_id),
            user_id=uuid.UUID(principal.profile_id),
            content=req.content,
        )
    except LookupError:
        raise _not_found()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return comment_to_schema(row)


# ─────────────────────────────────────────────────────────────
# AUTHORITY STATUS UPDATE
# ─────────────────────────────────────────────────────────────

@router.post("/{issue_id}/status", response_model=IssueOut)
async def update_status(
    issue_id: str,
    status: IssueStatus = Form(...),
    comment: Optional[str] = Form(None),
    proof_image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    _authorize(principal, ACTION_UPDATE_STATUS)

    issue_uuid = _parse_issue_id(issue_id)
    upload = await _read_upload(proof_image)

    try:
        issue = IssueWorkflow().update_status(
            db,
            issue_id=issue_uuid,
            authority_id=uuid.UUID(principal.profile_id),
            new_status=status.value,
            comment=comment,
            proof_image=upload,
            blob_store=blob_store,
        )
    except LookupError:
        raise _not_found()
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return issue_to_schema(issue)
