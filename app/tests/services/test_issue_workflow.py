import uuid

import pytest

from app.models.enums import IssueStatus, Role
from app.services.issue_query_service import IssueQueryService
from app.services.issue_workflow import ImageUpload, IssueWorkflow
from app.services.status_history_service import StatusHistoryService


def report(db, reporter, **overrides):
    fields = dict(
        title="Pothole",
        description="Deep pothole near the bus stop",
        category="Roads",
        location="Main St",
    )
    fields.update(overrides)
    return IssueWorkflow().create_issue(db, reporter_id=reporter.id, **fields)


def test_new_issue_is_open_unassigned_with_history(db, make_profile):
    citizen = make_profile(Role.CITIZEN)
    issue = report(db, citizen)

    assert issue.status == IssueStatus.OPEN.value
    assert issue.assigned_to is None
    assert issue.image_url is None

    history = StatusHistoryService().list_for_issue(db, issue.id)
    assert [h.status for h in history] == ["OPEN"]
    assert history[0].changed_by == citizen.id


def test_create_rejects_blank_fields_and_unknown_category(db, make_profile):
    citizen = make_profile(Role.CITIZEN)

    with pytest.raises(ValueError):
        report(db, citizen, title="   ")

    with pytest.raises(ValueError):
        report(db, citizen, category="Parks")


def test_image_is_stored_under_reporter_folder(db, make_profile, blob_store):
    citizen = make_profile(Role.CITIZEN)
    issue = report(
        db,
        citizen,
        image=ImageUpload(filename="hole.JPG", data=b"\xff\xd8fake"),
        blob_store=blob_store,
    )

    assert issue.image_url.startswith(f"/media/{citizen.id}/")
    assert issue.image_url.endswith(".jpg")
    handle = issue.image_url[len("/media/"):]
    assert blob_store.exists(handle)


def test_toggle_upvote_twice_restores_count(db, make_profile):
    citizen = make_profile(Role.CITIZEN)
    voter = make_profile(Role.CITIZEN)
    issue = report(db, citizen)
    wf = IssueWorkflow()

    first = wf.toggle_upvote(db, issue_id=issue.id, user_id=voter.id)
    assert first.upvote_count == 1
    assert first.user_upvoted is True

    second = wf.toggle_upvote(db, issue_id=issue.id, user_id=voter.id)
    assert second.upvote_count == 0
    assert second.user_upvoted is False


def test_toggle_upvote_unknown_issue(db, make_profile):
    voter = make_profile(Role.CITIZEN)
    with pytest.raises(LookupError):
        IssueWorkflow().toggle_upvote(db, issue_id=uuid.uuid4(), user_id=voter.id)


def test_third_verification_promotes_open_issue(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    issue = report(db, reporter)
    wf = IssueWorkflow()
    verifiers = [make_profile(Role.CITIZEN) for _ in range(3)]

    s1 = wf.cast_verification(db, issue_id=issue.id, user_id=verifiers[0].id)
    s2 = wf.cast_verification(db, issue_id=issue.id, user_id=verifiers[1].id)
    assert s2.verification_count == 2
    assert s2.status == "OPEN"
    assert not s1.promoted and not s2.promoted

    s3 = wf.cast_verification(db, issue_id=issue.id, user_id=verifiers[2].id)
    assert s3.verification_count == 3
    assert s3.status == "VERIFIED"
    assert s3.promoted is True

    history = StatusHistoryService().list_for_issue(db, issue.id)
    assert [h.status for h in history] == ["OPEN", "VERIFIED"]
    assert history[-1].changed_by == verifiers[2].id


def test_repeat_verification_is_rejected(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    issue = report(db, reporter)
    wf = IssueWorkflow()

    wf.cast_verification(db, issue_id=issue.id, user_id=reporter.id)
    with pytest.raises(ValueError):
        wf.cast_verification(db, issue_id=issue.id, user_id=reporter.id)

    details = IssueQueryService().get_details(db, issue_id=issue.id, viewer_id=reporter.id)
    assert details.verification_count == 1


def test_verification_on_in_progress_issue_keeps_status(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    authority = make_profile(Role.AUTHORITY)
    issue = report(db, reporter)
    wf = IssueWorkflow()

    wf.update_status(db, issue_id=issue.id, authority_id=authority.id, new_status="IN_PROGRESS")

    for _ in range(3):
        v = make_profile(Role.CITIZEN)
        state = wf.cast_verification(db, issue_id=issue.id, user_id=v.id)

    assert state.verification_count == 3
    assert state.status == "IN_PROGRESS"
    assert state.promoted is False


def test_authority_moves_issue_forward_and_is_assigned(db, make_profile, blob_store):
    reporter = make_profile(Role.CITIZEN)
    authority = make_profile(Role.AUTHORITY)
    issue = report(db, reporter)
    wf = IssueWorkflow()

    issue = wf.update_status(
        db,
        issue_id=issue.id,
        authority_id=authority.id,
        new_status="IN_PROGRESS",
        comment="Crew dispatched",
    )
    assert issue.status == "IN_PROGRESS"
    assert issue.assigned_to == authority.id

    issue = wf.update_status(
        db,
        issue_id=issue.id,
        authority_id=authority.id,
        new_status="RESOLVED",
        proof_image=ImageUpload(filename="fixed.png", data=b"png"),
        blob_store=blob_store,
    )
    assert issue.status == "RESOLVED"

    history = StatusHistoryService().list_for_issue(db, issue.id)
    assert [h.status for h in history] == ["OPEN", "IN_PROGRESS", "RESOLVED"]
    assert history[1].comment == "Crew dispatched"
    assert history[2].image_url.startswith(f"/media/{authority.id}/")

    details = IssueQueryService().get_details(db, issue_id=issue.id, viewer_id=reporter.id)
    assert [c.content for c in details.comments] == ["Crew dispatched"]


@pytest.mark.parametrize("target", ["OPEN", "VERIFIED"])
def test_authority_cannot_set_open_or_verified(db, make_profile, target):
    reporter = make_profile(Role.CITIZEN)
    authority = make_profile(Role.AUTHORITY)
    issue = report(db, reporter)

    with pytest.raises(ValueError):
        IssueWorkflow().update_status(
            db, issue_id=issue.id, authority_id=authority.id, new_status=target
        )


def test_status_never_moves_backwards(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    authority = make_profile(Role.AUTHORITY)
    issue = report(db, reporter)
    wf = IssueWorkflow()

    wf.update_status(db, issue_id=issue.id, authority_id=authority.id, new_status="RESOLVED")

    with pytest.raises(ValueError):
        wf.update_status(db, issue_id=issue.id, authority_id=authority.id, new_status="IN_PROGRESS")

    with pytest.raises(ValueError):
        wf.update_status(db, issue_id=issue.id, authority_id=authority.id, new_status="RESOLVED")


def test_timeline_marks_reached_steps(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    authority = make_profile(Role.AUTHORITY, name="Ward Officer")
    issue = report(db, reporter)
    IssueWorkflow().update_status(
        db, issue_id=issue.id, authority_id=authority.id, new_status="IN_PROGRESS"
    )

    details = IssueQueryService().get_details(db, issue_id=issue.id, viewer_id=reporter.id)
    steps = {s["status"]: s for s in details.timeline}

    assert steps["OPEN"]["completed"] is True
    # skipped straight past VERIFIED: reached, but no history row for it
    assert steps["VERIFIED"]["completed"] is True
    assert steps["VERIFIED"]["changed_at"] is None
    assert steps["IN_PROGRESS"]["changed_by_name"] == "Ward Officer"
    assert steps["RESOLVED"]["completed"] is False
