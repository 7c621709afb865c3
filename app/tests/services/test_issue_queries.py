from app.models.enums import Role
from app.services.issue_query_service import IssueQueryService
from app.services.issue_workflow import IssueWorkflow


def seed_issues(db, reporter):
    wf = IssueWorkflow()
    made = {}
    for title, category in [("Overflowing bin", "Garbage"), ("Pothole", "Roads"), ("Broken main", "Water")]:
        made[title] = wf.create_issue(
            db,
            reporter_id=reporter.id,
            title=title,
            description=f"{title} description",
            category=category,
            location="Ward 5",
        )
    return made


def test_latest_first_by_default(db, make_profile):
    reporter = make_profile(Role.CITIZEN, name="Asha")
    seed_issues(db, reporter)

    rows = IssueQueryService().list_issues(db, viewer_id=reporter.id)
    assert [r.issue.title for r in rows] == ["Broken main", "Pothole", "Overflowing bin"]
    assert all(r.reporter_name == "Asha" for r in rows)
    assert all(r.upvote_count == 0 for r in rows)


def test_filters_and_upvote_sort(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    made = seed_issues(db, reporter)
    wf = IssueWorkflow()
    voters = [make_profile(Role.CITIZEN) for _ in range(2)]

    for v in voters:
        wf.toggle_upvote(db, issue_id=made["Overflowing bin"].id, user_id=v.id)
    wf.toggle_upvote(db, issue_id=made["Pothole"].id, user_id=voters[0].id)

    svc = IssueQueryService()

    by_votes = svc.list_issues(db, viewer_id=voters[1].id, sort="upvotes")
    assert [r.issue.title for r in by_votes] == ["Overflowing bin", "Pothole", "Broken main"]
    assert [r.upvote_count for r in by_votes] == [2, 1, 0]
    assert [r.user_upvoted for r in by_votes] == [True, False, False]

    roads = svc.list_issues(db, viewer_id=reporter.id, category="Roads")
    assert [r.issue.title for r in roads] == ["Pothole"]

    assert svc.list_issues(db, viewer_id=reporter.id, status="RESOLVED") == []
    assert len(svc.list_issues(db, viewer_id=reporter.id, category="All", status="All")) == 3


def test_authority_queue_includes_verified_and_assigned(db, make_profile):
    reporter = make_profile(Role.CITIZEN)
    authority = make_profile(Role.AUTHORITY)
    other_authority = make_profile(Role.AUTHORITY)
    made = seed_issues(db, reporter)
    wf = IssueWorkflow()

    for _ in range(3):
        v = make_profile(Role.CITIZEN)
        wf.cast_verification(db, issue_id=made["Pothole"].id, user_id=v.id)

    wf.update_status(
        db, issue_id=made["Broken main"].id, authority_id=other_authority.id, new_status="RESOLVED"
    )
    wf.update_status(
        db, issue_id=made["Overflowing bin"].id, authority_id=authority.id, new_status="RESOLVED"
    )

    queue = IssueQueryService().list_authority_queue(db, authority_id=authority.id)
    titles = {r.issue.title for r in queue}

    # resolved by someone else and no longer active: not in this queue
    assert titles == {"Pothole", "Overflowing bin"}
