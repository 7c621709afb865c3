import uuid

from app.main import app
from app.models.enums import Role
from app.services.blob_store import LocalBlobStore, get_blob_store

API = "/api/v1"


def report(client, headers, **overrides):
    data = {
        "title": "Pothole",
        "description": "Deep pothole near the bus stop",
        "category": "Roads",
        "location": "Main St",
    }
    data.update(overrides)
    return client.post(f"{API}/issues", data=data, headers=headers)


def test_citizen_reports_issue_with_image(client, make_profile, auth_headers, blob_store):
    citizen = make_profile(Role.CITIZEN)
    headers = auth_headers(citizen)

    r = client.post(
        f"{API}/issues",
        data={
            "title": "Pothole",
            "description": "Deep pothole near the bus stop",
            "category": "Roads",
            "location": "Main St",
        },
        files={"image": ("hole.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["redirect_to"] == "/issues"
    assert body["redirect_after_ms"] == 2000

    issue = body["issue"]
    assert issue["status"] == "OPEN"
    assert issue["assigned_to"] is None
    assert issue["user_id"] == str(citizen.id)
    assert issue["image_url"].startswith(f"/media/{citizen.id}/")
    assert blob_store.exists(issue["image_url"][len("/media/"):])

    listing = client.get(f"{API}/issues", headers=headers).json()
    assert len(listing) == 1
    assert listing[0]["upvote_count"] == 0


def test_report_validation(client, make_profile, auth_headers):
    headers = auth_headers(make_profile(Role.CITIZEN))

    assert report(client, headers, title="  ").status_code == 422
    assert report(client, headers, category="Parks").status_code == 422


def test_only_citizens_can_report(client, make_profile, auth_headers):
    r = report(client, auth_headers(make_profile(Role.AUTHORITY)))
    assert r.status_code == 403
    assert r.json()["detail"]["back_to"] == "/issues"


def test_upvote_toggle_and_sort(client, make_profile, auth_headers):
    citizen = make_profile(Role.CITIZEN)
    headers = auth_headers(citizen)
    first = report(client, headers, title="Bin overflowing", category="Garbage").json()["issue"]
    second = report(client, headers).json()["issue"]

    up = client.post(f"{API}/issues/{first['id']}/upvote", headers=headers)
    assert up.json() == {"issue_id": first["id"], "upvote_count": 1, "user_upvoted": True}

    latest = client.get(f"{API}/issues", headers=headers).json()
    assert [i["id"] for i in latest] == [second["id"], first["id"]]

    by_votes = client.get(f"{API}/issues", params={"sort": "upvotes"}, headers=headers).json()
    assert [i["id"] for i in by_votes] == [first["id"], second["id"]]
    assert by_votes[0]["user_upvoted"] is True

    down = client.post(f"{API}/issues/{first['id']}/upvote", headers=headers)
    assert down.json()["upvote_count"] == 0
    assert down.json()["user_upvoted"] is False


def test_list_filters(client, make_profile, auth_headers):
    headers = auth_headers(make_profile(Role.CITIZEN))
    report(client, headers, title="Bin overflowing", category="Garbage")
    report(client, headers)

    garbage = client.get(f"{API}/issues", params={"category": "Garbage"}, headers=headers).json()
    assert [i["title"] for i in garbage] == ["Bin overflowing"]

    resolved = client.get(f"{API}/issues", params={"status": "RESOLVED"}, headers=headers).json()
    assert resolved == []

    assert client.get(f"{API}/issues", params={"status": "DONE"}, headers=headers).status_code == 422


def test_verification_flow_promotes_after_three(client, make_profile, auth_headers):
    reporter_headers = auth_headers(make_profile(Role.CITIZEN))
    issue = report(client, reporter_headers).json()["issue"]

    states = []
    for _ in range(3):
        h = auth_headers(make_profile(Role.CITIZEN))
        r = client.post(f"{API}/issues/{issue['id']}/verify", headers=h)
        assert r.status_code == 200, r.text
        states.append(r.json())

    assert [s["status"] for s in states] == ["OPEN", "OPEN", "VERIFIED"]
    assert states[-1]["promoted"] is True

    again = client.post(f"{API}/issues/{issue['id']}/verify", headers=h)
    assert again.status_code == 409

    details = client.get(f"{API}/issues/{issue['id']}", headers=reporter_headers).json()
    assert details["issue"]["status"] == "VERIFIED"
    assert details["verification_count"] == 3
    assert details["can_verify"] is False
    assert [s["status"] for s in details["status_history"]] == ["OPEN", "VERIFIED"]


def test_authority_status_update_with_note(client, make_profile, auth_headers):
    citizen_headers = auth_headers(make_profile(Role.CITIZEN))
    authority = make_profile(Role.AUTHORITY, name="Ward Officer")
    authority_headers = auth_headers(authority)
    issue = report(client, citizen_headers).json()["issue"]

    r = client.post(
        f"{API}/issues/{issue['id']}/status",
        data={"status": "IN_PROGRESS", "comment": "Crew dispatched"},
        headers=authority_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "IN_PROGRESS"
    assert r.json()["assigned_to"] == str(authority.id)

    back = client.post(
        f"{API}/issues/{issue['id']}/status",
        data={"status": "OPEN"},
        headers=authority_headers,
    )
    assert back.status_code == 409

    denied = client.post(
        f"{API}/issues/{issue['id']}/status",
        data={"status": "RESOLVED"},
        headers=citizen_headers,
    )
    assert denied.status_code == 403

    details = client.get(f"{API}/issues/{issue['id']}", headers=citizen_headers).json()
    assert details["comments"][0]["content"] == "Crew dispatched"
    assert details["comments"][0]["author_role"] == "AUTHORITY"
    timeline = {s["status"]: s for s in details["timeline"]}
    assert timeline["IN_PROGRESS"]["completed"] is True
    assert timeline["IN_PROGRESS"]["changed_by_name"] == "Ward Officer"
    assert timeline["RESOLVED"]["completed"] is False


def test_comments(client, make_profile, auth_headers):
    headers = auth_headers(make_profile(Role.CITIZEN, name="Asha"))
    issue = report(client, headers).json()["issue"]

    r = client.post(f"{API}/issues/{issue['id']}/comments", json={"content": "Still there"}, headers=headers)
    assert r.status_code == 201
    assert r.json()["author_name"] == "Asha"

    blank = client.post(f"{API}/issues/{issue['id']}/comments", json={"content": "   "}, headers=headers)
    assert blank.status_code == 422


def test_unknown_issue_is_not_found(client, make_profile, auth_headers):
    headers = auth_headers(make_profile(Role.CITIZEN))

    for issue_id in (str(uuid.uuid4()), "not-a-uuid"):
        r = client.get(f"{API}/issues/{issue_id}", headers=headers)
        assert r.status_code == 404
        assert r.json()["detail"] == {"message": "Issue not found", "back_to": "/issues"}

    assert client.post(f"{API}/issues/{uuid.uuid4()}/upvote", headers=headers).status_code == 404


def test_reported_issue_shows_open_with_no_upvotes(client, make_profile, auth_headers):
    headers = auth_headers(make_profile(Role.CITIZEN))
    created = report(
        client,
        headers,
        title="Pothole on Elm St",
        category="Roads",
        location="Elm St & 5th",
    ).json()["issue"]

    roads = client.get(f"{API}/issues", params={"category": "Roads"}, headers=headers).json()
    assert [(i["id"], i["status"], i["upvote_count"]) for i in roads] == [(created["id"], "OPEN", 0)]
    assert roads[0]["location"] == "Elm St & 5th"


class BrokenBlobStore(LocalBlobStore):
    def store(self, path, data):
        raise OSError("disk full")


def test_blob_store_failure_is_generic_500_without_partial_write(
    client, make_profile, auth_headers, tmp_path
):
    headers = auth_headers(make_profile(Role.CITIZEN))
    app.dependency_overrides[get_blob_store] = lambda: BrokenBlobStore(tmp_path / "broken", "/media")

    r = client.post(
        f"{API}/issues",
        data={
            "title": "Pothole",
            "description": "Deep pothole near the bus stop",
            "category": "Roads",
            "location": "Main St",
        },
        files={"image": ("hole.jpg", b"jpeg-bytes", "image/jpeg")},
        headers={**headers, "X-Request-Id": "rid-blob"},
    )

    assert r.status_code == 500
    assert r.json() == {"detail": "Something went wrong. Please try again.", "request_id": "rid-blob"}
    assert client.get(f"{API}/issues", headers=headers).json() == []
