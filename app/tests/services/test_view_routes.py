import uuid

import pytest

from app.core.view_routes import resolve_view
from app.models.enums import Role


@pytest.mark.parametrize(
    "path, view",
    [
        ("/", "landing"),
        ("/login", "login"),
        ("/signup", "signup"),
        ("/authority/login", "authority_login"),
        ("/issues", "issues_list"),
        ("#/issues", "issues_list"),
        ("/report?draft=1", "report_issue"),
        ("/dashboard/citizen", "citizen_dashboard"),
        ("/dashboard/authority", "authority_dashboard"),
        ("/dashboard/admin", "admin_dashboard"),
    ],
)
def test_known_paths(path, view):
    v = resolve_view(path)
    assert v.view == view
    assert v.fallback is False


def test_issue_details_param_is_parsed():
    issue_id = uuid.uuid4()
    v = resolve_view(f"/issues/{issue_id}")
    assert v.view == "issue_details"
    assert v.params == {"issue_id": issue_id}
    assert v.requires_auth is True
    assert v.not_found is False


def test_malformed_issue_id_opens_details_in_not_found_state():
    v = resolve_view("/issues/not-a-uuid")
    assert v.view == "issue_details"
    assert v.fallback is False
    assert v.not_found is True
    assert v.params == {"issue_id": "not-a-uuid"}


def test_role_gated_views():
    assert resolve_view("/report").required_role == Role.CITIZEN
    assert resolve_view("/dashboard/admin").required_role == Role.ADMIN
    assert resolve_view("/issues").required_role is None


@pytest.mark.parametrize("path", ["/nowhere", "/login/", "/issues/", "/dashboard", ""])
def test_unknown_paths_fall_back_to_landing(path):
    v = resolve_view(path)
    assert v.view == "landing"
    assert v.path == "/"
    assert v.fallback == (path != "")
