from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from app.models.enums import Role

# converter name -> (regex, parser)
_CONVERTERS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "uuid": (r"[^/]+", uuid.UUID),
    "str": (r"[^/]+", str),
}

_PARAM = re.compile(r"\{(?P<name>[a-zA-Z_][a-zA-Z0-9_]*)(?::(?P<conv>[a-z]+))?\}")


@dataclass(frozen=True)
class ViewRoute:
    pattern: str
    view: str
    requires_auth: bool = False
    required_role: Optional[Role] = None
    _regex: re.Pattern = field(init=False, repr=False, compare=False)
    _parsers: Dict[str, Callable[[str], Any]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        parsers: Dict[str, Callable[[str], Any]] = {}
        body = ""
        pos = 0
        for m in _PARAM.finditer(self.pattern):
            regex, parser = _CONVERTERS[m.group("conv") or "str"]
            parsers[m.group("name")] = parser
            body += re.escape(self.pattern[pos:m.start()]) + f"(?P<{m.group('name')}>{regex})"
            pos = m.end()
        body += re.escape(self.pattern[pos:])

        object.__setattr__(self, "_regex", re.compile(f"^{body}$"))
        object.__setattr__(self, "_parsers", parsers)

    def match(self, path: str) -> Optional[Tuple[Dict[str, Any], bool]]:
        """
        (params, parsed_ok) when the path has this route's shape. A segment that
        fails its converter is kept as the raw string with parsed_ok False, so
        the view can render its not-found state.
        """
        m = self._regex.match(path)
        if not m:
            return None
        params: Dict[str, Any] = {}
        parsed_ok = True
        for k, v in m.groupdict().items():
            try:
                params[k] = self._parsers[k](v)
            except ValueError:
                params[k] = v
                parsed_ok = False
        return params, parsed_ok


@dataclass(frozen=True)
class ResolvedView:
    path: str
    view: str
    params: Dict[str, Any]
    requires_auth: bool
    required_role: Optional[Role]
    fallback: bool
    not_found: bool = False


ROUTE_TABLE = [
    ViewRoute("/", "landing"),
    ViewRoute("/login", "login"),
    ViewRoute("/signup", "signup"),
    ViewRoute("/authority/login", "authority_login"),
    ViewRoute("/issues", "issues_list", requires_auth=True),
    ViewRoute("/issues/{issue_id:uuid}", "issue_details", requires_auth=True),
    ViewRoute("/report", "report_issue", requires_auth=True, required_role=Role.CITIZEN),
    ViewRoute("/dashboard/citizen", "citizen_dashboard", requires_auth=True, required_role=Role.CITIZEN),
    ViewRoute("/dashboard/authority", "authority_dashboard", requires_auth=True, required_role=Role.AUTHORITY),
    ViewRoute("/dashboard/admin", "admin_dashboard", requires_auth=True, required_role=Role.ADMIN),
]

FALLBACK = ROUTE_TABLE[0]


def _normalize(path: str) -> str:
    # accept "#/issues" and "issues", drop any query string; a trailing slash
    # is kept, so "/login/" matches nothing and falls back
    path = (path or "").strip()
    if path.startswith("#"):
        path = path[1:]
    path = path.split("?", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    return path


def resolve_view(path: str) -> ResolvedView:
    normalized = _normalize(path)
    for route in ROUTE_TABLE:
        matched = route.match(normalized)
        if matched is not None:
            params, parsed_ok = matched
            return ResolvedView(
                path=normalized,
                view=route.view,
                params=params,
                requires_auth=route.requires_auth,
                required_role=route.required_role,
                fallback=False,
                not_found=not parsed_ok,
            )

    return ResolvedView(
        path=FALLBACK.pattern,
        view=FALLBACK.view,
        params={},
        requires_auth=FALLBACK.requires_auth,
        required_role=FALLBACK.required_role,
        fallback=True,
    )
