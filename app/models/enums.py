#app/models/enums.py
from __future__ import annotations
from enum import Enum


class Role(str, Enum):
    CITIZEN = "CITIZEN"
    AUTHORITY = "AUTHORITY"
    ADMIN = "ADMIN"


class IssueCategory(str, Enum):
    Garbage = "Garbage"
    Roads = "Roads"
    Water = "Water"
    Electricity = "Electricity"
    Safety = "Safety"
    Other = "Other"


class IssueStatus(str, Enum):
    # lifecycle order matters: status only ever moves forward along this list
    OPEN = "OPEN"
    VERIFIED = "VERIFIED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


STATUS_SEQUENCE = [
    IssueStatus.OPEN,
    IssueStatus.VERIFIED,
    IssueStatus.IN_PROGRESS,
    IssueStatus.RESOLVED,
]

# statuses an authority may set by hand; VERIFIED is reached only through verifications
AUTHORITY_SETTABLE_STATUSES = {IssueStatus.IN_PROGRESS, IssueStatus.RESOLVED}


def status_index(status: str) -> int:
    return STATUS_SEQUENCE.index(IssueStatus(status))


def _sql_in(values) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


ROLE_SQL_VALUES = _sql_in(Role)
CATEGORY_SQL_VALUES = _sql_in(IssueCategory)
STATUS_SQL_VALUES = _sql_in(IssueStatus)
