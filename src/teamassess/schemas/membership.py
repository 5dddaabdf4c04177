from __future__ import annotations

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field


class MembershipRole(str, Enum):
    """Base role of a membership inside a club."""

    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class AssignmentScope(str, Enum):
    """Breadth of a test assignment."""

    CLUB = "CLUB"
    TEAM = "TEAM"
    PERSONAL = "PERSONAL"


class Membership(BaseModel):
    """One user's participation in one club/team unit."""

    id: str
    role: MembershipRole = MembershipRole.MEMBER
    roles: list[str] = Field(default_factory=list)
    team_id: str | None = None
    club_id: str | None = None

    model_config = ConfigDict(extra="allow")


class VisibilityTarget(BaseModel):
    """Audience filter attached to announcements and calendar items.

    ``None`` fields match everyone; both fields must match for the entry to
    match.
    """

    target_role: str | None = None
    event_id: str | None = None

    model_config = ConfigDict(extra="forbid")


class TestAssignment(BaseModel):
    """Assignment rule attached to a test."""

    __test__ = False

    assigned_scope: AssignmentScope
    team_id: str | None = None
    target_membership_id: str | None = None
    event_id: str | None = None

    model_config = ConfigDict(extra="forbid")


class RosterAssignment(BaseModel):
    """Enrollment of a membership in a competition event."""

    membership_id: str
    event_id: str
    team_id: str | None = None

    model_config = ConfigDict(extra="allow")


class CalendarItem(BaseModel):
    """Calendar entry, optionally backed by a test."""

    id: str
    title: str | None = None
    test_id: str | None = None
    assignments: list[TestAssignment] = Field(default_factory=list)
    targets: list[VisibilityTarget] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


def user_event_ids(roster: Iterable[RosterAssignment], membership_id: str) -> list[str]:
    """Return the event ids a membership is enrolled in, first-seen order."""
    seen: dict[str, None] = {}
    for entry in roster:
        if entry.membership_id == membership_id:
            seen.setdefault(entry.event_id, None)
    return list(seen)
