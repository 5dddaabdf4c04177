"""Visibility and assignment rules for announcements, calendar items and tests."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar, assert_never

import structlog

from ..schemas import (
    AssignmentScope,
    CalendarItem,
    Membership,
    RosterAssignment,
    TestAssignment,
    VisibilityTarget,
    user_event_ids as roster_event_ids,
)
from .audience import as_membership, audience_roles, normalize_role

T = TypeVar("T")


def _targets(targets: Iterable[VisibilityTarget | Mapping[str, Any]]) -> list[VisibilityTarget]:
    return [
        t if isinstance(t, VisibilityTarget) else VisibilityTarget.model_validate(t)
        for t in targets
    ]


def _assignments(
    assignments: Iterable[TestAssignment | Mapping[str, Any]],
) -> list[TestAssignment]:
    return [
        a if isinstance(a, TestAssignment) else TestAssignment.model_validate(a)
        for a in assignments
    ]


def has_announcement_target_access(
    targets: Iterable[VisibilityTarget | Mapping[str, Any]],
    membership: Membership | Mapping[str, Any],
    user_event_ids: Iterable[str],
) -> bool:
    """Return True when the membership may see content with these targets.

    An empty target list is open to everyone.
    """
    entries = _targets(targets)
    if not entries:
        return True

    roles = audience_roles(membership)
    event_ids = set(user_event_ids)
    for target in entries:
        role_ok = target.target_role is None or normalize_role(target.target_role) in roles
        event_ok = target.event_id is None or target.event_id in event_ids
        if role_ok and event_ok:
            return True
    return False


def _assignment_matches(
    assignment: TestAssignment,
    membership: Membership,
    event_ids: set[str],
) -> bool:
    scope = assignment.assigned_scope
    if scope is AssignmentScope.CLUB:
        return True
    if scope is AssignmentScope.TEAM:
        return assignment.team_id is not None and assignment.team_id == membership.team_id
    if scope is AssignmentScope.PERSONAL:
        if assignment.target_membership_id is not None and assignment.target_membership_id == membership.id:
            return True
        return assignment.event_id is not None and assignment.event_id in event_ids
    assert_never(scope)


def has_test_assignment_access(
    assignments: Iterable[TestAssignment | Mapping[str, Any]],
    membership: Membership | Mapping[str, Any],
    user_event_ids: Iterable[str],
) -> bool:
    """Return True when some assignment grants the membership the test.

    An empty assignment list grants nobody.
    """
    entries = _assignments(assignments)
    if not entries:
        return False

    profile = as_membership(membership)
    event_ids = set(user_event_ids)
    return any(_assignment_matches(a, profile, event_ids) for a in entries)


def has_calendar_access(
    item: CalendarItem | Mapping[str, Any],
    membership: Membership | Mapping[str, Any],
    user_event_ids: Iterable[str],
) -> bool:
    event = item if isinstance(item, CalendarItem) else CalendarItem.model_validate(item)
    if event.test_id:
        return has_test_assignment_access(event.assignments, membership, user_event_ids)
    return has_announcement_target_access(event.targets, membership, user_event_ids)


class AccessPolicyEngine:
    """Filters content lists down to what a membership may see."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    @staticmethod
    def event_ids_for(
        membership: Membership | Mapping[str, Any],
        roster: Iterable[RosterAssignment | Mapping[str, Any]],
    ) -> list[str]:
        profile = as_membership(membership)
        entries = [
            r if isinstance(r, RosterAssignment) else RosterAssignment.model_validate(r)
            for r in roster
        ]
        return roster_event_ids(entries, profile.id)

    def visible_calendar_items(
        self,
        items: Sequence[CalendarItem | Mapping[str, Any]],
        membership: Membership | Mapping[str, Any],
        roster: Iterable[RosterAssignment | Mapping[str, Any]] = (),
    ) -> list[CalendarItem | Mapping[str, Any]]:
        profile = as_membership(membership)
        event_ids = self.event_ids_for(profile, roster)
        visible = [item for item in items if has_calendar_access(item, profile, event_ids)]
        self._logger.debug(
            "access.calendar_filtered",
            membership_id=profile.id,
            total=len(items),
            visible=len(visible),
        )
        return visible

    def visible_items(
        self,
        items: Sequence[T],
        membership: Membership | Mapping[str, Any],
        *,
        targets_of: Any,
        roster: Iterable[RosterAssignment | Mapping[str, Any]] = (),
    ) -> list[T]:
        """Filter announcement-like items using ``targets_of(item)``."""
        profile = as_membership(membership)
        event_ids = self.event_ids_for(profile, roster)
        visible = [
            item
            for item in items
            if has_announcement_target_access(targets_of(item), profile, event_ids)
        ]
        self._logger.debug(
            "access.items_filtered",
            membership_id=profile.id,
            total=len(items),
            visible=len(visible),
        )
        return visible

    def visible_tests(
        self,
        tests: Sequence[T],
        membership: Membership | Mapping[str, Any],
        *,
        assignments_of: Any,
        roster: Iterable[RosterAssignment | Mapping[str, Any]] = (),
    ) -> list[T]:
        """Filter tests using ``assignments_of(test)``."""
        profile = as_membership(membership)
        event_ids = self.event_ids_for(profile, roster)
        visible = [
            test
            for test in tests
            if has_test_assignment_access(assignments_of(test), profile, event_ids)
        ]
        if len(visible) < len(tests):
            self._logger.debug(
                "access.tests_hidden",
                membership_id=profile.id,
                hidden=len(tests) - len(visible),
            )
        return visible
