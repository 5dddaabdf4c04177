"""Audience role derivation for memberships."""

from __future__ import annotations

from typing import Any, Mapping

from ..schemas import Membership, MembershipRole

ADMIN_AUDIENCE_ROLE = "COACH"
MEMBER_AUDIENCE_ROLE = "MEMBER"


def as_membership(membership: Membership | Mapping[str, Any]) -> Membership:
    if isinstance(membership, Membership):
        return membership
    return Membership.model_validate(membership)


def default_audience_role(membership: Membership) -> str:
    if membership.role is MembershipRole.ADMIN:
        return ADMIN_AUDIENCE_ROLE
    return MEMBER_AUDIENCE_ROLE


def normalize_role(role: str) -> str:
    return role.strip().upper()


def ordered_audience_roles(membership: Membership | Mapping[str, Any]) -> list[str]:
    """Return audience tags with the default tag first, in first-seen order."""
    profile = as_membership(membership)
    raw_roles = [default_audience_role(profile), *profile.roles]
    seen: dict[str, None] = {}
    for role in raw_roles:
        normalized = normalize_role(role)
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def audience_roles(membership: Membership | Mapping[str, Any]) -> frozenset[str]:
    """Union of the default role tag and the normalized custom role tags."""
    return frozenset(ordered_audience_roles(membership))
