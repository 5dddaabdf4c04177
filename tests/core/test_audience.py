from __future__ import annotations

from teamassess.core import audience_roles, ordered_audience_roles
from teamassess.schemas import Membership, MembershipRole


def test_member_gets_default_member_tag():
    member = Membership(id="m1", team_id="t1")

    assert ordered_audience_roles(member) == ["MEMBER"]
    assert audience_roles(member) == frozenset({"MEMBER"})


def test_admin_maps_to_coach_and_keeps_custom_roles():
    admin = Membership(id="a1", role=MembershipRole.ADMIN, roles=["CAPTAIN"])

    assert ordered_audience_roles(admin) == ["COACH", "CAPTAIN"]


def test_custom_roles_are_trimmed_uppercased_and_deduped():
    member = Membership(id="m1", roles=["captain", " CAPTAIN ", "coach", "   "])

    assert ordered_audience_roles(member) == ["MEMBER", "CAPTAIN", "COACH"]
    assert audience_roles(member) == frozenset({"MEMBER", "CAPTAIN", "COACH"})


def test_accepts_plain_mapping():
    assert audience_roles({"id": "m1", "role": "ADMIN", "roles": ["member"]}) == frozenset(
        {"COACH", "MEMBER"}
    )
