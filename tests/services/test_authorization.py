"""Tests for the pure authorization predicates."""

import uuid

import pytest

from campus_connect.core.errors import Forbidden
from campus_connect.models import Club, ClubAnnouncement, ClubMembership, Event
from campus_connect.models.enums import (
    ApprovalStatus,
    EntityType,
    MemberRole,
    MembershipStatus,
    UserRole,
)
from campus_connect.services import authorization as gate
from campus_connect.services.role_registry import Principal


def _principal(role: UserRole = UserRole.STUDENT) -> Principal:
    return Principal(id=uuid.uuid4(), role=role)


def _club(creator_id: uuid.UUID, status: ApprovalStatus = ApprovalStatus.APPROVED) -> Club:
    return Club(id=uuid.uuid4(), name="Club", creator_id=creator_id, approval_status=status)


def _membership(
    user_id: uuid.UUID,
    club: Club,
    role: MemberRole = MemberRole.MEMBER,
    status: MembershipStatus = MembershipStatus.APPROVED,
) -> ClubMembership:
    return ClubMembership(id=uuid.uuid4(), club_id=club.id, user_id=user_id, role=role, status=status)


def test_authorize_raises_forbidden_with_message() -> None:
    gate.authorize(True)
    with pytest.raises(Forbidden) as exc_info:
        gate.authorize(False, "nope")
    assert exc_info.value.message == "nope"


@pytest.mark.parametrize(
    ("role", "allowed"),
    [(UserRole.STUDENT, False), (UserRole.STUDENT_LEADER, True), (UserRole.ADMIN, True)],
)
def test_can_create_club_by_role(role: UserRole, allowed: bool) -> None:
    assert gate.can_create_club(_principal(role)) is allowed


def test_hidden_clubs_are_visible_only_to_creator_and_admins() -> None:
    creator = _principal(UserRole.STUDENT_LEADER)
    club = _club(creator.id, ApprovalStatus.PENDING)
    assert gate.can_view_club(creator, club)
    assert gate.can_view_club(_principal(UserRole.ADMIN), club)
    assert not gate.can_view_club(_principal(), club)
    assert not gate.can_view_club(None, club)
    assert gate.can_view_club(None, _club(creator.id))


def test_only_admins_moderate_clubs() -> None:
    assert gate.can_moderate_clubs(_principal(UserRole.ADMIN))
    assert not gate.can_moderate_clubs(_principal(UserRole.STUDENT_LEADER))


def test_membership_decisions_belong_to_creator_or_admin() -> None:
    creator = _principal(UserRole.STUDENT_LEADER)
    club = _club(creator.id)
    club_admin = _principal(UserRole.STUDENT_LEADER)
    assert gate.can_decide_membership(creator, club)
    assert gate.can_decide_membership(_principal(UserRole.ADMIN), club)
    # Club admins other than the creator cannot decide.
    assert not gate.can_decide_membership(club_admin, club)


def test_members_can_always_leave() -> None:
    member = _principal()
    club = _club(uuid.uuid4())
    for status in MembershipStatus:
        assert gate.can_leave_membership(member, _membership(member.id, club, status=status))
    assert not gate.can_leave_membership(_principal(), _membership(member.id, club))


def test_event_creation_requires_role_and_club_admin() -> None:
    creator = _principal(UserRole.STUDENT_LEADER)
    club = _club(creator.id)
    assert gate.can_create_event(creator, club, None)

    leader = _principal(UserRole.STUDENT_LEADER)
    assert gate.can_create_event(leader, club, _membership(leader.id, club, MemberRole.ADMIN))
    assert not gate.can_create_event(leader, club, _membership(leader.id, club))
    assert not gate.can_create_event(
        leader,
        club,
        _membership(leader.id, club, MemberRole.ADMIN, MembershipStatus.PENDING),
    )

    student = _principal(UserRole.STUDENT)
    assert not gate.can_create_event(student, club, _membership(student.id, club, MemberRole.ADMIN))

    # Platform admins still need a club-admin seat.
    platform_admin = _principal(UserRole.ADMIN)
    assert not gate.can_create_event(platform_admin, club, None)


def test_flag_review_and_delete_rules() -> None:
    owner = _principal(UserRole.STUDENT_LEADER)
    admin = _principal(UserRole.ADMIN)
    stranger = _principal()
    owners = {owner.id}

    assert gate.can_review_flag(owner, owners)
    assert gate.can_review_flag(admin, owners)
    assert not gate.can_review_flag(stranger, owners)

    assert gate.can_delete_flagged_entity(owner, EntityType.EVENT, owners)
    assert not gate.can_delete_flagged_entity(owner, EntityType.CLUB, owners)
    assert gate.can_delete_flagged_entity(admin, EntityType.CLUB, owners)


def test_role_changes_are_admin_only_and_never_self_issued() -> None:
    admin = _principal(UserRole.ADMIN)
    assert gate.can_change_role(admin, uuid.uuid4(), UserRole.STUDENT_LEADER)
    assert not gate.can_change_role(admin, admin.id, UserRole.STUDENT)
    leader = _principal(UserRole.STUDENT_LEADER)
    assert not gate.can_change_role(leader, leader.id, UserRole.ADMIN)


def test_announcement_posting_rule() -> None:
    creator = _principal(UserRole.STUDENT_LEADER)
    club = _club(creator.id)
    assert gate.can_post_announcement(creator, club, None)

    leader = _principal(UserRole.STUDENT_LEADER)
    assert gate.can_post_announcement(leader, club, _membership(leader.id, club))
    assert not gate.can_post_announcement(
        leader, club, _membership(leader.id, club, status=MembershipStatus.PENDING)
    )

    student = _principal()
    assert not gate.can_post_announcement(student, club, _membership(student.id, club))
    assert gate.can_post_announcement(
        student, club, _membership(student.id, club, MemberRole.ADMIN)
    )


def test_announcement_management() -> None:
    creator = _principal(UserRole.STUDENT_LEADER)
    author = _principal()
    club = _club(creator.id)
    announcement = ClubAnnouncement(club_id=club.id, creator_id=author.id, title="t", content="c")
    assert gate.can_manage_announcement(author, announcement, club)
    assert gate.can_manage_announcement(creator, announcement, club)
    assert not gate.can_manage_announcement(_principal(), announcement, club)


def test_event_management_includes_club_creator() -> None:
    club_creator = _principal(UserRole.STUDENT_LEADER)
    event_creator = _principal(UserRole.STUDENT_LEADER)
    club = _club(club_creator.id)
    event = Event(id=uuid.uuid4(), title="E", club_id=club.id, creator_id=event_creator.id)
    assert gate.can_manage_event(club_creator, event, club)
    assert gate.can_manage_event(event_creator, event, club)
    assert gate.can_view_registrations(club_creator, event, club)
    assert not gate.can_manage_event(_principal(), event, club)
