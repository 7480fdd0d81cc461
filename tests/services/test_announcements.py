"""Tests for club announcements."""

from collections.abc import Callable

import pytest
from sqlalchemy.orm import Session

from campus_connect.core.errors import Forbidden, InvalidArgument, NotFound
from campus_connect.models import Club, Profile
from campus_connect.models.enums import MembershipDecision, UserRole
from campus_connect.services import announcements
from campus_connect.services.moderation import ModerationEngine


def test_creator_posts_and_edits(db_session: Session, leader: Profile, approved_club: Club) -> None:
    post = announcements.create_announcement(
        db_session, leader.id, approved_club.id, " Welcome ", "First meeting Monday"
    )
    assert post.title == "Welcome"

    updated = announcements.update_announcement(
        db_session, leader.id, approved_club.id, post.id, "Welcome back", "Moved to Tuesday"
    )
    assert updated.content == "Moved to Tuesday"
    assert announcements.list_announcements(db_session, approved_club.id) == [updated]


def test_plain_members_cannot_post(
    db_session: Session, leader: Profile, student: Profile, approved_club: Club
) -> None:
    membership = ModerationEngine.request_membership(db_session, student.id, approved_club.id)
    ModerationEngine.decide_membership(
        db_session, leader.id, membership.id, MembershipDecision.APPROVE
    )
    with pytest.raises(Forbidden):
        announcements.create_announcement(db_session, student.id, approved_club.id, "Hi", "Hello")


def test_member_leaders_can_post(
    db_session: Session,
    leader: Profile,
    approved_club: Club,
    make_profile: Callable[..., Profile],
) -> None:
    other_leader = make_profile(UserRole.STUDENT_LEADER)
    membership = ModerationEngine.request_membership(db_session, other_leader.id, approved_club.id)
    ModerationEngine.decide_membership(
        db_session, leader.id, membership.id, MembershipDecision.APPROVE
    )

    post = announcements.create_announcement(
        db_session, other_leader.id, approved_club.id, "Sponsors", "We found one"
    )
    assert post.creator_id == other_leader.id


def test_announcement_validation(db_session: Session, leader: Profile, approved_club: Club) -> None:
    with pytest.raises(InvalidArgument):
        announcements.create_announcement(db_session, leader.id, approved_club.id, "", "Body")
    with pytest.raises(InvalidArgument):
        announcements.create_announcement(
            db_session, leader.id, approved_club.id, "Title", "x" * 5001
        )


def test_announcement_scoped_to_club(
    db_session: Session,
    leader: Profile,
    approved_club: Club,
    make_club: Callable[..., Club],
) -> None:
    other = make_club(leader, name="Other Club")
    post = announcements.create_announcement(db_session, leader.id, approved_club.id, "T", "C")
    with pytest.raises(NotFound):
        announcements.delete_announcement(db_session, leader.id, other.id, post.id)

    announcements.delete_announcement(db_session, leader.id, approved_club.id, post.id)
    assert announcements.list_announcements(db_session, approved_club.id) == []
