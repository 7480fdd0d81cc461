"""Tests for persistence primitives and visibility-filtered listings."""

from collections.abc import Callable
from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from campus_connect.core.errors import AlreadyExists, Conflict, Forbidden, InvalidArgument, NotFound
from campus_connect.db.time import utcnow
from campus_connect.models import Club, Event, Profile
from campus_connect.models.enums import (
    ApprovalStatus,
    ClubScope,
    ClubSort,
    EntityType,
    EventSort,
    FlagReason,
    MemberRole,
    MembershipStatus,
    UserRole,
)
from campus_connect.services import entity_store
from campus_connect.services.role_registry import Principal


def test_compare_and_set_applies_when_status_matches(db_session: Session, pending_club: Club) -> None:
    club = entity_store.compare_and_set(
        db_session,
        Club,
        Club.approval_status,
        pending_club.id,
        ApprovalStatus.PENDING,
        {"approval_status": ApprovalStatus.APPROVED},
    )
    assert club.approval_status is ApprovalStatus.APPROVED


def test_compare_and_set_conflicts_on_stale_status(db_session: Session, pending_club: Club) -> None:
    with pytest.raises(Conflict):
        entity_store.compare_and_set(
            db_session,
            Club,
            Club.approval_status,
            pending_club.id,
            ApprovalStatus.REJECTED,
            {"approval_status": ApprovalStatus.PENDING},
        )
    db_session.rollback()
    db_session.refresh(pending_club)
    assert pending_club.approval_status is ApprovalStatus.PENDING


def test_create_club_enrols_creator_as_club_admin(db_session: Session, leader: Profile) -> None:
    club = entity_store.create_club(
        db_session,
        name="  Debate Society ",
        description=None,
        creator_id=leader.id,
        initial_status=ApprovalStatus.PENDING,
    )
    db_session.commit()

    assert club.name == "Debate Society"
    membership = entity_store.find_membership(db_session, club.id, leader.id)
    assert membership is not None
    assert membership.role is MemberRole.ADMIN
    assert membership.status is MembershipStatus.APPROVED


def test_create_club_refuses_students(db_session: Session, student: Profile) -> None:
    with pytest.raises(Forbidden):
        entity_store.create_club(
            db_session,
            name="Nope",
            description=None,
            creator_id=student.id,
            initial_status=ApprovalStatus.PENDING,
        )


def test_create_club_requires_a_name(db_session: Session, leader: Profile) -> None:
    with pytest.raises(InvalidArgument):
        entity_store.create_club(
            db_session,
            name="   ",
            description=None,
            creator_id=leader.id,
            initial_status=ApprovalStatus.PENDING,
        )


def test_update_club_fields_rejects_protected_and_unknown_fields(
    db_session: Session, approved_club: Club
) -> None:
    with pytest.raises(Forbidden):
        entity_store.update_club_fields(
            db_session, approved_club, {"approval_status": ApprovalStatus.REJECTED}
        )
    with pytest.raises(InvalidArgument):
        entity_store.update_club_fields(db_session, approved_club, {"colour": "blue"})

    entity_store.update_club_fields(db_session, approved_club, {"description": "Blitz nights"})
    assert approved_club.description == "Blitz nights"


@pytest.mark.parametrize(
    ("is_free", "price", "expected"),
    [(True, 12.5, None), (True, None, None), (False, 5, 5.0)],
)
def test_normalize_price(is_free: bool, price: float | None, expected: float | None) -> None:
    assert entity_store._normalize_price(is_free, price) == expected


@pytest.mark.parametrize("price", [None, 0, -3, "free"])
def test_paid_events_need_a_positive_price(price: object) -> None:
    with pytest.raises(InvalidArgument):
        entity_store._normalize_price(False, price)


def test_create_event_requires_club_admin_seat(
    db_session: Session,
    approved_club: Club,
    make_profile: Callable[..., Profile],
) -> None:
    outsider = make_profile(UserRole.STUDENT_LEADER)
    with pytest.raises(Forbidden):
        entity_store.create_event(
            db_session,
            creator_id=outsider.id,
            club_id=approved_club.id,
            title="Unauthorized",
            event_date=utcnow() + timedelta(days=1),
        )


def test_create_event_rejects_unknown_category(
    db_session: Session, approved_club: Club, leader: Profile
) -> None:
    with pytest.raises(InvalidArgument):
        entity_store.create_event(
            db_session,
            creator_id=leader.id,
            club_id=approved_club.id,
            title="Mystery",
            event_date=utcnow() + timedelta(days=1),
            category="Juggling",
        )


def test_duplicate_flag_is_refused(db_session: Session, event: Event, student: Profile) -> None:
    entity_store.create_flag(
        db_session,
        entity_type=EntityType.EVENT,
        entity_id=event.id,
        reporter_id=student.id,
        reason=FlagReason.SPAM,
    )
    db_session.commit()
    with pytest.raises(AlreadyExists):
        entity_store.create_flag(
            db_session,
            entity_type=EntityType.EVENT,
            entity_id=event.id,
            reporter_id=student.id,
            reason=FlagReason.OTHER,
        )


def test_flag_target_must_exist(db_session: Session, approved_club: Club, student: Profile) -> None:
    with pytest.raises(NotFound):
        entity_store.create_flag(
            db_session,
            entity_type=EntityType.EVENT,
            entity_id=approved_club.id,
            reporter_id=student.id,
            reason=FlagReason.SPAM,
        )


def test_delete_club_removes_flags_on_club_and_events(
    db_session: Session, approved_club: Club, event: Event, student: Profile
) -> None:
    for entity_type, entity_id in ((EntityType.CLUB, approved_club.id), (EntityType.EVENT, event.id)):
        entity_store.create_flag(
            db_session,
            entity_type=entity_type,
            entity_id=entity_id,
            reporter_id=student.id,
            reason=FlagReason.SPAM,
        )
    db_session.commit()

    club_id, event_id = approved_club.id, event.id
    entity_store.delete_club(db_session, approved_club)
    db_session.commit()

    assert db_session.get(Club, club_id) is None
    assert db_session.get(Event, event_id) is None
    assert entity_store.list_flags(db_session) == []


def test_list_clubs_filters_hidden_clubs(
    db_session: Session,
    make_club: Callable[..., Club],
    leader: Profile,
    student: Profile,
    admin: Profile,
) -> None:
    make_club(leader, ApprovalStatus.APPROVED, name="Approved")
    make_club(leader, ApprovalStatus.PENDING, name="Pending")
    make_club(leader, ApprovalStatus.REJECTED, name="Rejected")

    def names(viewer: Principal | None, scope: ClubScope) -> list[str]:
        return [club.name for club, _ in entity_store.list_clubs(db_session, viewer, scope)]

    as_student = Principal.from_profile(student)
    as_leader = Principal.from_profile(leader)
    as_admin = Principal.from_profile(admin)

    assert names(None, ClubScope.ALL) == ["Approved"]
    assert names(as_student, ClubScope.ALL) == ["Approved"]
    assert names(as_student, ClubScope.PENDING) == []
    assert names(as_leader, ClubScope.ALL) == ["Approved", "Pending", "Rejected"]
    assert names(as_admin, ClubScope.PENDING) == ["Pending"]
    assert names(as_admin, ClubScope.REJECTED) == ["Rejected"]
    assert names(as_admin, ClubScope.PUBLIC) == ["Approved"]


def test_list_clubs_mine_and_managed(
    db_session: Session,
    approved_club: Club,
    student: Profile,
) -> None:
    as_student = Principal.from_profile(student)
    assert entity_store.list_clubs(db_session, as_student, ClubScope.MINE) == []

    membership = entity_store.create_membership(
        db_session,
        club_id=approved_club.id,
        user_id=student.id,
        status=MembershipStatus.APPROVED,
    )
    db_session.commit()

    mine = entity_store.list_clubs(db_session, as_student, ClubScope.MINE)
    assert [(club.id, count) for club, count in mine] == [(approved_club.id, 2)]
    assert entity_store.list_clubs(db_session, as_student, ClubScope.MANAGED) == []
    assert entity_store.list_clubs(db_session, None, ClubScope.MINE) == []
    assert membership.role is MemberRole.MEMBER


def test_list_clubs_sorting(
    db_session: Session, make_club: Callable[..., Club], leader: Profile
) -> None:
    make_club(leader, name="beta")
    make_club(leader, name="Alpha")
    sorted_names = [
        club.name
        for club, _ in entity_store.list_clubs(db_session, None, ClubScope.PUBLIC, ClubSort.NAME)
    ]
    assert sorted_names == ["Alpha", "beta"]


def test_list_events_hides_events_of_hidden_clubs(
    db_session: Session,
    pending_club: Club,
    event: Event,
    leader: Profile,
    student: Profile,
) -> None:
    hidden = Event(
        title="Workshop",
        event_date=utcnow() + timedelta(days=2),
        club_id=pending_club.id,
        creator_id=leader.id,
        is_free=True,
    )
    db_session.add(hidden)
    db_session.commit()

    visible = entity_store.list_events(db_session, Principal.from_profile(student), EventSort.DATE)
    assert [item.id for item, _ in visible] == [event.id]

    own = entity_store.list_events(db_session, Principal.from_profile(leader), EventSort.DATE)
    assert [item.id for item, _ in own] == [hidden.id, event.id]


def test_membership_decision_requires_pending(
    db_session: Session, approved_club: Club, leader: Profile, student: Profile
) -> None:
    membership = entity_store.create_membership(
        db_session,
        club_id=approved_club.id,
        user_id=student.id,
        status=MembershipStatus.PENDING,
    )
    db_session.commit()

    entity_store.update_membership_status(
        db_session, membership.id, MembershipStatus.APPROVED, leader.id
    )
    db_session.commit()
    with pytest.raises(Conflict):
        entity_store.update_membership_status(
            db_session, membership.id, MembershipStatus.REJECTED, leader.id
        )


def test_membership_decision_refuses_non_creator(
    db_session: Session, approved_club: Club, student: Profile, other_student: Profile
) -> None:
    membership = entity_store.create_membership(
        db_session,
        club_id=approved_club.id,
        user_id=student.id,
        status=MembershipStatus.PENDING,
    )
    db_session.commit()
    with pytest.raises(Forbidden):
        entity_store.update_membership_status(
            db_session, membership.id, MembershipStatus.APPROVED, other_student.id
        )
