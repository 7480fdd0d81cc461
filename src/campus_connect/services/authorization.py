"""Authorization gate consulted before a mutating request reaches the engine.

Every predicate is a pure function of the principal, snapshots of the
resources involved and the requested change. None of them touches the
database session: callers load what is needed and pass it in, and the
predicates only read ownership fields of *other* entities (for example the
creator of the club that owns an event), never a field they protect.

The moderation engine enforces the same rules independently against freshly
read rows, so a gap in one layer is not exploitable on its own.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from campus_connect.core.errors import Forbidden
from campus_connect.models import Club, ClubAnnouncement, ClubMembership, Event
from campus_connect.models.enums import (
    ApprovalStatus,
    EntityType,
    MemberRole,
    MembershipStatus,
    UserRole,
)
from campus_connect.services.role_registry import Principal, can_create_clubs_or_events


def authorize(allowed: bool, message: str | None = None) -> None:
    """Raise ``Forbidden`` when a predicate denied the request."""
    if not allowed:
        raise Forbidden(message)


def _is_approved_club_admin(membership: ClubMembership | None) -> bool:
    return (
        membership is not None
        and membership.role is MemberRole.ADMIN
        and membership.status is MembershipStatus.APPROVED
    )


# --- clubs -----------------------------------------------------------------


def can_create_club(principal: Principal) -> bool:
    """Leaders and admins create clubs.

    The initial status is decided by the engine from the stored role, so a
    leader asking for ``approved`` is not refused here, only downgraded.
    """
    return can_create_clubs_or_events(principal.role)


def can_view_club(principal: Principal | None, club: Club) -> bool:
    if club.approval_status is ApprovalStatus.APPROVED:
        return True
    if principal is None:
        return False
    return principal.is_admin or club.creator_id == principal.id


def can_update_club(principal: Principal, club: Club) -> bool:
    return principal.is_admin or club.creator_id == principal.id


def can_moderate_clubs(principal: Principal) -> bool:
    """Approve, reject and delete clubs."""
    return principal.is_admin


def can_resubmit_club(principal: Principal, club: Club) -> bool:
    return principal.is_admin or club.creator_id == principal.id


# --- memberships -----------------------------------------------------------


def can_request_membership(principal: Principal, club: Club) -> bool:
    return can_view_club(principal, club)


def can_decide_membership(principal: Principal, club: Club) -> bool:
    """Only the club creator or a platform admin approves or rejects members."""
    return principal.is_admin or club.creator_id == principal.id


def can_view_membership_requests(principal: Principal, club: Club) -> bool:
    return can_decide_membership(principal, club)


def can_leave_membership(principal: Principal, membership: ClubMembership) -> bool:
    """Members may always remove their own row, whatever its status."""
    return membership.user_id == principal.id or principal.is_admin


# --- events ----------------------------------------------------------------


def can_create_event(
    principal: Principal,
    club: Club,
    membership: ClubMembership | None,
) -> bool:
    """Requires a creator role *and* club ownership or approved club-admin membership."""
    if not can_create_clubs_or_events(principal.role):
        return False
    return club.creator_id == principal.id or _is_approved_club_admin(membership)


def can_manage_event(principal: Principal, event: Event, club: Club) -> bool:
    return principal.is_admin or principal.id in {event.creator_id, club.creator_id}


def can_view_registrations(principal: Principal, event: Event, club: Club) -> bool:
    return can_manage_event(principal, event, club)


# --- flags -----------------------------------------------------------------


def can_flag(principal: Principal | None) -> bool:
    return principal is not None


def can_review_flag(principal: Principal, owner_ids: Iterable[uuid.UUID]) -> bool:
    """Owners of the flagged entity or a platform admin."""
    return principal.is_admin or principal.id in set(owner_ids)


def can_delete_flagged_entity(
    principal: Principal,
    entity_type: EntityType,
    owner_ids: Iterable[uuid.UUID],
) -> bool:
    """Clubs are only hard-deleted by admins; event owners may remove their events."""
    if principal.is_admin:
        return True
    if entity_type is EntityType.CLUB:
        return False
    return principal.id in set(owner_ids)


# --- roles and audit -------------------------------------------------------


def can_change_role(principal: Principal, target_id: uuid.UUID, new_role: UserRole) -> bool:
    """Admins change other principals' roles; nobody changes their own."""
    return principal.is_admin and target_id != principal.id and isinstance(new_role, UserRole)


def can_view_moderation_log(principal: Principal) -> bool:
    return principal.is_admin


# --- announcements ---------------------------------------------------------


def can_post_announcement(
    principal: Principal,
    club: Club,
    membership: ClubMembership | None,
) -> bool:
    """Admins, the club creator, club admins, or leaders who are approved members."""
    if principal.is_admin or club.creator_id == principal.id:
        return True
    if membership is None or membership.status is not MembershipStatus.APPROVED:
        return False
    return membership.role is MemberRole.ADMIN or principal.role is UserRole.STUDENT_LEADER


def can_manage_announcement(
    principal: Principal,
    announcement: ClubAnnouncement,
    club: Club,
) -> bool:
    return principal.is_admin or principal.id in {announcement.creator_id, club.creator_id}
