# src/campus_connect/api/v1/endpoints/clubs.py
"""Club endpoints: listing, lifecycle, membership, announcements and flags."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status

from campus_connect.core.errors import NotFound
from campus_connect.models import Club
from campus_connect.models.enums import (
    ClubScope,
    ClubSort,
    EntityType,
    MembershipStatus,
)
from campus_connect.schemas.announcement import AnnouncementResponse, AnnouncementWrite
from campus_connect.schemas.club import ClubCreate, ClubResponse, ClubTransition, ClubUpdate
from campus_connect.schemas.flag import FlagCreate, FlagResponse
from campus_connect.schemas.membership import MembershipResponse
from campus_connect.services import announcements, entity_store
from campus_connect.services import authorization as gate
from campus_connect.services.moderation import ModerationEngine
from campus_connect.services.role_registry import Principal

from ..dependencies import OptionalPrincipalDep, PrincipalDep, SessionDep

router = APIRouter(prefix="/clubs", tags=["clubs"])


def _club_out(club: Club, member_count: int | None = None) -> ClubResponse:
    return ClubResponse.model_validate(club).model_copy(update={"member_count": member_count})


def _load_visible_club(db: SessionDep, principal: Principal | None, club_id: uuid.UUID) -> Club:
    club = entity_store.get_club(db, club_id)
    if not gate.can_view_club(principal, club):
        raise NotFound("Club not found")
    return club


@router.get("", response_model=list[ClubResponse])
async def list_clubs(
    db: SessionDep,
    principal: OptionalPrincipalDep,
    scope: ClubScope = Query(ClubScope.PUBLIC),
    sort: ClubSort = Query(ClubSort.NAME),
) -> list[ClubResponse]:
    """List clubs the caller can see. Hidden clubs are filtered, not refused."""
    rows = entity_store.list_clubs(db, principal, scope=scope, sort=sort)
    return [_club_out(club, count) for club, count in rows]


@router.post("", response_model=ClubResponse, status_code=status.HTTP_201_CREATED)
async def create_club(
    payload: ClubCreate,
    principal: PrincipalDep,
    db: SessionDep,
) -> ClubResponse:
    gate.authorize(
        gate.can_create_club(principal),
        "Only student leaders and admins can create clubs",
    )
    club = ModerationEngine.create_club(
        db,
        principal.id,
        payload.name,
        payload.description,
        requested_status=payload.approval_status,
    )
    return _club_out(club, 1)


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(
    club_id: uuid.UUID,
    db: SessionDep,
    principal: OptionalPrincipalDep,
) -> ClubResponse:
    club = _load_visible_club(db, principal, club_id)
    members = entity_store.list_memberships(db, club.id, MembershipStatus.APPROVED)
    return _club_out(club, len(members))


@router.patch("/{club_id}", response_model=ClubResponse)
async def update_club(
    club_id: uuid.UUID,
    payload: ClubUpdate,
    principal: PrincipalDep,
    db: SessionDep,
) -> ClubResponse:
    """Edit name or description. Approval fields cannot be written here."""
    club = _load_visible_club(db, principal, club_id)
    gate.authorize(gate.can_update_club(principal, club), "Only the club creator can edit this club")
    club = ModerationEngine.update_club(db, principal.id, club_id, payload.changes())
    return _club_out(club)


@router.post("/{club_id}/resubmit", response_model=ClubResponse)
async def resubmit_club(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
    payload: ClubTransition | None = None,
) -> ClubResponse:
    club = _load_visible_club(db, principal, club_id)
    gate.authorize(
        gate.can_resubmit_club(principal, club),
        "Only the club creator can resubmit this club",
    )
    expected = payload.expected_status if payload else None
    club = ModerationEngine.resubmit_club(db, principal.id, club_id, expected_status=expected)
    return _club_out(club)


@router.delete("/{club_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_club(club_id: uuid.UUID, principal: PrincipalDep, db: SessionDep) -> Response:
    gate.authorize(gate.can_moderate_clubs(principal), "Only admins can delete clubs")
    ModerationEngine.delete_club(db, principal.id, club_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- membership ------------------------------------------------------------


@router.get("/{club_id}/members", response_model=list[MembershipResponse])
async def list_members(
    club_id: uuid.UUID,
    db: SessionDep,
    principal: OptionalPrincipalDep,
) -> list[MembershipResponse]:
    club = _load_visible_club(db, principal, club_id)
    members = entity_store.list_memberships(db, club.id, MembershipStatus.APPROVED)
    return [MembershipResponse.model_validate(m) for m in members]


@router.get("/{club_id}/membership", response_model=MembershipResponse)
async def get_my_membership(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> MembershipResponse:
    club = _load_visible_club(db, principal, club_id)
    membership = entity_store.find_membership(db, club.id, principal.id)
    if membership is None:
        raise NotFound("Membership not found")
    return MembershipResponse.model_validate(membership)


@router.post(
    "/{club_id}/membership",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_membership(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> MembershipResponse:
    club = _load_visible_club(db, principal, club_id)
    gate.authorize(gate.can_request_membership(principal, club))
    membership = ModerationEngine.request_membership(db, principal.id, club_id)
    return MembershipResponse.model_validate(membership)


@router.get("/{club_id}/membership/pending", response_model=list[MembershipResponse])
async def list_pending_memberships(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> list[MembershipResponse]:
    club = _load_visible_club(db, principal, club_id)
    gate.authorize(
        gate.can_view_membership_requests(principal, club),
        "Only the club creator can view membership requests",
    )
    pending = entity_store.list_memberships(db, club.id, MembershipStatus.PENDING)
    return [MembershipResponse.model_validate(m) for m in pending]


# --- announcements ---------------------------------------------------------


@router.get("/{club_id}/announcements", response_model=list[AnnouncementResponse])
async def list_announcements(
    club_id: uuid.UUID,
    db: SessionDep,
    principal: OptionalPrincipalDep,
) -> list[AnnouncementResponse]:
    club = _load_visible_club(db, principal, club_id)
    return [
        AnnouncementResponse.model_validate(a)
        for a in announcements.list_announcements(db, club.id)
    ]


@router.post(
    "/{club_id}/announcements",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_announcement(
    club_id: uuid.UUID,
    payload: AnnouncementWrite,
    principal: PrincipalDep,
    db: SessionDep,
) -> AnnouncementResponse:
    club = _load_visible_club(db, principal, club_id)
    membership = entity_store.find_membership(db, club.id, principal.id)
    gate.authorize(
        gate.can_post_announcement(principal, club, membership),
        "You do not have permission to post announcements for this club",
    )
    announcement = announcements.create_announcement(
        db, principal.id, club_id, payload.title, payload.content
    )
    return AnnouncementResponse.model_validate(announcement)


@router.patch("/{club_id}/announcements/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    club_id: uuid.UUID,
    announcement_id: uuid.UUID,
    payload: AnnouncementWrite,
    principal: PrincipalDep,
    db: SessionDep,
) -> AnnouncementResponse:
    club = _load_visible_club(db, principal, club_id)
    announcement = announcements.get_announcement(db, club.id, announcement_id)
    gate.authorize(gate.can_manage_announcement(principal, announcement, club))
    announcement = announcements.update_announcement(
        db, principal.id, club_id, announcement_id, payload.title, payload.content
    )
    return AnnouncementResponse.model_validate(announcement)


@router.delete(
    "/{club_id}/announcements/{announcement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_announcement(
    club_id: uuid.UUID,
    announcement_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> Response:
    club = _load_visible_club(db, principal, club_id)
    announcement = announcements.get_announcement(db, club.id, announcement_id)
    gate.authorize(gate.can_manage_announcement(principal, announcement, club))
    announcements.delete_announcement(db, principal.id, club_id, announcement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- flags -----------------------------------------------------------------


@router.post("/{club_id}/flag", response_model=FlagResponse, status_code=status.HTTP_201_CREATED)
async def flag_club(
    club_id: uuid.UUID,
    payload: FlagCreate,
    principal: PrincipalDep,
    db: SessionDep,
) -> FlagResponse:
    _load_visible_club(db, principal, club_id)
    gate.authorize(gate.can_flag(principal))
    flag = ModerationEngine.flag_entity(
        db, principal.id, EntityType.CLUB, club_id, payload.reason, payload.details
    )
    return FlagResponse.model_validate(flag)


@router.get("/{club_id}/flag", response_model=FlagResponse)
async def get_my_club_flag(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> FlagResponse:
    """Return the caller's own flag on this club, if any."""
    club = _load_visible_club(db, principal, club_id)
    flag = entity_store.find_flag(db, EntityType.CLUB, club.id, principal.id)
    if flag is None:
        raise NotFound("Flag not found")
    return FlagResponse.model_validate(flag)


@router.get("/{club_id}/flags", response_model=list[FlagResponse])
async def list_club_flags(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> list[FlagResponse]:
    club = _load_visible_club(db, principal, club_id)
    gate.authorize(
        gate.can_review_flag(principal, club.owner_ids()),
        "Only the club creator or an admin can view flags",
    )
    flags = entity_store.list_flags(db, entity_type=EntityType.CLUB, entity_id=club.id)
    return [FlagResponse.model_validate(f) for f in flags]
