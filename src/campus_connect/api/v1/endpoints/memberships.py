"""Membership decision and removal endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Response, status

from campus_connect.schemas.membership import MembershipDecisionRequest, MembershipResponse
from campus_connect.services import authorization as gate
from campus_connect.services import entity_store
from campus_connect.services.moderation import ModerationEngine

from ..dependencies import PrincipalDep, SessionDep

router = APIRouter(prefix="/memberships", tags=["memberships"])


@router.patch("/{membership_id}", response_model=MembershipResponse)
async def decide_membership(
    membership_id: uuid.UUID,
    payload: MembershipDecisionRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> MembershipResponse:
    """Approve or reject a pending membership request."""
    membership = entity_store.get_membership(db, membership_id)
    club = entity_store.get_club(db, membership.club_id)
    gate.authorize(
        gate.can_decide_membership(principal, club),
        "Only the club creator or an admin can decide memberships",
    )
    membership = ModerationEngine.decide_membership(
        db,
        principal.id,
        membership_id,
        payload.decision,
        expected_status=payload.expected_status,
    )
    return MembershipResponse.model_validate(membership)


@router.delete("/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
async def leave_club(
    membership_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> Response:
    """Remove a membership. Members can always remove their own."""
    membership = entity_store.get_membership(db, membership_id)
    gate.authorize(
        gate.can_leave_membership(principal, membership),
        "You can only remove your own membership",
    )
    ModerationEngine.leave_club(db, principal.id, membership_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
