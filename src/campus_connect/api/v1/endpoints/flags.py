"""Flag review endpoints shared by clubs and events."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from campus_connect.schemas.common import Message
from campus_connect.schemas.flag import FlagResponse, FlagReview
from campus_connect.services import authorization as gate
from campus_connect.services import entity_store
from campus_connect.services.moderation import ModerationEngine

from ..dependencies import PrincipalDep, SessionDep

router = APIRouter(prefix="/flags", tags=["flags"])


@router.patch("/{flag_id}", response_model=FlagResponse)
async def review_flag(
    flag_id: uuid.UUID,
    payload: FlagReview,
    principal: PrincipalDep,
    db: SessionDep,
) -> FlagResponse:
    """Move a flag to reviewed, resolved or dismissed."""
    flag = entity_store.get_flag(db, flag_id)
    entity = entity_store.get_flagged_entity(db, flag.entity_type, flag.entity_id)
    gate.authorize(
        gate.can_review_flag(principal, entity.owner_ids()),
        "Only the content owners or an admin can review this flag",
    )
    flag = ModerationEngine.review_flag(
        db,
        principal.id,
        flag_id,
        payload.status,
        notes=payload.notes,
        expected_status=payload.expected_status,
    )
    return FlagResponse.model_validate(flag)


@router.delete("/{flag_id}", response_model=Message)
async def close_flag(
    flag_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
    delete_entity: bool = Query(False, description="Delete the flagged club or event"),
) -> Message:
    """Dismiss a flag, or delete the flagged entity outright."""
    flag = entity_store.get_flag(db, flag_id)
    entity_type = flag.entity_type
    entity = entity_store.get_flagged_entity(db, entity_type, flag.entity_id)
    owners = entity.owner_ids()
    if delete_entity:
        gate.authorize(
            gate.can_delete_flagged_entity(principal, entity_type, owners),
            f"You do not have permission to delete this {entity_type.value}",
        )
        ModerationEngine.delete_flagged_entity(db, principal.id, flag_id)
        return Message(message=f"Flagged {entity_type.value} deleted")

    gate.authorize(
        gate.can_review_flag(principal, owners),
        "Only the content owners or an admin can dismiss this flag",
    )
    ModerationEngine.dismiss_flag(db, principal.id, flag_id)
    return Message(message="Flag dismissed")
