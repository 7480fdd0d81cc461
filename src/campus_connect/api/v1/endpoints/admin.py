# src/campus_connect/api/v1/endpoints/admin.py
"""Admin moderation endpoints: club approval, flag queue, audit log and stats."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Query

from campus_connect.models.enums import (
    ClubScope,
    ClubSort,
    EntityType,
    FlagStatus,
    ModerationAction,
)
from campus_connect.schemas.club import ClubReject, ClubResponse, ClubTransition
from campus_connect.schemas.flag import FlagResponse
from campus_connect.schemas.moderation import AdminStatsResponse, ModerationLogResponse
from campus_connect.services import authorization as gate
from campus_connect.services import entity_store, stats
from campus_connect.services.moderation import ModerationEngine

from ..dependencies import PrincipalDep, SessionDep

router = APIRouter(prefix="/admin", tags=["admin"])

_ADMIN_ONLY = "Admin access required"


@router.post("/clubs/{club_id}/approve", response_model=ClubResponse)
async def approve_club(
    club_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
    payload: ClubTransition | None = None,
) -> ClubResponse:
    """Approve a pending club. Approving an approved club is a no-op."""
    gate.authorize(gate.can_moderate_clubs(principal), _ADMIN_ONLY)
    expected = payload.expected_status if payload else None
    club = ModerationEngine.approve_club(db, principal.id, club_id, expected_status=expected)
    return ClubResponse.model_validate(club)


@router.post("/clubs/{club_id}/reject", response_model=ClubResponse)
async def reject_club(
    club_id: uuid.UUID,
    payload: ClubReject,
    principal: PrincipalDep,
    db: SessionDep,
) -> ClubResponse:
    gate.authorize(gate.can_moderate_clubs(principal), _ADMIN_ONLY)
    club = ModerationEngine.reject_club(
        db,
        principal.id,
        club_id,
        payload.reason,
        expected_status=payload.expected_status,
    )
    return ClubResponse.model_validate(club)


def _clubs_in_scope(db: SessionDep, principal: PrincipalDep, scope: ClubScope) -> list[ClubResponse]:
    gate.authorize(gate.can_moderate_clubs(principal), _ADMIN_ONLY)
    rows = entity_store.list_clubs(db, principal, scope=scope, sort=ClubSort.OLDEST)
    return [
        ClubResponse.model_validate(club).model_copy(update={"member_count": count})
        for club, count in rows
    ]


@router.get("/clubs/pending", response_model=list[ClubResponse])
async def list_pending_clubs(principal: PrincipalDep, db: SessionDep) -> list[ClubResponse]:
    return _clubs_in_scope(db, principal, ClubScope.PENDING)


@router.get("/clubs/rejected", response_model=list[ClubResponse])
async def list_rejected_clubs(principal: PrincipalDep, db: SessionDep) -> list[ClubResponse]:
    return _clubs_in_scope(db, principal, ClubScope.REJECTED)


@router.get("/flags", response_model=list[FlagResponse])
async def list_flags(
    principal: PrincipalDep,
    db: SessionDep,
    status: FlagStatus | None = Query(None),
    entity_type: EntityType | None = Query(None),
) -> list[FlagResponse]:
    gate.authorize(gate.can_moderate_clubs(principal), _ADMIN_ONLY)
    flags = entity_store.list_flags(db, status=status, entity_type=entity_type)
    return [FlagResponse.model_validate(f) for f in flags]


@router.get("/logs", response_model=list[ModerationLogResponse])
async def list_moderation_log(
    principal: PrincipalDep,
    db: SessionDep,
    entity_type: EntityType | None = Query(None),
    entity_id: uuid.UUID | None = Query(None),
    admin_id: uuid.UUID | None = Query(None),
    action: ModerationAction | None = Query(None),
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
) -> list[ModerationLogResponse]:
    """Read the moderation log, newest first."""
    gate.authorize(gate.can_view_moderation_log(principal), _ADMIN_ONLY)
    entries = ModerationEngine.list_moderation_log(
        db,
        principal.id,
        entity_type=entity_type,
        entity_id=entity_id,
        admin_id=admin_id,
        action=action,
        limit=limit,
        offset=offset,
    )
    return [ModerationLogResponse.model_validate(e) for e in entries]


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(principal: PrincipalDep, db: SessionDep) -> dict[str, Any]:
    gate.authorize(gate.can_view_moderation_log(principal), _ADMIN_ONLY)
    data = stats.get_admin_stats(db, principal.id)
    data["recent_activity"] = [
        ModerationLogResponse.model_validate(e) for e in data["recent_activity"]
    ]
    return data
