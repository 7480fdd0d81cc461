# src/campus_connect/api/v1/endpoints/events.py
"""Event endpoints: CRUD, registrations and flags."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status

from campus_connect.core.errors import NotFound
from campus_connect.models import Event
from campus_connect.models.enums import EntityType, EventSort
from campus_connect.schemas.event import (
    EventCreate,
    EventResponse,
    EventUpdate,
    RegistrationResponse,
)
from campus_connect.schemas.flag import FlagCreate, FlagResponse
from campus_connect.services import authorization as gate
from campus_connect.services import entity_store, registrations
from campus_connect.services.moderation import ModerationEngine
from campus_connect.services.role_registry import Principal

from ..dependencies import OptionalPrincipalDep, PrincipalDep, SessionDep

router = APIRouter(prefix="/events", tags=["events"])


def _event_out(event: Event, registration_count: int | None = None) -> EventResponse:
    return EventResponse.model_validate(event).model_copy(
        update={"registration_count": registration_count}
    )


def _load_visible_event(
    db: SessionDep,
    principal: Principal | None,
    event_id: uuid.UUID,
) -> Event:
    event = entity_store.get_event(db, event_id)
    if not gate.can_view_club(principal, event.club):
        raise NotFound("Event not found")
    return event


@router.get("", response_model=list[EventResponse])
async def list_events(
    db: SessionDep,
    principal: OptionalPrincipalDep,
    sort: EventSort = Query(EventSort.DATE),
    club_id: uuid.UUID | None = Query(None),
) -> list[EventResponse]:
    rows = entity_store.list_events(db, principal, sort=sort, club_id=club_id)
    return [_event_out(event, count) for event, count in rows]


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    principal: PrincipalDep,
    db: SessionDep,
) -> EventResponse:
    """Create an event for a club the caller administers."""
    club = entity_store.get_club(db, payload.club_id)
    membership = entity_store.find_membership(db, club.id, principal.id)
    gate.authorize(
        gate.can_create_event(principal, club, membership),
        "Only student leaders who administer this club can create events",
    )
    event = ModerationEngine.create_event(
        db,
        principal.id,
        club_id=payload.club_id,
        title=payload.title,
        event_date=payload.event_date,
        description=payload.description,
        location=payload.location,
        category=payload.category,
        is_free=payload.is_free,
        price=payload.price,
    )
    return _event_out(event, 0)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: uuid.UUID,
    db: SessionDep,
    principal: OptionalPrincipalDep,
) -> EventResponse:
    event = _load_visible_event(db, principal, event_id)
    return _event_out(event, len(event.registrations))


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: uuid.UUID,
    payload: EventUpdate,
    principal: PrincipalDep,
    db: SessionDep,
) -> EventResponse:
    event = _load_visible_event(db, principal, event_id)
    gate.authorize(gate.can_manage_event(principal, event, event.club))
    event = ModerationEngine.update_event(db, principal.id, event_id, payload.changes())
    return _event_out(event)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: uuid.UUID, principal: PrincipalDep, db: SessionDep) -> Response:
    event = _load_visible_event(db, principal, event_id)
    gate.authorize(gate.can_manage_event(principal, event, event.club))
    ModerationEngine.delete_event(db, principal.id, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- registrations ---------------------------------------------------------


@router.post(
    "/{event_id}/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_for_event(
    event_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> RegistrationResponse:
    _load_visible_event(db, principal, event_id)
    registration = registrations.register(db, principal.id, event_id)
    return RegistrationResponse.model_validate(registration)


@router.delete("/{event_id}/register", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_registration(
    event_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> Response:
    registrations.cancel_registration(db, principal.id, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/registrations", response_model=list[RegistrationResponse])
async def list_registrations(
    event_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> list[RegistrationResponse]:
    event = _load_visible_event(db, principal, event_id)
    gate.authorize(
        gate.can_view_registrations(principal, event, event.club),
        "Only the event owners or an admin can view registrations",
    )
    return [
        RegistrationResponse.model_validate(r)
        for r in registrations.list_registrations(db, principal.id, event_id)
    ]


# --- flags -----------------------------------------------------------------


@router.post("/{event_id}/flag", response_model=FlagResponse, status_code=status.HTTP_201_CREATED)
async def flag_event(
    event_id: uuid.UUID,
    payload: FlagCreate,
    principal: PrincipalDep,
    db: SessionDep,
) -> FlagResponse:
    _load_visible_event(db, principal, event_id)
    gate.authorize(gate.can_flag(principal))
    flag = ModerationEngine.flag_entity(
        db, principal.id, EntityType.EVENT, event_id, payload.reason, payload.details
    )
    return FlagResponse.model_validate(flag)


@router.get("/{event_id}/flag", response_model=FlagResponse)
async def get_my_event_flag(
    event_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> FlagResponse:
    event = _load_visible_event(db, principal, event_id)
    flag = entity_store.find_flag(db, EntityType.EVENT, event.id, principal.id)
    if flag is None:
        raise NotFound("Flag not found")
    return FlagResponse.model_validate(flag)


@router.get("/{event_id}/flags", response_model=list[FlagResponse])
async def list_event_flags(
    event_id: uuid.UUID,
    principal: PrincipalDep,
    db: SessionDep,
) -> list[FlagResponse]:
    event = _load_visible_event(db, principal, event_id)
    gate.authorize(
        gate.can_review_flag(principal, event.owner_ids()),
        "Only the event owners or an admin can view flags",
    )
    flags = entity_store.list_flags(db, entity_type=EntityType.EVENT, entity_id=event.id)
    return [FlagResponse.model_validate(f) for f in flags]
