"""Event registration helpers."""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_connect.core.errors import AlreadyExists, Forbidden, NotFound
from campus_connect.models import EventRegistration
from campus_connect.services import entity_store
from campus_connect.services.role_registry import resolve_principal
from campus_connect.services.transaction import atomic

__all__ = [
    "register",
    "cancel_registration",
    "list_registrations",
    "find_registration",
]


def find_registration(
    db: Session,
    event_id: uuid.UUID,
    user_id: uuid.UUID,
) -> EventRegistration | None:
    stmt = select(EventRegistration).where(
        EventRegistration.event_id == event_id,
        EventRegistration.user_id == user_id,
    )
    return db.scalars(stmt).first()


def register(db: Session, user_id: uuid.UUID, event_id: uuid.UUID) -> EventRegistration:
    """Register ``user_id`` for an event of a club they can see."""
    with atomic(db):
        principal = resolve_principal(db, user_id)
        event = entity_store.get_event(db, event_id)
        if not entity_store.is_club_visible(principal, event.club):
            raise NotFound("Event not found")
        if find_registration(db, event.id, principal.id) is not None:
            raise AlreadyExists("Already registered for this event")
        registration = EventRegistration(event_id=event.id, user_id=principal.id)
        db.add(registration)
        try:
            db.flush()
        except IntegrityError as exc:
            raise AlreadyExists("Already registered for this event") from exc
    return registration


def cancel_registration(db: Session, user_id: uuid.UUID, event_id: uuid.UUID) -> None:
    with atomic(db):
        registration = find_registration(db, event_id, user_id)
        if registration is None:
            raise NotFound("Registration not found")
        db.delete(registration)


def list_registrations(
    db: Session,
    actor_id: uuid.UUID,
    event_id: uuid.UUID,
) -> list[EventRegistration]:
    """Registrations are visible to the event owners and platform admins."""
    principal = resolve_principal(db, actor_id)
    event = entity_store.get_event(db, event_id)
    if not (principal.is_admin or principal.id in event.owner_ids()):
        raise Forbidden("Only the event owners or an admin can view registrations")
    stmt = (
        select(EventRegistration)
        .where(EventRegistration.event_id == event.id)
        .order_by(EventRegistration.registered_at.asc())
    )
    return list(db.scalars(stmt))
