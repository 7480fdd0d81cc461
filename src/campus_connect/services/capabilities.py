"""Capabilities shared by the entity kinds the moderation engine works on.

Clubs and events are both flaggable; only clubs go through approval. The
engine looks entity classes up here by ``EntityType`` so each state machine is
implemented once for every kind that supports it.
"""

from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from campus_connect.core.errors import InvalidArgument
from campus_connect.models import Club, Event
from campus_connect.models.enums import ApprovalStatus, EntityType


@runtime_checkable
class Flaggable(Protocol):
    """An entity users may report."""

    id: uuid.UUID
    entity_type: EntityType

    @property
    def moderation_label(self) -> str: ...

    def owner_ids(self) -> set[uuid.UUID]: ...


@runtime_checkable
class Approvable(Protocol):
    """An entity whose visibility depends on admin approval."""

    id: uuid.UUID
    entity_type: EntityType
    creator_id: uuid.UUID
    approval_status: ApprovalStatus
    rejection_reason: str | None

    @property
    def moderation_label(self) -> str: ...


FLAGGABLE: dict[EntityType, type[Club] | type[Event]] = {
    EntityType.CLUB: Club,
    EntityType.EVENT: Event,
}

APPROVABLE: dict[EntityType, type[Club]] = {
    EntityType.CLUB: Club,
}


def flaggable_model(entity_type: EntityType) -> type[Club] | type[Event]:
    try:
        return FLAGGABLE[entity_type]
    except KeyError:
        raise InvalidArgument(f"{entity_type.value} entities cannot be flagged") from None


def approvable_model(entity_type: EntityType) -> type[Club]:
    try:
        return APPROVABLE[entity_type]
    except KeyError:
        raise InvalidArgument(f"{entity_type.value} entities do not require approval") from None


__all__ = ["Flaggable", "Approvable", "FLAGGABLE", "APPROVABLE", "flaggable_model", "approvable_model"]
