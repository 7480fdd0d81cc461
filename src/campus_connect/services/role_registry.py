"""Role resolution for principals."""
from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_connect.core.errors import NotFound
from campus_connect.models.enums import UserRole
from campus_connect.models.user import Profile

__all__ = [
    "Principal",
    "resolve_role",
    "resolve_principal",
    "can_create_clubs_or_events",
    "is_admin_role",
]

_CREATOR_ROLES = frozenset({UserRole.STUDENT_LEADER, UserRole.ADMIN})


@dataclass(frozen=True)
class Principal:
    """Authenticated identity together with its resolved role."""

    id: uuid.UUID
    role: UserRole = UserRole.STUDENT

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)

    @classmethod
    def from_profile(cls, profile: Profile) -> Principal:
        return cls(id=profile.id, role=profile.effective_role)


def resolve_role(db: Session, principal_id: uuid.UUID) -> UserRole:
    """Return the principal's role, defaulting to ``student`` when unset.

    Raises:
        NotFound: If no profile exists for ``principal_id``.
    """
    row = db.execute(
        select(Profile.id, Profile.role).where(Profile.id == principal_id)
    ).first()
    if row is None:
        raise NotFound("Profile not found")
    return row.role or UserRole.STUDENT


def resolve_principal(db: Session, principal_id: uuid.UUID) -> Principal:
    """Build a ``Principal`` from the role currently stored for ``principal_id``."""
    return Principal(id=principal_id, role=resolve_role(db, principal_id))


def can_create_clubs_or_events(role: UserRole) -> bool:
    """Student leaders and admins may create clubs and events."""
    return role in _CREATOR_ROLES


def is_admin_role(role: UserRole) -> bool:
    return role is UserRole.ADMIN
