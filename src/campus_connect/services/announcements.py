"""Club announcements.

Posting is open to platform admins, the club creator, approved club admins
and student leaders holding an approved membership. Editing and deleting are
limited to the author, the club creator and platform admins.
"""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_connect.core.errors import InvalidArgument, NotFound
from campus_connect.models import ClubAnnouncement
from campus_connect.services import entity_store
from campus_connect.services.authorization import (
    authorize,
    can_manage_announcement,
    can_post_announcement,
)
from campus_connect.services.role_registry import resolve_principal
from campus_connect.services.transaction import atomic

TITLE_MAX = 200
CONTENT_MAX = 5000


def _validated(title: str, content: str) -> tuple[str, str]:
    title = (title or "").strip()
    content = (content or "").strip()
    if not 1 <= len(title) <= TITLE_MAX:
        raise InvalidArgument(f"Title must be between 1 and {TITLE_MAX} characters")
    if not 1 <= len(content) <= CONTENT_MAX:
        raise InvalidArgument(f"Content must be between 1 and {CONTENT_MAX} characters")
    return title, content


def get_announcement(
    db: Session,
    club_id: uuid.UUID,
    announcement_id: uuid.UUID,
) -> ClubAnnouncement:
    announcement = db.get(ClubAnnouncement, announcement_id)
    if announcement is None or announcement.club_id != club_id:
        raise NotFound("Announcement not found")
    return announcement


def list_announcements(db: Session, club_id: uuid.UUID) -> list[ClubAnnouncement]:
    stmt = (
        select(ClubAnnouncement)
        .where(ClubAnnouncement.club_id == club_id)
        .order_by(ClubAnnouncement.created_at.desc())
    )
    return list(db.scalars(stmt))


def create_announcement(
    db: Session,
    actor_id: uuid.UUID,
    club_id: uuid.UUID,
    title: str,
    content: str,
) -> ClubAnnouncement:
    with atomic(db):
        principal = resolve_principal(db, actor_id)
        club = entity_store.get_club(db, club_id)
        membership = entity_store.find_membership(db, club.id, principal.id)
        authorize(
            can_post_announcement(principal, club, membership),
            "You do not have permission to post announcements for this club",
        )
        title, content = _validated(title, content)
        announcement = ClubAnnouncement(
            club_id=club.id,
            creator_id=principal.id,
            title=title,
            content=content,
        )
        db.add(announcement)
        db.flush()
    return announcement


def update_announcement(
    db: Session,
    actor_id: uuid.UUID,
    club_id: uuid.UUID,
    announcement_id: uuid.UUID,
    title: str,
    content: str,
) -> ClubAnnouncement:
    with atomic(db):
        principal = resolve_principal(db, actor_id)
        announcement = get_announcement(db, club_id, announcement_id)
        club = entity_store.get_club(db, club_id)
        authorize(
            can_manage_announcement(principal, announcement, club),
            "You do not have permission to update this announcement",
        )
        announcement.title, announcement.content = _validated(title, content)
        db.flush()
    return announcement


def delete_announcement(
    db: Session,
    actor_id: uuid.UUID,
    club_id: uuid.UUID,
    announcement_id: uuid.UUID,
) -> None:
    with atomic(db):
        principal = resolve_principal(db, actor_id)
        announcement = get_announcement(db, club_id, announcement_id)
        club = entity_store.get_club(db, club_id)
        authorize(
            can_manage_announcement(principal, announcement, club),
            "You do not have permission to delete this announcement",
        )
        db.delete(announcement)
