"""Aggregate counts for the admin dashboard."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_connect.core.errors import Forbidden
from campus_connect.db.time import utcnow
from campus_connect.models import Club, Flag
from campus_connect.models.enums import ApprovalStatus, EntityType, FlagStatus
from campus_connect.services import audit
from campus_connect.services.role_registry import resolve_principal

RECENT_ACTIVITY_LIMIT = 10


def _flag_counts(db: Session, entity_type: EntityType | None) -> dict[str, int]:
    stmt = select(Flag.status, func.count(Flag.id)).group_by(Flag.status)
    if entity_type is not None:
        stmt = stmt.where(Flag.entity_type == entity_type)
    counts = {status.value: 0 for status in FlagStatus}
    for status, count in db.execute(stmt).all():
        counts[status.value] = int(count)
    counts["total"] = sum(counts.values())
    return counts


def _club_counts(db: Session) -> dict[str, Any]:
    stmt = select(Club.approval_status, func.count(Club.id)).group_by(Club.approval_status)
    counts = {status.value: 0 for status in ApprovalStatus}
    for status, count in db.execute(stmt).all():
        counts[status.value] = int(count)
    total = sum(counts.values())
    decided = counts[ApprovalStatus.APPROVED.value] + counts[ApprovalStatus.REJECTED.value]
    rate = counts[ApprovalStatus.APPROVED.value] / decided * 100 if decided else 0.0
    return {**counts, "total": total, "approval_rate": f"{rate:.1f}%"}


def get_admin_stats(db: Session, actor_id: uuid.UUID) -> dict[str, Any]:
    """Return moderation counters and the latest log entries.

    Raises:
        Forbidden: Unless the actor is a platform admin.
    """
    principal = resolve_principal(db, actor_id)
    if not principal.is_admin:
        raise Forbidden("Only admins can view moderation statistics")

    event_flags = _flag_counts(db, EntityType.EVENT)
    club_flags = _flag_counts(db, EntityType.CLUB)
    combined = _flag_counts(db, None)
    clubs = _club_counts(db)
    pending_flags = combined[FlagStatus.PENDING.value]
    pending_clubs = clubs[ApprovalStatus.PENDING.value]

    return {
        "summary": {
            "total_pending_items": pending_flags + pending_clubs,
            "pending_flags": pending_flags,
            "pending_clubs": pending_clubs,
            "requires_attention": pending_flags + pending_clubs > 0,
        },
        "flags": {
            "event_flags": event_flags,
            "club_flags": club_flags,
            "combined": combined,
        },
        "clubs": clubs,
        "recent_activity": audit.query(db, limit=RECENT_ACTIVITY_LIMIT),
        "fetched_at": utcnow(),
    }
