"""Append-only audit log of moderation actions."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_connect.core.errors import Internal
from campus_connect.core.settings import settings
from campus_connect.models import ModerationLogEntry
from campus_connect.models.enums import EntityType, ModerationAction

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (ModerationLogEntry.created_at.desc(), ModerationLogEntry.id.desc())


def _clamp_limit(limit: int | None) -> int:
    if limit is None:
        return settings.default_page_size
    return max(1, min(limit, settings.moderation_log_max_limit))


def append(
    db: Session,
    *,
    admin_id: uuid.UUID,
    action: ModerationAction,
    entity_type: EntityType,
    entity_id: uuid.UUID,
    details: dict[str, Any] | None = None,
) -> ModerationLogEntry:
    """Insert an entry inside the caller's transaction.

    The row is flushed immediately so that a failed write surfaces here and
    the surrounding ``atomic`` block rolls back the transition it records.

    Raises:
        Internal: If the insert fails.
    """
    entry = ModerationLogEntry(
        admin_id=admin_id,
        action=action.value,
        entity_type=entity_type.value,
        entity_id=entity_id,
        details=details or {},
    )
    try:
        db.add(entry)
        db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to append moderation log entry %s", action.value, exc_info=True)
        raise Internal() from exc
    logger.info(
        "moderation action=%s entity=%s:%s actor=%s",
        action.value,
        entity_type.value,
        entity_id,
        admin_id,
    )
    return entry


def query_by_entity(
    db: Session,
    entity_type: EntityType,
    entity_id: uuid.UUID,
) -> list[ModerationLogEntry]:
    stmt = (
        select(ModerationLogEntry)
        .where(
            ModerationLogEntry.entity_type == entity_type.value,
            ModerationLogEntry.entity_id == entity_id,
        )
        .order_by(*_NEWEST_FIRST)
    )
    return list(db.scalars(stmt))


def query_by_admin(
    db: Session,
    admin_id: uuid.UUID,
    limit: int | None = None,
) -> list[ModerationLogEntry]:
    stmt = (
        select(ModerationLogEntry)
        .where(ModerationLogEntry.admin_id == admin_id)
        .order_by(*_NEWEST_FIRST)
        .limit(_clamp_limit(limit))
    )
    return list(db.scalars(stmt))


def query(
    db: Session,
    *,
    entity_type: EntityType | None = None,
    entity_id: uuid.UUID | None = None,
    admin_id: uuid.UUID | None = None,
    action: ModerationAction | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[ModerationLogEntry]:
    """Return entries matching every supplied filter, newest first."""
    stmt = select(ModerationLogEntry)
    if entity_type is not None:
        stmt = stmt.where(ModerationLogEntry.entity_type == entity_type.value)
    if entity_id is not None:
        stmt = stmt.where(ModerationLogEntry.entity_id == entity_id)
    if admin_id is not None:
        stmt = stmt.where(ModerationLogEntry.admin_id == admin_id)
    if action is not None:
        stmt = stmt.where(ModerationLogEntry.action == action.value)
    stmt = stmt.order_by(*_NEWEST_FIRST).limit(_clamp_limit(limit)).offset(max(offset, 0))
    return list(db.scalars(stmt))


__all__ = ["append", "query_by_entity", "query_by_admin", "query"]
