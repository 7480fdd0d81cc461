"""SQLAlchemy model for user-submitted flags on clubs and events."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from campus_connect.db.session import Base
from campus_connect.db.time import utcnow
from campus_connect.models.enums import EntityType, FlagReason, FlagStatus, enum_values


class Flag(Base):
    """A report against a club or an event.

    ``entity_id`` is polymorphic and carries no foreign key; the entity store
    removes flags when the flagged entity is deleted.
    """

    __tablename__ = "flags"
    __table_args__ = (
        UniqueConstraint(
            "entity_type", "entity_id", "reporter_id", name="uq_flags_entity_reporter"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_type: Mapped[EntityType] = mapped_column(
        Enum(EntityType, name="flag_entity_type", values_callable=enum_values),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reason: Mapped[FlagReason] = mapped_column(
        Enum(FlagReason, name="flag_reason", values_callable=enum_values),
        nullable=False,
    )
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[FlagStatus] = mapped_column(
        Enum(FlagStatus, name="flag_status", values_callable=enum_values),
        nullable=False,
        default=FlagStatus.PENDING,
        index=True,
    )
    # Set together, and only once the flag leaves pending.
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
