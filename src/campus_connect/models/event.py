"""SQLAlchemy models for club events and registrations."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_connect.db.session import Base
from campus_connect.db.time import utcnow
from campus_connect.models.enums import EntityType, EventCategory, enum_values

if TYPE_CHECKING:
    from campus_connect.models.club import Club


class Event(Base):
    """An event hosted by a club."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "is_free OR (price IS NOT NULL AND price > 0)",
            name="ck_events_paid_requires_price",
        ),
    )

    entity_type = EntityType.EVENT

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clubs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category: Mapped[EventCategory | None] = mapped_column(
        Enum(EventCategory, name="event_category", values_callable=enum_values),
        nullable=True,
    )
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    club: Mapped[Club] = relationship("Club", back_populates="events")
    registrations: Mapped[list[EventRegistration]] = relationship(
        "EventRegistration",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    @property
    def moderation_label(self) -> str:
        """Human-readable name recorded in moderation log entries."""
        return self.title

    def owner_ids(self) -> set[uuid.UUID]:
        """The event creator and the hosting club's creator."""
        return {self.creator_id, self.club.creator_id}


class EventRegistration(Base):
    """A principal's registration for an event."""

    __tablename__ = "event_registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_registrations_event_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    event: Mapped[Event] = relationship("Event", back_populates="registrations")
