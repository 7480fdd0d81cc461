"""SQLAlchemy models for clubs and their memberships."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_connect.db.session import Base
from campus_connect.db.time import utcnow
from campus_connect.models.enums import (
    ApprovalStatus,
    EntityType,
    MemberRole,
    MembershipStatus,
    enum_values,
)

if TYPE_CHECKING:
    from campus_connect.models.announcement import ClubAnnouncement
    from campus_connect.models.event import Event


class Club(Base):
    """A student organization subject to the approval workflow."""

    __tablename__ = "clubs"

    entity_type = EntityType.CLUB

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus, name="approval_status", values_callable=enum_values),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Non-null if and only if approval_status is rejected.
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    memberships: Mapped[list[ClubMembership]] = relationship(
        "ClubMembership",
        back_populates="club",
        cascade="all, delete-orphan",
    )
    events: Mapped[list[Event]] = relationship(
        "Event",
        back_populates="club",
        cascade="all, delete-orphan",
    )
    announcements: Mapped[list[ClubAnnouncement]] = relationship(
        "ClubAnnouncement",
        back_populates="club",
        cascade="all, delete-orphan",
    )

    @property
    def moderation_label(self) -> str:
        """Human-readable name recorded in moderation log entries."""
        return self.name

    def owner_ids(self) -> set[uuid.UUID]:
        """Principals that own this club for flag review purposes."""
        return {self.creator_id}


class ClubMembership(Base):
    """Membership of a principal in a club."""

    __tablename__ = "club_members"
    __table_args__ = (UniqueConstraint("club_id", "user_id", name="uq_club_members_club_user"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    club_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clubs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole, name="member_role", values_callable=enum_values),
        nullable=False,
        default=MemberRole.MEMBER,
    )
    status: Mapped[MembershipStatus] = mapped_column(
        Enum(MembershipStatus, name="membership_status", values_callable=enum_values),
        nullable=False,
        default=MembershipStatus.PENDING,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    club: Mapped[Club] = relationship("Club", back_populates="memberships")

    @property
    def is_approved_club_admin(self) -> bool:
        """True for approved members holding the club-admin role."""
        return self.role is MemberRole.ADMIN and self.status is MembershipStatus.APPROVED
