# src/campus_connect/models/user.py
"""SQLAlchemy model for principal profiles."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from campus_connect.db.session import Base
from campus_connect.db.time import utcnow
from campus_connect.models.enums import UserRole, enum_values


class Profile(Base):
    """An authenticated identity with exactly one platform role."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    # Nullable so that legacy rows without a role resolve to the default.
    role: Mapped[UserRole | None] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        nullable=True,
        default=UserRole.STUDENT,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def effective_role(self) -> UserRole:
        """Return the stored role, falling back to ``student`` when unset."""
        return self.role or UserRole.STUDENT

    @property
    def is_admin(self) -> bool:
        """Derived at read time from ``role``; never stored."""
        return self.effective_role is UserRole.ADMIN
