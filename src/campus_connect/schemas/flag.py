"""Flag-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from campus_connect.models.enums import EntityType, FlagReason, FlagStatus


class FlagCreate(BaseModel):
    """Schema for reporting a club or an event."""

    reason: FlagReason
    details: str | None = Field(None, max_length=1000)


class FlagReview(BaseModel):
    """Move a flag to ``reviewed``, ``resolved`` or ``dismissed``."""

    status: FlagStatus
    notes: str | None = Field(None, max_length=1000)
    expected_status: FlagStatus | None = None


class FlagResponse(BaseModel):
    id: uuid.UUID
    entity_type: EntityType
    entity_id: uuid.UUID
    reporter_id: uuid.UUID
    reason: FlagReason
    details: str | None
    status: FlagStatus
    reviewed_by: uuid.UUID | None
    reviewed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
