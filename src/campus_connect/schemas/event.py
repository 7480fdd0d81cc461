"""Event-related Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from campus_connect.models.enums import EventCategory


class EventCreate(BaseModel):
    """Schema for creating an event.

    Paid events (``is_free`` false) must carry a positive price.
    """

    club_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    event_date: datetime
    location: str | None = Field(None, max_length=500)
    category: EventCategory | None = None
    is_free: bool = True
    price: float | None = Field(None, ge=0)


class EventUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    event_date: datetime | None = None
    location: str | None = Field(None, max_length=500)
    category: EventCategory | None = None
    is_free: bool | None = None
    price: float | None = Field(None, ge=0)

    @model_validator(mode="after")
    def _required_not_null(self) -> "EventUpdate":
        for name in ("title", "event_date", "is_free"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class EventResponse(BaseModel):
    """Schema for event information returned by the API."""

    id: uuid.UUID
    title: str
    description: str | None
    event_date: datetime
    location: str | None
    club_id: uuid.UUID
    creator_id: uuid.UUID
    category: EventCategory | None
    is_free: bool
    price: float | None
    created_at: datetime
    updated_at: datetime
    registration_count: int | None = None

    model_config = ConfigDict(from_attributes=True)


class RegistrationResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    registered_at: datetime

    model_config = ConfigDict(from_attributes=True)
