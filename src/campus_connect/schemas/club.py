"""Club-related Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from campus_connect.models.enums import ApprovalStatus


class ClubCreate(BaseModel):
    """Schema for submitting a new club.

    ``approval_status`` is only honoured for admins; everyone else starts
    pending regardless of what they send.
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    approval_status: ApprovalStatus | None = Field(
        None, description="Initial status requested by an admin (pending or approved)"
    )


class ClubUpdate(BaseModel):
    """Partial update of a club.

    Extra keys are kept so the service can tell protected lifecycle fields
    (refused) apart from unknown ones (invalid).
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _name_not_null(self) -> "ClubUpdate":
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ClubTransition(BaseModel):
    """Optional optimistic-concurrency guard for approval transitions."""

    expected_status: ApprovalStatus | None = None


class ClubReject(ClubTransition):
    reason: str = Field(..., min_length=1, max_length=500)


class ClubResponse(BaseModel):
    """Schema for club information returned by the API."""

    id: uuid.UUID
    name: str
    description: str | None
    creator_id: uuid.UUID
    approval_status: ApprovalStatus
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    rejection_reason: str | None
    created_at: datetime
    updated_at: datetime
    member_count: int | None = None

    model_config = ConfigDict(from_attributes=True)
