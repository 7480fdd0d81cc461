"""Membership-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from campus_connect.models.enums import MemberRole, MembershipDecision, MembershipStatus


class MembershipDecisionRequest(BaseModel):
    decision: MembershipDecision
    expected_status: MembershipStatus | None = None


class MembershipResponse(BaseModel):
    id: uuid.UUID
    club_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    status: MembershipStatus
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)
