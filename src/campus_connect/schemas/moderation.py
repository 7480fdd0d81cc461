"""Moderation log and dashboard Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ModerationLogResponse(BaseModel):
    """A single entry of the append-only moderation log."""

    id: int
    admin_id: uuid.UUID
    action: str
    entity_type: str
    entity_id: uuid.UUID
    details: dict[str, Any] | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FlagCounts(BaseModel):
    total: int
    pending: int
    reviewed: int
    resolved: int
    dismissed: int


class FlagStats(BaseModel):
    event_flags: FlagCounts
    club_flags: FlagCounts
    combined: FlagCounts


class ClubStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    approval_rate: str


class StatsSummary(BaseModel):
    total_pending_items: int
    pending_flags: int
    pending_clubs: int
    requires_attention: bool


class AdminStatsResponse(BaseModel):
    summary: StatsSummary
    flags: FlagStats
    clubs: ClubStats
    recent_activity: list[ModerationLogResponse]
    fetched_at: datetime
