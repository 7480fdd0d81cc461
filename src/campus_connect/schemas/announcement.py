"""Club announcement Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnnouncementWrite(BaseModel):
    """Body for creating or replacing an announcement."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)


class AnnouncementResponse(BaseModel):
    id: uuid.UUID
    club_id: uuid.UUID
    creator_id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
