"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class Message(BaseModel):
    """Plain acknowledgement returned by endpoints without a resource body."""

    message: str = Field(..., description="Human-readable outcome")
