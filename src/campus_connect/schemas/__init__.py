# src/campus_connect/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .announcement import AnnouncementResponse, AnnouncementWrite
from .club import ClubCreate, ClubReject, ClubResponse, ClubTransition, ClubUpdate
from .common import Message
from .event import EventCreate, EventResponse, EventUpdate, RegistrationResponse
from .flag import FlagCreate, FlagResponse, FlagReview
from .membership import MembershipDecisionRequest, MembershipResponse
from .moderation import AdminStatsResponse, ModerationLogResponse
from .user import (
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    RoleUpdateRequest,
    TokenResponse,
)

__all__ = [
    "AnnouncementResponse", "AnnouncementWrite",
    "ClubCreate", "ClubReject", "ClubResponse", "ClubTransition", "ClubUpdate",
    "Message",
    "EventCreate", "EventResponse", "EventUpdate", "RegistrationResponse",
    "FlagCreate", "FlagResponse", "FlagReview",
    "MembershipDecisionRequest", "MembershipResponse",
    "AdminStatsResponse", "ModerationLogResponse",
    "LoginRequest", "ProfileResponse", "RegisterRequest", "RoleUpdateRequest", "TokenResponse",
]
