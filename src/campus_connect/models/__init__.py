# src/campus_connect/models/__init__.py
"""SQLAlchemy models for the Campus Connect application."""

from .announcement import ClubAnnouncement
from .club import Club, ClubMembership
from .event import Event, EventRegistration
from .flag import Flag
from .moderation import ModerationLogEntry
from .user import Profile

__all__ = [
    "Club", "ClubMembership",
    "ClubAnnouncement",
    "Event", "EventRegistration",
    "Flag",
    "ModerationLogEntry",
    "Profile",
]
