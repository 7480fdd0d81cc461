"""Enumerations shared by the ORM models, schemas and services."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    """Platform-wide role of a principal."""

    STUDENT = "student"
    STUDENT_LEADER = "student_leader"
    ADMIN = "admin"


class ApprovalStatus(str, enum.Enum):
    """Approval lifecycle of a club."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MemberRole(str, enum.Enum):
    """Role of a member inside a single club."""

    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, enum.Enum):
    """Lifecycle of a membership request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MembershipDecision(str, enum.Enum):
    """Decision a club owner takes on a pending membership."""

    APPROVE = "approve"
    REJECT = "reject"


class FlagStatus(str, enum.Enum):
    """Lifecycle of a user-submitted flag."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class FlagReason(str, enum.Enum):
    """Reasons a reporter may pick when flagging content."""

    INAPPROPRIATE_CONTENT = "Inappropriate Content"
    SPAM = "Spam"
    MISINFORMATION = "Misinformation"
    OTHER = "Other"


class EventCategory(str, enum.Enum):
    """Categories an event can be filed under."""

    ACADEMIC = "Academic"
    SOCIAL = "Social"
    SPORTS = "Sports"
    ARTS = "Arts"
    CAREER = "Career"
    COMMUNITY_SERVICE = "Community Service"
    OTHER = "Other"


class EntityType(str, enum.Enum):
    """Kinds of entities referenced by flags and moderation log entries."""

    CLUB = "club"
    EVENT = "event"
    FLAG = "flag"
    USER = "user"


class ModerationAction(str, enum.Enum):
    """Actions recorded in the moderation log."""

    CLUB_APPROVED = "club_approved"
    CLUB_REJECTED = "club_rejected"
    DELETE_CLUB = "delete_club"
    DELETE_EVENT = "delete_event"
    CLUB_FLAG_REVIEWED = "club_flag_reviewed"
    CLUB_FLAG_RESOLVED = "club_flag_resolved"
    CLUB_FLAG_DISMISSED = "club_flag_dismissed"
    EVENT_FLAG_REVIEWED = "event_flag_reviewed"
    EVENT_FLAG_RESOLVED = "event_flag_resolved"
    EVENT_FLAG_DISMISSED = "event_flag_dismissed"
    USER_ROLE_UPDATED = "user_role_updated"

    @classmethod
    def for_flag(cls, entity_type: EntityType, status: FlagStatus) -> ModerationAction:
        """Return the log action for a flag on ``entity_type`` moving to ``status``."""
        return cls(f"{entity_type.value}_flag_{status.value}")


class ClubScope(str, enum.Enum):
    """Filters accepted by the club listing."""

    PUBLIC = "public"
    MINE = "mine"
    MANAGED = "managed"
    PENDING = "pending"
    REJECTED = "rejected"
    ALL = "all"


class ClubSort(str, enum.Enum):
    NAME = "name"
    NEWEST = "newest"
    OLDEST = "oldest"


class EventSort(str, enum.Enum):
    DATE = "date"
    NAME = "name"
    POPULARITY = "popularity"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values (not member names) in SQL enum columns."""
    return [member.value for member in enum_cls]
