"""Persistence primitives for clubs, memberships, events and flags.

Every write that touches a lifecycle column goes through
:func:`compare_and_set`, so two moderators acting on the same row cannot
silently overwrite each other. Functions here flush but never commit; the
caller owns the transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import and_, delete, exists, func, or_, select, true, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from campus_connect.core.errors import AlreadyExists, Conflict, Forbidden, InvalidArgument, NotFound
from campus_connect.db.time import utcnow
from campus_connect.models import (
    Club,
    ClubMembership,
    Event,
    EventRegistration,
    Flag,
    Profile,
)
from campus_connect.models.enums import (
    ApprovalStatus,
    ClubScope,
    ClubSort,
    EntityType,
    EventCategory,
    EventSort,
    FlagReason,
    FlagStatus,
    MemberRole,
    MembershipStatus,
)
from campus_connect.services.capabilities import flaggable_model
from campus_connect.services.role_registry import (
    Principal,
    can_create_clubs_or_events,
    resolve_principal,
)
from campus_connect.services.state_machines import MEMBERSHIP_APPROVAL

logger = logging.getLogger(__name__)

M = TypeVar("M")

CLUB_NAME_MAX = 255
CLUB_DESCRIPTION_MAX = 1000
EVENT_TITLE_MAX = 255
FLAG_DETAILS_MAX = 1000

CLUB_EDITABLE_FIELDS = frozenset({"name", "description"})
CLUB_PROTECTED_FIELDS = frozenset(
    {
        "approval_status",
        "approved_by",
        "approved_at",
        "rejection_reason",
        "creator_id",
        "id",
        "created_at",
        "updated_at",
    }
)
EVENT_EDITABLE_FIELDS = frozenset(
    {"title", "description", "event_date", "location", "category", "is_free", "price"}
)
EVENT_PROTECTED_FIELDS = frozenset({"club_id", "creator_id", "id", "created_at", "updated_at"})


# --- getters ---------------------------------------------------------------


def _get_or_404(db: Session, model: type[M], entity_id: uuid.UUID, label: str) -> M:
    instance = db.get(model, entity_id)
    if instance is None:
        raise NotFound(f"{label} not found")
    return instance


def get_profile(db: Session, profile_id: uuid.UUID) -> Profile:
    return _get_or_404(db, Profile, profile_id, "Profile")


def get_club(db: Session, club_id: uuid.UUID) -> Club:
    return _get_or_404(db, Club, club_id, "Club")


def get_event(db: Session, event_id: uuid.UUID) -> Event:
    return _get_or_404(db, Event, event_id, "Event")


def get_membership(db: Session, membership_id: uuid.UUID) -> ClubMembership:
    return _get_or_404(db, ClubMembership, membership_id, "Membership")


def get_flag(db: Session, flag_id: uuid.UUID) -> Flag:
    return _get_or_404(db, Flag, flag_id, "Flag")


def get_flagged_entity(db: Session, entity_type: EntityType, entity_id: uuid.UUID) -> Club | Event:
    """Load the club or event a flag points at."""
    model = flaggable_model(entity_type)
    return _get_or_404(db, model, entity_id, entity_type.value.capitalize())


def find_membership(
    db: Session,
    club_id: uuid.UUID,
    user_id: uuid.UUID,
) -> ClubMembership | None:
    stmt = select(ClubMembership).where(
        ClubMembership.club_id == club_id,
        ClubMembership.user_id == user_id,
    )
    return db.scalars(stmt).first()


def find_flag(
    db: Session,
    entity_type: EntityType,
    entity_id: uuid.UUID,
    reporter_id: uuid.UUID,
) -> Flag | None:
    stmt = select(Flag).where(
        Flag.entity_type == entity_type,
        Flag.entity_id == entity_id,
        Flag.reporter_id == reporter_id,
    )
    return db.scalars(stmt).first()


# --- optimistic concurrency ------------------------------------------------


def compare_and_set(
    db: Session,
    model: type[M],
    status_column: InstrumentedAttribute[Any],
    entity_id: uuid.UUID,
    expected: Any,
    values: Mapping[str, Any],
) -> M:
    """Apply ``values`` only if the row still has status ``expected``.

    Raises:
        Conflict: If the row changed (or vanished) since it was read.
    """
    db.flush()
    stmt = (
        update(model)
        .where(model.id == entity_id, status_column == expected)  # type: ignore[attr-defined]
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount != 1:
        logger.info(
            "compare-and-set lost on %s %s (expected %s)",
            model.__name__,
            entity_id,
            getattr(expected, "value", expected),
        )
        raise Conflict()
    instance = db.get(model, entity_id)
    if instance is None:
        raise Conflict()
    db.refresh(instance)
    return instance


# --- clubs -----------------------------------------------------------------


def _clean_text(value: Any, field: str, *, max_length: int, required: bool) -> str | None:
    if value is None:
        if required:
            raise InvalidArgument(f"{field} is required")
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"{field} must be a string")
    cleaned = value.strip()
    if required and not cleaned:
        raise InvalidArgument(f"{field} is required")
    if len(cleaned) > max_length:
        raise InvalidArgument(f"{field} must be at most {max_length} characters")
    return cleaned or None


def _check_fields(
    changes: Mapping[str, Any],
    editable: frozenset[str],
    protected: frozenset[str],
) -> None:
    touched = set(changes)
    blocked = sorted(touched & protected)
    if blocked:
        raise Forbidden(f"Cannot modify protected fields: {', '.join(blocked)}")
    unknown = sorted(touched - editable)
    if unknown:
        raise InvalidArgument(f"Unknown fields: {', '.join(unknown)}")


def create_club(
    db: Session,
    *,
    name: str,
    description: str | None,
    creator_id: uuid.UUID,
    initial_status: ApprovalStatus,
) -> Club:
    """Insert a club together with its creator as an approved club admin.

    Raises:
        Forbidden: If the creator's role cannot create clubs, or a non-admin
            asks for an ``approved`` start.
        InvalidArgument: For out-of-range fields or an impossible status.
    """
    principal = resolve_principal(db, creator_id)
    if not can_create_clubs_or_events(principal.role):
        raise Forbidden("Only student leaders and admins can create clubs")
    if initial_status is ApprovalStatus.REJECTED:
        raise InvalidArgument("Clubs cannot be created as rejected")
    if initial_status is ApprovalStatus.APPROVED and not principal.is_admin:
        raise Forbidden("Only admins can create pre-approved clubs")

    club = Club(
        name=_clean_text(name, "name", max_length=CLUB_NAME_MAX, required=True),
        description=_clean_text(
            description, "description", max_length=CLUB_DESCRIPTION_MAX, required=False
        ),
        creator_id=creator_id,
        approval_status=initial_status,
    )
    if initial_status is ApprovalStatus.APPROVED:
        club.approved_by = creator_id
        club.approved_at = utcnow()
    club.memberships.append(
        ClubMembership(
            user_id=creator_id,
            role=MemberRole.ADMIN,
            status=MembershipStatus.APPROVED,
        )
    )
    db.add(club)
    db.flush()
    return club


def update_club_fields(db: Session, club: Club, changes: Mapping[str, Any]) -> Club:
    """Apply creator-editable fields. Lifecycle fields are refused outright."""
    _check_fields(changes, CLUB_EDITABLE_FIELDS, CLUB_PROTECTED_FIELDS)
    if "name" in changes:
        club.name = _clean_text(changes["name"], "name", max_length=CLUB_NAME_MAX, required=True)
    if "description" in changes:
        club.description = _clean_text(
            changes["description"],
            "description",
            max_length=CLUB_DESCRIPTION_MAX,
            required=False,
        )
    db.flush()
    return club


def _delete_flags_for(db: Session, entity_type: EntityType, entity_ids: list[uuid.UUID]) -> int:
    if not entity_ids:
        return 0
    result = db.execute(
        delete(Flag)
        .where(Flag.entity_type == entity_type, Flag.entity_id.in_(entity_ids))
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


def delete_club(db: Session, club: Club) -> None:
    """Delete a club along with its events and every flag that targets them."""
    event_ids = [event.id for event in club.events]
    removed = _delete_flags_for(db, EntityType.CLUB, [club.id])
    removed += _delete_flags_for(db, EntityType.EVENT, event_ids)
    db.delete(club)
    db.flush()
    logger.debug("Deleted club %s with %d events and %d flags", club.id, len(event_ids), removed)


# --- memberships -----------------------------------------------------------


def create_membership(
    db: Session,
    *,
    club_id: uuid.UUID,
    user_id: uuid.UUID,
    status: MembershipStatus,
) -> ClubMembership:
    if find_membership(db, club_id, user_id) is not None:
        raise AlreadyExists("Membership already exists")
    membership = ClubMembership(
        club_id=club_id,
        user_id=user_id,
        role=MemberRole.MEMBER,
        status=status,
    )
    db.add(membership)
    try:
        db.flush()
    except IntegrityError as exc:
        raise AlreadyExists("Membership already exists") from exc
    return membership


def update_membership_status(
    db: Session,
    membership_id: uuid.UUID,
    new_status: MembershipStatus,
    actor_id: uuid.UUID,
    expected_status: MembershipStatus | None = None,
) -> ClubMembership:
    """Approve or reject a pending membership.

    Raises:
        Forbidden: Unless the actor created the club or is a platform admin.
        Conflict: Unless the membership is currently ``pending``.
        InvalidArgument: If ``new_status`` is not a decision outcome.
    """
    if new_status not in (MembershipStatus.APPROVED, MembershipStatus.REJECTED):
        raise InvalidArgument("Memberships can only be approved or rejected")
    membership = get_membership(db, membership_id)
    club = get_club(db, membership.club_id)
    actor = resolve_principal(db, actor_id)
    if not (actor.is_admin or club.creator_id == actor.id):
        raise Forbidden("Only the club creator or an admin can decide memberships")

    current = membership.status
    if expected_status is not None and expected_status is not current:
        raise Conflict()
    if current is not MembershipStatus.PENDING:
        raise Conflict(f"Membership is already {current.value}")
    MEMBERSHIP_APPROVAL.ensure(current, new_status)
    return compare_and_set(
        db,
        ClubMembership,
        ClubMembership.status,
        membership.id,
        current,
        {"status": new_status},
    )


def reopen_membership(db: Session, membership: ClubMembership) -> ClubMembership:
    """Move a rejected membership back to ``pending`` for a fresh decision."""
    MEMBERSHIP_APPROVAL.ensure(membership.status, MembershipStatus.PENDING)
    return compare_and_set(
        db,
        ClubMembership,
        ClubMembership.status,
        membership.id,
        membership.status,
        {"status": MembershipStatus.PENDING, "joined_at": utcnow()},
    )


def delete_membership(db: Session, membership: ClubMembership) -> None:
    db.delete(membership)
    db.flush()


def list_memberships(
    db: Session,
    club_id: uuid.UUID,
    status: MembershipStatus | None = None,
) -> list[ClubMembership]:
    stmt = select(ClubMembership).where(ClubMembership.club_id == club_id)
    if status is not None:
        stmt = stmt.where(ClubMembership.status == status)
    stmt = stmt.order_by(ClubMembership.joined_at.asc())
    return list(db.scalars(stmt))


# --- events ----------------------------------------------------------------


def _coerce_category(value: Any) -> EventCategory | None:
    if value is None or isinstance(value, EventCategory):
        return value
    try:
        return EventCategory(value)
    except ValueError:
        raise InvalidArgument(f"Invalid event category: {value}") from None


def _normalize_price(is_free: bool, price: Any) -> float | None:
    if is_free:
        return None
    if price is None:
        raise InvalidArgument("Paid events require a price")
    try:
        amount = float(price)
    except (TypeError, ValueError):
        raise InvalidArgument("Price must be a number") from None
    if amount <= 0:
        raise InvalidArgument("Paid events require a price greater than zero")
    return amount


def create_event(
    db: Session,
    *,
    creator_id: uuid.UUID,
    club_id: uuid.UUID,
    title: str,
    event_date: datetime,
    description: str | None = None,
    location: str | None = None,
    category: EventCategory | str | None = None,
    is_free: bool = True,
    price: float | None = None,
) -> Event:
    """Insert an event for a club.

    The creator must hold a leader or admin role *and* either own the club or
    be one of its approved club admins. Platform admins get no bypass on the
    second half of that rule.
    """
    club = get_club(db, club_id)
    principal = resolve_principal(db, creator_id)
    if not can_create_clubs_or_events(principal.role):
        raise Forbidden("Only student leaders and admins can create events")
    if club.creator_id != creator_id:
        membership = find_membership(db, club_id, creator_id)
        if membership is None or not membership.is_approved_club_admin:
            raise Forbidden("Only club admins can create events for this club")
    if event_date is None:
        raise InvalidArgument("event_date is required")

    event = Event(
        club_id=club.id,
        creator_id=creator_id,
        title=_clean_text(title, "title", max_length=EVENT_TITLE_MAX, required=True),
        description=_clean_text(description, "description", max_length=5000, required=False),
        event_date=event_date,
        location=_clean_text(location, "location", max_length=500, required=False),
        category=_coerce_category(category),
        is_free=bool(is_free),
        price=_normalize_price(bool(is_free), price),
    )
    db.add(event)
    db.flush()
    return event


def update_event_fields(db: Session, event: Event, changes: Mapping[str, Any]) -> Event:
    _check_fields(changes, EVENT_EDITABLE_FIELDS, EVENT_PROTECTED_FIELDS)
    if "title" in changes:
        event.title = _clean_text(
            changes["title"], "title", max_length=EVENT_TITLE_MAX, required=True
        )
    if "description" in changes:
        event.description = _clean_text(
            changes["description"], "description", max_length=5000, required=False
        )
    if "location" in changes:
        event.location = _clean_text(
            changes["location"], "location", max_length=500, required=False
        )
    if "event_date" in changes:
        if changes["event_date"] is None:
            raise InvalidArgument("event_date is required")
        event.event_date = changes["event_date"]
    if "category" in changes:
        event.category = _coerce_category(changes["category"])
    if "is_free" in changes or "price" in changes:
        is_free = bool(changes.get("is_free", event.is_free))
        event.is_free = is_free
        event.price = _normalize_price(is_free, changes.get("price", event.price))
    db.flush()
    return event


def delete_event(db: Session, event: Event) -> None:
    _delete_flags_for(db, EntityType.EVENT, [event.id])
    db.delete(event)
    db.flush()


# --- flags -----------------------------------------------------------------


def create_flag(
    db: Session,
    *,
    entity_type: EntityType,
    entity_id: uuid.UUID,
    reporter_id: uuid.UUID,
    reason: FlagReason,
    details: str | None = None,
) -> Flag:
    """Record a report against a club or event.

    Raises:
        NotFound: If the target does not exist.
        AlreadyExists: If this reporter already flagged the target.
    """
    get_flagged_entity(db, entity_type, entity_id)
    if find_flag(db, entity_type, entity_id, reporter_id) is not None:
        raise AlreadyExists("You have already flagged this item")
    flag = Flag(
        entity_type=entity_type,
        entity_id=entity_id,
        reporter_id=reporter_id,
        reason=reason,
        details=_clean_text(details, "details", max_length=FLAG_DETAILS_MAX, required=False),
        status=FlagStatus.PENDING,
    )
    db.add(flag)
    try:
        db.flush()
    except IntegrityError as exc:
        raise AlreadyExists("You have already flagged this item") from exc
    return flag


def set_flag_status(
    db: Session,
    flag: Flag,
    new_status: FlagStatus,
    reviewer_id: uuid.UUID,
) -> Flag:
    """Move a flag to ``new_status`` if nobody else moved it first."""
    return compare_and_set(
        db,
        Flag,
        Flag.status,
        flag.id,
        flag.status,
        {"status": new_status, "reviewed_by": reviewer_id, "reviewed_at": utcnow()},
    )


def list_flags(
    db: Session,
    *,
    entity_type: EntityType | None = None,
    entity_id: uuid.UUID | None = None,
    status: FlagStatus | None = None,
    reporter_id: uuid.UUID | None = None,
) -> list[Flag]:
    stmt = select(Flag)
    if entity_type is not None:
        stmt = stmt.where(Flag.entity_type == entity_type)
    if entity_id is not None:
        stmt = stmt.where(Flag.entity_id == entity_id)
    if status is not None:
        stmt = stmt.where(Flag.status == status)
    if reporter_id is not None:
        stmt = stmt.where(Flag.reporter_id == reporter_id)
    stmt = stmt.order_by(Flag.created_at.desc())
    return list(db.scalars(stmt))


# --- listings --------------------------------------------------------------


def _visible_clubs(viewer: Principal | None) -> Any:
    """Clause restricting clubs to what ``viewer`` may see.

    Non-admins see approved clubs plus the ones they created.
    """
    if viewer is not None and viewer.is_admin:
        return true()
    if viewer is None:
        return Club.approval_status == ApprovalStatus.APPROVED
    return or_(Club.approval_status == ApprovalStatus.APPROVED, Club.creator_id == viewer.id)


def _membership_exists(viewer_id: uuid.UUID, *, club_admin_only: bool) -> Any:
    criteria = [
        ClubMembership.club_id == Club.id,
        ClubMembership.user_id == viewer_id,
        ClubMembership.status == MembershipStatus.APPROVED,
    ]
    if club_admin_only:
        criteria.append(ClubMembership.role == MemberRole.ADMIN)
    return exists().where(and_(*criteria))


def list_clubs(
    db: Session,
    viewer: Principal | None,
    scope: ClubScope = ClubScope.PUBLIC,
    sort: ClubSort = ClubSort.NAME,
) -> list[tuple[Club, int]]:
    """Return ``(club, approved member count)`` pairs visible to ``viewer``.

    Clubs the viewer may not see are filtered out rather than reported as an
    authorization failure.
    """
    member_counts = (
        select(ClubMembership.club_id, func.count(ClubMembership.id).label("member_count"))
        .where(ClubMembership.status == MembershipStatus.APPROVED)
        .group_by(ClubMembership.club_id)
        .subquery()
    )
    count_col = func.coalesce(member_counts.c.member_count, 0)
    stmt = (
        select(Club, count_col)
        .outerjoin(member_counts, member_counts.c.club_id == Club.id)
        .where(_visible_clubs(viewer))
    )

    if scope is ClubScope.PUBLIC:
        stmt = stmt.where(Club.approval_status == ApprovalStatus.APPROVED)
    elif scope in (ClubScope.MINE, ClubScope.MANAGED):
        if viewer is None:
            return []
        stmt = stmt.where(
            or_(
                Club.creator_id == viewer.id,
                _membership_exists(viewer.id, club_admin_only=scope is ClubScope.MANAGED),
            )
        )
    elif scope is ClubScope.PENDING:
        stmt = stmt.where(Club.approval_status == ApprovalStatus.PENDING)
    elif scope is ClubScope.REJECTED:
        stmt = stmt.where(Club.approval_status == ApprovalStatus.REJECTED)

    if sort is ClubSort.NEWEST:
        stmt = stmt.order_by(Club.created_at.desc(), Club.name.asc())
    elif sort is ClubSort.OLDEST:
        stmt = stmt.order_by(Club.created_at.asc(), Club.name.asc())
    else:
        stmt = stmt.order_by(func.lower(Club.name).asc(), Club.created_at.asc())

    return [(club, int(count)) for club, count in db.execute(stmt).all()]


def list_events(
    db: Session,
    viewer: Principal | None,
    sort: EventSort = EventSort.DATE,
    club_id: uuid.UUID | None = None,
) -> list[tuple[Event, int]]:
    """Return ``(event, registration count)`` pairs for events of visible clubs."""
    registration_counts = (
        select(
            EventRegistration.event_id,
            func.count(EventRegistration.id).label("registration_count"),
        )
        .group_by(EventRegistration.event_id)
        .subquery()
    )
    count_col = func.coalesce(registration_counts.c.registration_count, 0)
    stmt = (
        select(Event, count_col)
        .join(Club, Club.id == Event.club_id)
        .outerjoin(registration_counts, registration_counts.c.event_id == Event.id)
        .where(_visible_clubs(viewer))
    )
    if club_id is not None:
        stmt = stmt.where(Event.club_id == club_id)

    if sort is EventSort.NAME:
        stmt = stmt.order_by(func.lower(Event.title).asc(), Event.event_date.asc())
    elif sort is EventSort.POPULARITY:
        stmt = stmt.order_by(count_col.desc(), Event.event_date.asc())
    else:
        stmt = stmt.order_by(Event.event_date.asc(), Event.title.asc())

    return [(event, int(count)) for event, count in db.execute(stmt).all()]


def is_club_visible(viewer: Principal | None, club: Club) -> bool:
    if club.approval_status is ApprovalStatus.APPROVED:
        return True
    return viewer is not None and (viewer.is_admin or viewer.id == club.creator_id)
