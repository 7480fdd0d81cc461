"""Moderation engine: every lifecycle transition for clubs, memberships,
events and flags.

Each public operation runs in one ``atomic`` block covering the
compare-and-set, any cascading side effect and the audit append, so an
action is either fully recorded or not applied at all. Authorization is
re-derived here from freshly read rows; the principal's role always comes
from the profile table rather than from the caller.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from campus_connect.core.errors import (
    AlreadyExists,
    Conflict,
    Forbidden,
    InvalidArgument,
    NotFound,
)
from campus_connect.core.settings import settings
from campus_connect.db.time import utcnow
from campus_connect.models import Club, ClubMembership, Event, Flag, ModerationLogEntry, Profile
from campus_connect.models.enums import (
    ApprovalStatus,
    EntityType,
    EventCategory,
    FlagReason,
    FlagStatus,
    MembershipDecision,
    MembershipStatus,
    ModerationAction,
    UserRole,
)
from campus_connect.services import audit, entity_store
from campus_connect.services.capabilities import Approvable, Flaggable, approvable_model
from campus_connect.services.role_registry import (
    Principal,
    can_create_clubs_or_events,
    resolve_principal,
)
from campus_connect.services.state_machines import CLUB_APPROVAL, FLAG_LIFECYCLE
from campus_connect.services.transaction import atomic

logger = logging.getLogger(__name__)

REJECTION_REASON_MAX = 500
FLAG_NOTES_MAX = 1000
REVIEW_TARGETS = frozenset({FlagStatus.REVIEWED, FlagStatus.RESOLVED, FlagStatus.DISMISSED})

_DECISIONS = {
    MembershipDecision.APPROVE: MembershipStatus.APPROVED,
    MembershipDecision.REJECT: MembershipStatus.REJECTED,
}


def _require_admin(principal: Principal, message: str) -> None:
    if not principal.is_admin:
        logger.warning("Denied admin-only action for principal %s", principal.id)
        raise Forbidden(message)


def _check_expected(current: Any, expected: Any | None) -> None:
    if expected is not None and expected is not current:
        raise Conflict(
            f"Expected status {expected.value} but found {current.value}; reload and retry"
        )


def _approval_details(entity: Approvable, previous: ApprovalStatus) -> dict[str, Any]:
    return {
        "club_name": entity.moderation_label,
        "creator_id": str(entity.creator_id),
        "previous_status": previous.value,
    }


def _flag_context(flag: Flag, entity: Flaggable) -> dict[str, Any]:
    return {
        "flag_id": str(flag.id),
        "flag_type": flag.entity_type.value,
        "entity_id": str(entity.id),
        "entity_label": entity.moderation_label,
        "reason": flag.reason.value,
        "reporter_id": str(flag.reporter_id),
    }


class ModerationEngine:
    """Validates and applies moderation state transitions."""

    # --- clubs -------------------------------------------------------------

    @staticmethod
    def create_club(
        db: Session,
        actor_id: uuid.UUID,
        name: str,
        description: str | None = None,
        requested_status: ApprovalStatus | None = None,
    ) -> Club:
        """Create a club and enrol its creator as an approved club admin.

        Non-admins always start ``pending`` whatever they asked for. Admin
        clubs start ``approved`` unless the admin asks for ``pending`` or
        auto-approval is switched off.
        """
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            if not can_create_clubs_or_events(principal.role):
                raise Forbidden("Only student leaders and admins can create clubs")
            if requested_status is ApprovalStatus.REJECTED:
                raise InvalidArgument("Clubs cannot be created as rejected")

            if not principal.is_admin:
                initial_status = ApprovalStatus.PENDING
            elif requested_status is not None:
                initial_status = requested_status
            elif settings.admin_clubs_auto_approve:
                initial_status = ApprovalStatus.APPROVED
            else:
                initial_status = ApprovalStatus.PENDING

            club = entity_store.create_club(
                db,
                name=name,
                description=description,
                creator_id=principal.id,
                initial_status=initial_status,
            )
        logger.info("Club %s created by %s as %s", club.id, actor_id, initial_status.value)
        return club

    @staticmethod
    def update_club(
        db: Session,
        actor_id: uuid.UUID,
        club_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Club:
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            club = entity_store.get_club(db, club_id)
            if not (principal.is_admin or club.creator_id == principal.id):
                raise Forbidden("Only the club creator or an admin can edit this club")
            entity_store.update_club_fields(db, club, changes)
        return club

    @staticmethod
    def approve_club(
        db: Session,
        actor_id: uuid.UUID,
        club_id: uuid.UUID,
        expected_status: ApprovalStatus | None = None,
    ) -> Club:
        """Approve a pending club.

        Approving an already approved club succeeds without a second log
        entry. A rejected club must be resubmitted first.
        """
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            _require_admin(principal, "Only admins can approve clubs")
            club = entity_store.get_club(db, club_id)
            current = club.approval_status
            _check_expected(current, expected_status)
            if current is ApprovalStatus.APPROVED:
                return club
            CLUB_APPROVAL.ensure(current, ApprovalStatus.APPROVED)

            club = entity_store.compare_and_set(
                db,
                approvable_model(EntityType.CLUB),
                Club.approval_status,
                club.id,
                current,
                {
                    "approval_status": ApprovalStatus.APPROVED,
                    "approved_by": principal.id,
                    "approved_at": utcnow(),
                    "rejection_reason": None,
                },
            )
            audit.append(
                db,
                admin_id=principal.id,
                action=ModerationAction.CLUB_APPROVED,
                entity_type=EntityType.CLUB,
                entity_id=club.id,
                details=_approval_details(club, current),
            )
        return club

    @staticmethod
    def reject_club(
        db: Session,
        actor_id: uuid.UUID,
        club_id: uuid.UUID,
        reason: str,
        expected_status: ApprovalStatus | None = None,
    ) -> Club:
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            _require_admin(principal, "Only admins can reject clubs")
            cleaned = (reason or "").strip()
            if not cleaned:
                raise InvalidArgument("A rejection reason is required")
            if len(cleaned) > REJECTION_REASON_MAX:
                raise InvalidArgument(
                    f"Rejection reason must be at most {REJECTION_REASON_MAX} characters"
                )
            club = entity_store.get_club(db, club_id)
            current = club.approval_status
            _check_expected(current, expected_status)
            CLUB_APPROVAL.ensure(current, ApprovalStatus.REJECTED)

            club = entity_store.compare_and_set(
                db,
                approvable_model(EntityType.CLUB),
                Club.approval_status,
                club.id,
                current,
                {
                    "approval_status": ApprovalStatus.REJECTED,
                    "rejection_reason": cleaned,
                    "approved_by": None,
                    "approved_at": None,
                },
            )
            audit.append(
                db,
                admin_id=principal.id,
                action=ModerationAction.CLUB_REJECTED,
                entity_type=EntityType.CLUB,
                entity_id=club.id,
                details={**_approval_details(club, current), "rejection_reason": cleaned},
            )
        return club

    @staticmethod
    def resubmit_club(
        db: Session,
        actor_id: uuid.UUID,
        club_id: uuid.UUID,
        expected_status: ApprovalStatus | None = None,
    ) -> Club:
        """Send a rejected club back to the approval queue.

        Clubs that are already pending or approved are returned unchanged.
        """
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            club = entity_store.get_club(db, club_id)
            if not (principal.is_admin or club.creator_id == principal.id):
                raise Forbidden("Only the club creator or an admin can resubmit this club")
            current = club.approval_status
            _check_expected(current, expected_status)
            if current is not ApprovalStatus.REJECTED:
                return club
            CLUB_APPROVAL.ensure(current, ApprovalStatus.PENDING)
            club = entity_store.compare_and_set(
                db,
                approvable_model(EntityType.CLUB),
                Club.approval_status,
                club.id,
                current,
                {
                    "approval_status": ApprovalStatus.PENDING,
                    "rejection_reason": None,
                    "approved_by": None,
                    "approved_at": None,
                },
            )
        logger.info("Club %s resubmitted by %s", club_id, actor_id)
        return club

    @staticmethod
    def delete_club(db: Session, actor_id: uuid.UUID, club_id: uuid.UUID) -> None:
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            _require_admin(principal, "Only admins can delete clubs")
            club = entity_store.get_club(db, club_id)
            details = {
                "club_name": club.name,
                "creator_id": str(club.creator_id),
                "approval_status": club.approval_status.value,
            }
            entity_store.delete_club(db, club)
            audit.append(
                db,
                admin_id=principal.id,
                action=ModerationAction.DELETE_CLUB,
                entity_type=EntityType.CLUB,
                entity_id=club_id,
                details=details,
            )

    # --- memberships -------------------------------------------------------

    @staticmethod
    def request_membership(
        db: Session,
        actor_id: uuid.UUID,
        club_id: uuid.UUID,
    ) -> ClubMembership:
        """Ask to join a club.

        A first request starts ``pending`` (``approved`` for platform admins).
        A request after a rejection reopens the same row to ``pending``.
        """
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            club = entity_store.get_club(db, club_id)
            if not entity_store.is_club_visible(principal, club):
                raise NotFound("Club not found")
            existing = entity_store.find_membership(db, club.id, principal.id)
            if existing is not None:
                if existing.status is MembershipStatus.REJECTED:
                    return entity_store.reopen_membership(db, existing)
                raise AlreadyExists(
                    "You already have a membership request for this club"
                    if existing.status is MembershipStatus.PENDING
                    else "You are already a member of this club"
                )
            status = MembershipStatus.APPROVED if principal.is_admin else MembershipStatus.PENDING
            membership = entity_store.create_membership(
                db, club_id=club.id, user_id=principal.id, status=status
            )
        return membership

    @staticmethod
    def decide_membership(
        db: Session,
        actor_id: uuid.UUID,
        membership_id: uuid.UUID,
        decision: MembershipDecision,
        expected_status: MembershipStatus | None = None,
    ) -> ClubMembership:
        with atomic(db):
            membership = entity_store.update_membership_status(
                db,
                membership_id,
                _DECISIONS[decision],
                actor_id,
                expected_status=expected_status,
            )
        logger.info("Membership %s %s by %s", membership_id, membership.status.value, actor_id)
        return membership

    @staticmethod
    def leave_club(db: Session, actor_id: uuid.UUID, membership_id: uuid.UUID) -> None:
        """Remove a membership row. Members may always remove their own."""
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            membership = entity_store.get_membership(db, membership_id)
            if not (membership.user_id == principal.id or principal.is_admin):
                raise Forbidden("You can only remove your own membership")
            entity_store.delete_membership(db, membership)

    # --- events ------------------------------------------------------------

    @staticmethod
    def create_event(
        db: Session,
        actor_id: uuid.UUID,
        *,
        club_id: uuid.UUID,
        title: str,
        event_date: datetime,
        description: str | None = None,
        location: str | None = None,
        category: EventCategory | None = None,
        is_free: bool = True,
        price: float | None = None,
    ) -> Event:
        with atomic(db):
            event = entity_store.create_event(
                db,
                creator_id=actor_id,
                club_id=club_id,
                title=title,
                event_date=event_date,
                description=description,
                location=location,
                category=category,
                is_free=is_free,
                price=price,
            )
        logger.info("Event %s created in club %s by %s", event.id, club_id, actor_id)
        return event

    @staticmethod
    def update_event(
        db: Session,
        actor_id: uuid.UUID,
        event_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Event:
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            event = entity_store.get_event(db, event_id)
            if not (principal.is_admin or principal.id in event.owner_ids()):
                raise Forbidden("Only the event owners or an admin can edit this event")
            entity_store.update_event_fields(db, event, changes)
        return event

    @staticmethod
    def delete_event(db: Session, actor_id: uuid.UUID, event_id: uuid.UUID) -> None:
        """Delete an event. Only deletions by platform admins are audited."""
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            event = entity_store.get_event(db, event_id)
            if not (principal.is_admin or principal.id in event.owner_ids()):
                raise Forbidden("Only the event owners or an admin can delete this event")
            details = {
                "event_title": event.title,
                "club_id": str(event.club_id),
                "creator_id": str(event.creator_id),
            }
            entity_store.delete_event(db, event)
            if principal.is_admin:
                audit.append(
                    db,
                    admin_id=principal.id,
                    action=ModerationAction.DELETE_EVENT,
                    entity_type=EntityType.EVENT,
                    entity_id=event_id,
                    details=details,
                )

    # --- flags -------------------------------------------------------------

    @staticmethod
    def flag_entity(
        db: Session,
        reporter_id: uuid.UUID,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        reason: FlagReason,
        details: str | None = None,
    ) -> Flag:
        with atomic(db):
            principal = resolve_principal(db, reporter_id)
            entity = entity_store.get_flagged_entity(db, entity_type, entity_id)
            club = entity if isinstance(entity, Club) else entity.club
            if not entity_store.is_club_visible(principal, club):
                raise NotFound(f"{entity_type.value.capitalize()} not found")
            flag = entity_store.create_flag(
                db,
                entity_type=entity_type,
                entity_id=entity_id,
                reporter_id=principal.id,
                reason=reason,
                details=details,
            )
        logger.info("Flag %s filed on %s %s", flag.id, entity_type.value, entity_id)
        return flag

    @staticmethod
    def review_flag(
        db: Session,
        actor_id: uuid.UUID,
        flag_id: uuid.UUID,
        new_status: FlagStatus,
        notes: str | None = None,
        expected_status: FlagStatus | None = None,
    ) -> Flag:
        """Move a flag along its lifecycle and record the transition.

        The entity's owners and platform admins may review. Terminal flags
        refuse every further transition.
        """
        if new_status not in REVIEW_TARGETS:
            raise InvalidArgument(f"{new_status.value} is not a valid review status")
        if notes is not None and len(notes) > FLAG_NOTES_MAX:
            raise InvalidArgument(f"Notes must be at most {FLAG_NOTES_MAX} characters")
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            flag = entity_store.get_flag(db, flag_id)
            entity = entity_store.get_flagged_entity(db, flag.entity_type, flag.entity_id)
            if not (principal.is_admin or principal.id in entity.owner_ids()):
                raise Forbidden("Only the content owners or an admin can review this flag")
            current = flag.status
            _check_expected(current, expected_status)
            FLAG_LIFECYCLE.ensure(current, new_status)

            context = _flag_context(flag, entity)
            flag = entity_store.set_flag_status(db, flag, new_status, principal.id)
            details = {**context, "reviewer_id": str(principal.id), "previous_status": current.value}
            if notes:
                details["notes"] = notes.strip()
            audit.append(
                db,
                admin_id=principal.id,
                action=ModerationAction.for_flag(flag.entity_type, new_status),
                entity_type=EntityType.FLAG,
                entity_id=flag.id,
                details=details,
            )
        return flag

    @staticmethod
    def dismiss_flag(
        db: Session,
        actor_id: uuid.UUID,
        flag_id: uuid.UUID,
        notes: str | None = None,
        expected_status: FlagStatus | None = None,
    ) -> Flag:
        return ModerationEngine.review_flag(
            db,
            actor_id,
            flag_id,
            FlagStatus.DISMISSED,
            notes=notes,
            expected_status=expected_status,
        )

    @staticmethod
    def delete_flagged_entity(
        db: Session,
        actor_id: uuid.UUID,
        flag_id: uuid.UUID,
        notes: str | None = None,
        expected_status: FlagStatus | None = None,
    ) -> None:
        """Resolve a flag by deleting what it points at.

        The entity goes first, taking every flag on it along, then the
        deletion is logged. No flag-status entry is written for the flag that
        no longer exists.
        """
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            flag = entity_store.get_flag(db, flag_id)
            entity = entity_store.get_flagged_entity(db, flag.entity_type, flag.entity_id)
            if flag.entity_type is EntityType.CLUB:
                _require_admin(principal, "Only admins can delete clubs")
            elif not (principal.is_admin or principal.id in entity.owner_ids()):
                raise Forbidden("Only the event owners or an admin can delete this event")
            _check_expected(flag.status, expected_status)
            if FLAG_LIFECYCLE.is_terminal(flag.status):
                raise Conflict(f"Flag is already {flag.status.value} and can no longer change")

            details = {**_flag_context(flag, entity), "via_flag": True}
            if notes:
                details["notes"] = notes.strip()
            if isinstance(entity, Club):
                details["creator_id"] = str(entity.creator_id)
                entity_store.delete_club(db, entity)
                action = ModerationAction.DELETE_CLUB
            else:
                details["club_id"] = str(entity.club_id)
                details["creator_id"] = str(entity.creator_id)
                entity_store.delete_event(db, entity)
                action = ModerationAction.DELETE_EVENT
            audit.append(
                db,
                admin_id=principal.id,
                action=action,
                entity_type=flag.entity_type,
                entity_id=flag.entity_id,
                details=details,
            )

    # --- roles -------------------------------------------------------------

    @staticmethod
    def change_role(
        db: Session,
        actor_id: uuid.UUID,
        target_id: uuid.UUID,
        new_role: UserRole,
    ) -> Profile:
        with atomic(db):
            principal = resolve_principal(db, actor_id)
            _require_admin(principal, "Only admins can change roles")
            if target_id == principal.id:
                raise Forbidden("You cannot change your own role")
            target = entity_store.get_profile(db, target_id)
            previous = target.effective_role
            if previous is new_role:
                return target
            target.role = new_role
            db.flush()
            audit.append(
                db,
                admin_id=principal.id,
                action=ModerationAction.USER_ROLE_UPDATED,
                entity_type=EntityType.USER,
                entity_id=target.id,
                details={
                    "email": target.email,
                    "previous_role": previous.value,
                    "new_role": new_role.value,
                },
            )
        return target

    # --- reads -------------------------------------------------------------

    @staticmethod
    def list_moderation_log(
        db: Session,
        actor_id: uuid.UUID,
        *,
        entity_type: EntityType | None = None,
        entity_id: uuid.UUID | None = None,
        admin_id: uuid.UUID | None = None,
        action: ModerationAction | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ModerationLogEntry]:
        principal = resolve_principal(db, actor_id)
        _require_admin(principal, "Only admins can view the moderation log")
        return audit.query(
            db,
            entity_type=entity_type,
            entity_id=entity_id,
            admin_id=admin_id,
            action=action,
            limit=limit,
            offset=offset,
        )
