"""Declarative transition tables for the moderation lifecycles."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from campus_connect.core.errors import Conflict
from campus_connect.models.enums import ApprovalStatus, FlagStatus, MembershipStatus

S = TypeVar("S", bound=enum.Enum)


@dataclass(frozen=True)
class StateMachine(Generic[S]):
    """A finite set of allowed ``current -> target`` edges.

    States without outgoing edges are terminal.
    """

    name: str
    transitions: Mapping[S, frozenset[S]] = field(default_factory=dict)

    def allowed_targets(self, current: S) -> frozenset[S]:
        return self.transitions.get(current, frozenset())

    def can_transition(self, current: S, target: S) -> bool:
        return target in self.allowed_targets(current)

    def is_terminal(self, state: S) -> bool:
        return not self.allowed_targets(state)

    def ensure(self, current: S, target: S) -> None:
        """Raise ``Conflict`` unless ``current -> target`` is an allowed edge."""
        if self.is_terminal(current):
            raise Conflict(f"{self.name} is already {current.value} and can no longer change")
        if not self.can_transition(current, target):
            raise Conflict(f"{self.name} cannot move from {current.value} to {target.value}")


CLUB_APPROVAL: StateMachine[ApprovalStatus] = StateMachine(
    "Club",
    {
        ApprovalStatus.PENDING: frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}),
        # Resubmission is the only way back.
        ApprovalStatus.REJECTED: frozenset({ApprovalStatus.PENDING}),
    },
)

FLAG_LIFECYCLE: StateMachine[FlagStatus] = StateMachine(
    "Flag",
    {
        FlagStatus.PENDING: frozenset(
            {FlagStatus.REVIEWED, FlagStatus.RESOLVED, FlagStatus.DISMISSED}
        ),
        FlagStatus.REVIEWED: frozenset({FlagStatus.RESOLVED, FlagStatus.DISMISSED}),
    },
)

MEMBERSHIP_APPROVAL: StateMachine[MembershipStatus] = StateMachine(
    "Membership",
    {
        MembershipStatus.PENDING: frozenset(
            {MembershipStatus.APPROVED, MembershipStatus.REJECTED}
        ),
        # Rejoin after rejection reopens the request.
        MembershipStatus.REJECTED: frozenset({MembershipStatus.PENDING}),
    },
)

__all__ = ["StateMachine", "CLUB_APPROVAL", "FLAG_LIFECYCLE", "MEMBERSHIP_APPROVAL"]
