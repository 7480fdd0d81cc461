"""Tests for the declarative transition tables."""

import pytest

from campus_connect.core.errors import Conflict
from campus_connect.models.enums import ApprovalStatus, FlagStatus, MembershipStatus
from campus_connect.services.state_machines import (
    CLUB_APPROVAL,
    FLAG_LIFECYCLE,
    MEMBERSHIP_APPROVAL,
)


def test_club_approval_edges() -> None:
    assert CLUB_APPROVAL.can_transition(ApprovalStatus.PENDING, ApprovalStatus.APPROVED)
    assert CLUB_APPROVAL.can_transition(ApprovalStatus.PENDING, ApprovalStatus.REJECTED)
    assert CLUB_APPROVAL.can_transition(ApprovalStatus.REJECTED, ApprovalStatus.PENDING)
    # Rejected clubs must be resubmitted before they can be approved.
    assert not CLUB_APPROVAL.can_transition(ApprovalStatus.REJECTED, ApprovalStatus.APPROVED)
    assert not CLUB_APPROVAL.can_transition(ApprovalStatus.APPROVED, ApprovalStatus.REJECTED)


@pytest.mark.parametrize("terminal", [FlagStatus.RESOLVED, FlagStatus.DISMISSED])
def test_terminal_flags_refuse_every_transition(terminal: FlagStatus) -> None:
    assert FLAG_LIFECYCLE.is_terminal(terminal)
    for target in FlagStatus:
        with pytest.raises(Conflict):
            FLAG_LIFECYCLE.ensure(terminal, target)


def test_reviewed_flag_is_a_soft_checkpoint() -> None:
    assert not FLAG_LIFECYCLE.is_terminal(FlagStatus.REVIEWED)
    assert FLAG_LIFECYCLE.allowed_targets(FlagStatus.REVIEWED) == {
        FlagStatus.RESOLVED,
        FlagStatus.DISMISSED,
    }
    with pytest.raises(Conflict):
        FLAG_LIFECYCLE.ensure(FlagStatus.REVIEWED, FlagStatus.PENDING)


def test_membership_rejoin_goes_through_pending() -> None:
    MEMBERSHIP_APPROVAL.ensure(MembershipStatus.REJECTED, MembershipStatus.PENDING)
    with pytest.raises(Conflict):
        MEMBERSHIP_APPROVAL.ensure(MembershipStatus.REJECTED, MembershipStatus.APPROVED)


def test_conflict_message_names_the_states() -> None:
    with pytest.raises(Conflict) as exc_info:
        CLUB_APPROVAL.ensure(ApprovalStatus.REJECTED, ApprovalStatus.APPROVED)
    assert "rejected" in exc_info.value.message
    assert "approved" in exc_info.value.message
