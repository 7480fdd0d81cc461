# mypy: ignore-errors
"""Tests for flag review and closure endpoints."""

import pytest
from fastapi import status

from campus_connect.models.enums import EntityType, FlagReason
from campus_connect.services.moderation import ModerationEngine


@pytest.fixture()
def event_flag(db_session, student, event):
    return ModerationEngine.flag_entity(
        db_session, student.id, EntityType.EVENT, event.id, FlagReason.SPAM
    )


@pytest.fixture()
def club_flag(db_session, student, approved_club):
    return ModerationEngine.flag_entity(
        db_session, student.id, EntityType.CLUB, approved_club.id, FlagReason.OTHER
    )


def test_review_then_resolve(client, admin, event_flag, auth_headers) -> None:
    """A resolved flag refuses any further transition."""
    reviewed = client.patch(
        f"/api/v1/flags/{event_flag.id}",
        json={"status": "reviewed", "notes": "Checking with organisers"},
        headers=auth_headers(admin),
    )
    assert reviewed.status_code == status.HTTP_200_OK
    assert reviewed.json()["status"] == "reviewed"
    assert reviewed.json()["reviewed_by"] == str(admin.id)

    resolved = client.patch(
        f"/api/v1/flags/{event_flag.id}",
        json={"status": "resolved"},
        headers=auth_headers(admin),
    )
    assert resolved.json()["status"] == "resolved"

    again = client.patch(
        f"/api/v1/flags/{event_flag.id}",
        json={"status": "dismissed"},
        headers=auth_headers(admin),
    )
    assert again.status_code == status.HTTP_409_CONFLICT


def test_stale_expected_status_conflicts(client, admin, event_flag, auth_headers) -> None:
    response = client.patch(
        f"/api/v1/flags/{event_flag.id}",
        json={"status": "resolved", "expected_status": "reviewed"},
        headers=auth_headers(admin),
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_pending_is_not_a_review_status(
    client, db_session, admin, event_flag, auth_headers
) -> None:
    response = client.patch(
        f"/api/v1/flags/{event_flag.id}",
        json={"status": "pending"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422
    db_session.refresh(event_flag)
    assert event_flag.reviewed_by is None


def test_reporter_cannot_review(client, student, event_flag, auth_headers) -> None:
    response = client.patch(
        f"/api/v1/flags/{event_flag.id}",
        json={"status": "dismissed"},
        headers=auth_headers(student),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_owner_dismisses_flag(client, leader, event_flag, auth_headers) -> None:
    response = client.delete(f"/api/v1/flags/{event_flag.id}", headers=auth_headers(leader))
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Flag dismissed"}


def test_owner_deletes_flagged_event(client, leader, event, event_flag, auth_headers) -> None:
    response = client.delete(
        f"/api/v1/flags/{event_flag.id}?delete_entity=true", headers=auth_headers(leader)
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Flagged event deleted"}
    assert client.get(f"/api/v1/events/{event.id}").status_code == status.HTTP_404_NOT_FOUND


def test_leader_cannot_delete_flagged_club(client, leader, club_flag, auth_headers) -> None:
    response = client.delete(
        f"/api/v1/flags/{club_flag.id}?delete_entity=true", headers=auth_headers(leader)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_deletes_flagged_club(client, admin, approved_club, club_flag, auth_headers) -> None:
    response = client.delete(
        f"/api/v1/flags/{club_flag.id}?delete_entity=true", headers=auth_headers(admin)
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Flagged club deleted"}

    log = client.get(
        "/api/v1/admin/logs",
        params={"entity_id": str(approved_club.id)},
        headers=auth_headers(admin),
    )
    assert [entry["action"] for entry in log.json()] == ["delete_club"]


def test_unknown_flag(client, admin, auth_headers) -> None:
    response = client.patch(
        "/api/v1/flags/00000000-0000-0000-0000-000000000000",
        json={"status": "reviewed"},
        headers=auth_headers(admin),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
