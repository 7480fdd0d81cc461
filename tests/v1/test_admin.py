# mypy: ignore-errors
"""Tests for the admin moderation endpoints."""

from fastapi import status

from campus_connect.models.enums import ApprovalStatus


def test_approve_pending_club(client, admin, pending_club, auth_headers) -> None:
    response = client.post(
        f"/api/v1/admin/clubs/{pending_club.id}/approve", headers=auth_headers(admin)
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["approval_status"] == "approved"
    assert data["approved_by"] == str(admin.id)

    # Approving twice is harmless and logs once.
    again = client.post(
        f"/api/v1/admin/clubs/{pending_club.id}/approve", headers=auth_headers(admin)
    )
    assert again.status_code == status.HTTP_200_OK
    log = client.get("/api/v1/admin/logs", headers=auth_headers(admin))
    assert [entry["action"] for entry in log.json()] == ["club_approved"]


def test_approve_with_stale_expectation(client, admin, pending_club, auth_headers) -> None:
    response = client.post(
        f"/api/v1/admin/clubs/{pending_club.id}/approve",
        json={"expected_status": "rejected"},
        headers=auth_headers(admin),
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_reject_requires_reason(client, admin, pending_club, auth_headers) -> None:
    response = client.post(
        f"/api/v1/admin/clubs/{pending_club.id}/reject",
        json={"reason": ""},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422


def test_reject_and_list(client, admin, pending_club, auth_headers) -> None:
    response = client.post(
        f"/api/v1/admin/clubs/{pending_club.id}/reject",
        json={"reason": "Please add a faculty advisor"},
        headers=auth_headers(admin),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["rejection_reason"] == "Please add a faculty advisor"

    rejected = client.get("/api/v1/admin/clubs/rejected", headers=auth_headers(admin))
    assert [c["id"] for c in rejected.json()] == [str(pending_club.id)]
    pending = client.get("/api/v1/admin/clubs/pending", headers=auth_headers(admin))
    assert pending.json() == []


def test_admin_endpoints_refuse_leaders(client, leader, pending_club, auth_headers) -> None:
    headers = auth_headers(leader)
    assert (
        client.post(f"/api/v1/admin/clubs/{pending_club.id}/approve", headers=headers).status_code
        == status.HTTP_403_FORBIDDEN
    )
    assert client.get("/api/v1/admin/clubs/pending", headers=headers).status_code == (
        status.HTTP_403_FORBIDDEN
    )
    assert client.get("/api/v1/admin/logs", headers=headers).status_code == (
        status.HTTP_403_FORBIDDEN
    )
    assert client.get("/api/v1/admin/stats", headers=headers).status_code == (
        status.HTTP_403_FORBIDDEN
    )


def test_admin_flag_queue(client, admin, student, event, auth_headers) -> None:
    client.post(
        f"/api/v1/events/{event.id}/flag",
        json={"reason": "Spam"},
        headers=auth_headers(student),
    )
    response = client.get(
        "/api/v1/admin/flags", params={"status": "pending"}, headers=auth_headers(admin)
    )
    assert response.status_code == status.HTTP_200_OK
    assert [f["entity_id"] for f in response.json()] == [str(event.id)]

    none_for_clubs = client.get(
        "/api/v1/admin/flags", params={"entity_type": "club"}, headers=auth_headers(admin)
    )
    assert none_for_clubs.json() == []


def test_stats(client, admin, leader, make_club, auth_headers) -> None:
    make_club(leader, ApprovalStatus.PENDING, name="Waiting")
    response = client.get("/api/v1/admin/stats", headers=auth_headers(admin))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["summary"]["pending_clubs"] == 1
    assert data["summary"]["requires_attention"] is True
    assert data["clubs"]["total"] == 1
    assert data["recent_activity"] == []
