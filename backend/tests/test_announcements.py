from __future__ import annotations

from datetime import datetime, timedelta, timezone

from backend.app import models, schemas
from backend.app.services import AnnouncementService

ADMIN_ANNOUNCEMENTS = "/default-alive-or-dead/admin/announcements"
ANNOUNCEMENTS = "/default-alive-or-dead/announcements"


def _create(client, **overrides):
    payload = {"title": "Planned downtime", "content": "Back in an hour.", "type": "maintenance"}
    payload.update(overrides)
    response = client.post(ADMIN_ANNOUNCEMENTS, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_announcement_records_author_and_activity(client, security_settings) -> None:
    created = _create(client)

    assert created["type"] == "maintenance"
    assert created["is_active"] is True
    assert created["expires_at"] is None
    assert created["created_by"] == security_settings["username"]

    activity = client.get("/admin/activity").json()
    assert activity[0]["action"] == "create_announcement"
    assert activity[0]["resource_id"] == created["id"]


def test_members_only_see_active_unexpired_announcements(client, member_headers) -> None:
    visible = _create(client, title="Visible")
    _create(client, title="Expired", expires_at="2020-01-01T00:00:00Z")
    _create(client, title="Scheduled end", expires_at="2999-01-01T00:00:00Z")
    hidden = _create(client, title="Hidden")
    client.delete(f"{ADMIN_ANNOUNCEMENTS}/{hidden['id']}")

    response = client.get(ANNOUNCEMENTS, headers=member_headers)

    assert response.status_code == 200
    assert {item["title"] for item in response.json()} == {visible["title"], "Scheduled end"}
    admin_listing = client.get(ADMIN_ANNOUNCEMENTS).json()
    assert len(admin_listing) == 4


def test_update_announcement(client) -> None:
    created = _create(client, expires_at="2999-01-01T00:00:00Z")

    response = client.put(
        f"{ADMIN_ANNOUNCEMENTS}/{created['id']}",
        json={"type": "warning", "expires_at": None},
    )

    assert response.status_code == 200, response.text
    assert response.json()["type"] == "warning"
    assert response.json()["expires_at"] is None
    assert response.json()["title"] == created["title"]


def test_update_rejects_null_title(client) -> None:
    created = _create(client)

    response = client.put(f"{ADMIN_ANNOUNCEMENTS}/{created['id']}", json={"title": None})

    assert response.status_code == 400


def test_deactivate_keeps_the_record(client, db_session) -> None:
    created = _create(client)

    response = client.delete(f"{ADMIN_ANNOUNCEMENTS}/{created['id']}")

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert db_session.query(models.Announcement).count() == 1


def test_unknown_announcement_returns_404(client) -> None:
    missing = "00000000-0000-0000-0000-000000000000"

    assert client.put(f"{ADMIN_ANNOUNCEMENTS}/{missing}", json={"title": "x"}).status_code == 404
    assert client.delete(f"{ADMIN_ANNOUNCEMENTS}/{missing}").status_code == 404


def test_invalid_payloads_are_rejected(client) -> None:
    unknown_type = {"title": "x", "content": "y", "type": "alert"}
    blank_title = {"title": "   ", "content": "y"}

    assert client.post(ADMIN_ANNOUNCEMENTS, json=unknown_type).status_code == 422
    assert client.post(ADMIN_ANNOUNCEMENTS, json=blank_title).status_code == 422


def test_admin_routes_require_an_administrator(client, member_headers) -> None:
    response = client.post(
        ADMIN_ANNOUNCEMENTS,
        json={"title": "x", "content": "y"},
        headers=member_headers,
    )

    assert response.status_code == 403
    assert client.get(ADMIN_ANNOUNCEMENTS, headers=member_headers).status_code == 403


def test_member_listing_requires_a_token(client) -> None:
    client.headers.pop("Authorization")

    assert client.get(ANNOUNCEMENTS).status_code == 401


def test_offset_expiry_is_compared_in_utc(db_session) -> None:
    now = datetime(2024, 12, 1, 12, 0, tzinfo=timezone.utc)
    AnnouncementService.create_announcement(
        db_session,
        schemas.AnnouncementCreate(
            title="Offset expiry",
            content="Ends at 13:00 UTC",
            expires_at="2024-12-01T08:00:00-05:00",
        ),
    )

    active = AnnouncementService.list_active(db_session, now=now)

    assert [item.title for item in active] == ["Offset expiry"]
    assert AnnouncementService.list_active(db_session, now=now + timedelta(hours=2)) == []
