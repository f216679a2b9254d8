import uuid

import pytest

from app.models.document import Notification


def _make(db_session, person, message):
    n = Notification(
        person_id=person.id,
        message=message,
        event_type="permission_request.approved",
        entity_type="permission_request",
        entity_id=str(uuid.uuid4()),
    )
    db_session.add(n)
    return n


@pytest.fixture()
def notification(db_session, person):
    n = _make(db_session, person, "Test Notification")
    db_session.commit()
    db_session.refresh(n)
    return n


@pytest.fixture()
def notifications_batch(db_session, person):
    items = [_make(db_session, person, f"Notification {i}") for i in range(3)]
    db_session.commit()
    for n in items:
        db_session.refresh(n)
    return items


class TestNotificationEndpoints:
    def test_list_me(self, client, auth_headers, notifications_batch) -> None:
        resp = client.get("/notifications/me", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 3
        assert len(data["items"]) == 3

    def test_list_bare_path(self, client, auth_headers, notifications_batch) -> None:
        resp = client.get("/api/v1/notifications", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["count"] == 3

    def test_list_is_scoped_to_caller(
        self, client, other_headers, notifications_batch
    ) -> None:
        resp = client.get("/notifications/me", headers=other_headers)
        assert resp.json()["count"] == 0

    def test_list_with_limit(self, client, auth_headers, notifications_batch) -> None:
        resp = client.get("/notifications/me?limit=2&offset=0", headers=auth_headers)
        data = resp.json()
        assert data["count"] == 2
        assert data["limit"] == 2

    def test_unread_count(self, client, auth_headers, notifications_batch) -> None:
        resp = client.get("/notifications/unread-count", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"count": 3}

    def test_mark_read(self, client, auth_headers, notification) -> None:
        resp = client.post(
            f"/notifications/{notification.id}/read", headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.json()["is_read"] is True
        assert resp.json()["read_at"] is not None

        unread = client.get("/notifications/me?is_read=false", headers=auth_headers)
        assert unread.json()["count"] == 0

    def test_mark_read_not_owner(self, client, other_headers, notification) -> None:
        resp = client.post(
            f"/notifications/{notification.id}/read", headers=other_headers
        )
        assert resp.status_code == 404

    def test_requires_auth(self, client) -> None:
        resp = client.get("/notifications/me")
        assert resp.status_code == 401


class TestOperationalEndpoints:
    def test_health(self, client) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_metrics(self, client) -> None:
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "permission_request_resolutions_total" in resp.text
