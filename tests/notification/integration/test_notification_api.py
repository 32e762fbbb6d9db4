"""Integration tests for the inbox endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain

from storefront.api.errors import register_exception_handlers
from storefront.api.notifications import notification_router
from storefront.notification.notification import Notification

OWNER = {"X-User-Id": "cust-1"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(notification_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def inbox():
    repo = current_domain.repository_for(Notification)
    ids = []
    for message in ("Welcome to the shop", "Your order #ord-1 has been shipped"):
        notification = Notification.create(user_id="cust-1", message=message)
        repo.add(notification)
        ids.append(str(notification.id))
    return ids


class TestInboxEndpoints:
    def test_requires_identity(self, client):
        assert client.get("/notifications").status_code == 401

    def test_list_newest_first(self, client, inbox):
        response = client.get("/notifications", headers=OWNER)
        assert response.status_code == 200
        assert [n["notification_id"] for n in response.json()] == list(reversed(inbox))

    def test_other_users_see_nothing(self, client, inbox):
        response = client.get("/notifications", headers={"X-User-Id": "cust-2"})
        assert response.json() == []

    def test_mark_one_read(self, client, inbox):
        response = client.put(f"/notifications/{inbox[0]}/read", headers=OWNER)
        assert response.status_code == 200
        assert client.get("/notifications/unread-count", headers=OWNER).json() == {"unread": 1}

    def test_cannot_mark_someone_elses_notification(self, client, inbox):
        response = client.put(f"/notifications/{inbox[0]}/read", headers={"X-User-Id": "cust-2"})
        assert response.status_code == 403

    def test_unknown_notification(self, client):
        response = client.put("/notifications/missing/read", headers=OWNER)
        assert response.status_code == 404

    def test_mark_all_read(self, client, inbox):
        response = client.put("/notifications/read-all", headers=OWNER)
        assert response.json() == {"updated": 2}
        assert client.get("/notifications/unread-count", headers=OWNER).json() == {"unread": 0}
