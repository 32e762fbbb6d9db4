"""Integration tests for the newsletter admin endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api.errors import register_exception_handlers
from storefront.api.newsletter import newsletter_router
from storefront.channel import EMAIL, get_channel

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(newsletter_router)
    register_exception_handlers(app)
    return TestClient(app)


def _subscribe(client, email):
    assert client.post("/newsletter/subscribe", json={"email": email}).status_code == 201


class TestNewsletterAdminEndpoints:
    def test_list_requires_admin(self, client):
        assert client.get("/newsletter").status_code == 401
        assert client.get("/newsletter", headers={"X-User-Id": "cust-1"}).status_code == 403

    def test_list_and_delete(self, client):
        _subscribe(client, "reader@example.com")
        [subscriber] = client.get("/newsletter", headers=ADMIN).json()
        assert subscriber["email"] == "reader@example.com"
        assert subscriber["is_active"] is True

        response = client.delete(f"/newsletter/{subscriber['subscriber_id']}", headers=ADMIN)
        assert response.status_code == 200
        assert client.get("/newsletter", headers=ADMIN).json() == []

    def test_delete_unknown_is_404(self, client):
        assert client.delete("/newsletter/missing", headers=ADMIN).status_code == 404

    def test_bulk_delete(self, client):
        for email in ("a@example.com", "b@example.com", "c@example.com"):
            _subscribe(client, email)
        ids = [s["subscriber_id"] for s in client.get("/newsletter", headers=ADMIN).json()][:2]

        response = client.request("DELETE", "/newsletter", json={"ids": ids}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json() == {"deleted": 2, "message": "2 subscription(s) deleted"}
        assert len(client.get("/newsletter", headers=ADMIN).json()) == 1

    def test_bulk_delete_needs_ids(self, client):
        response = client.request("DELETE", "/newsletter", json={"ids": []}, headers=ADMIN)
        assert response.status_code == 400

    def test_bulk_delete_nothing_found_is_404(self, client):
        response = client.request("DELETE", "/newsletter", json={"ids": ["missing"]}, headers=ADMIN)
        assert response.status_code == 404

    def test_send_email(self, client):
        response = client.post(
            "/newsletter/send-email",
            json={"emails": ["a@example.com", "b@example.com"], "subject": "Sale", "message": "30% off parkas"},
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json() == {"sent": 2, "failed": []}
        assert len(get_channel(EMAIL).sent_emails) == 2

    def test_send_email_needs_subject_and_message(self, client):
        response = client.post(
            "/newsletter/send-email",
            json={"emails": ["a@example.com"], "subject": "", "message": ""},
            headers=ADMIN,
        )
        assert response.status_code == 400
        assert get_channel(EMAIL).sent_emails == []
