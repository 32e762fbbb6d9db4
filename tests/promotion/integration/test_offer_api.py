"""Integration tests for the offer endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api.errors import register_exception_handlers
from storefront.api.offers import offer_router
from storefront.media import get_image_store

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
CUSTOMER = {"X-User-Id": "cust-1"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(offer_router)
    register_exception_handlers(app)
    return TestClient(app)


def _upload(client, filename="sale.jpg"):
    response = client.post(
        "/offers/images",
        params={"filename": filename},
        content=b"\xff\xd8\xff",
        headers={**ADMIN, "Content-Type": "image/jpeg"},
    )
    assert response.status_code == 201
    return response.json()["url"]


def _create(client, title="Winter Sale", show_on_main_page=True):
    payload = {
        "title": title,
        "description": "Parkas at 30% off",
        "image": _upload(client),
        "showOnMainPage": show_on_main_page,
    }
    response = client.post("/offers", json=payload, headers=ADMIN)
    assert response.status_code == 201
    return response.json()["offer_id"]


class TestOfferEndpoints:
    def test_create_and_list(self, client):
        offer_id = _create(client)
        _create(client, title="Hidden", show_on_main_page=False)

        featured = client.get("/offers").json()
        assert [o["offer_id"] for o in featured] == [offer_id]

        everything = client.get("/offers/admin", headers=ADMIN).json()
        assert {o["title"] for o in everything} == {"Winter Sale", "Hidden"}

    def test_public_list_caps_at_four(self, client):
        for n in range(4):
            _create(client, title=f"Offer {n}")
        response = client.post(
            "/offers",
            json={"title": "Fifth", "description": "Too many", "image": "memory://images/x.jpg"},
            headers=ADMIN,
        )
        assert response.status_code == 400
        assert len(client.get("/offers").json()) == 4

    def test_management_requires_admin(self, client):
        payload = {"title": "Sale", "description": "Sale", "image": "memory://images/x.jpg"}
        assert client.post("/offers", json=payload).status_code == 401
        assert client.post("/offers", json=payload, headers=CUSTOMER).status_code == 403
        assert client.get("/offers/admin", headers=CUSTOMER).status_code == 403

    def test_upload_rejects_non_images(self, client):
        response = client.post(
            "/offers/images",
            params={"filename": "notes.txt"},
            content=b"hello",
            headers={**ADMIN, "Content-Type": "text/plain"},
        )
        assert response.status_code == 400

    def test_replacing_image_drops_the_old_file(self, client):
        offer_id = _create(client)
        old_image = client.get("/offers/admin", headers=ADMIN).json()[0]["image"]
        new_image = _upload(client, filename="spring.jpg")

        response = client.put(
            f"/offers/{offer_id}",
            json={"title": "Spring Sale", "description": "Light jackets", "image": new_image},
            headers=ADMIN,
        )
        assert response.status_code == 200

        store = get_image_store()
        assert old_image not in store.uploads
        assert new_image in store.uploads
        assert client.get("/offers").json()[0]["title"] == "Spring Sale"

    def test_delete_offer_and_its_image(self, client):
        offer_id = _create(client)
        image = client.get("/offers").json()[0]["image"]

        assert client.delete(f"/offers/{offer_id}", headers=ADMIN).status_code == 200
        assert client.get("/offers").json() == []
        assert image not in get_image_store().uploads

    def test_unknown_offer_is_404(self, client):
        assert client.delete("/offers/missing", headers=ADMIN).status_code == 404
        response = client.put("/offers/missing", json={"title": "T", "description": "D"}, headers=ADMIN)
        assert response.status_code == 404
