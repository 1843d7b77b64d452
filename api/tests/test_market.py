"""Tests for trade market listings and comments."""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


def _listing_body(**overrides: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "title": "WTS Iron Sword +3",
        "description": "Clean roll",
        "item_name": "Iron Sword",
        "item_type": "WEAPON",
        "item_rarity": "COMMON",
        "price_amount": 500,
        "price_currency": "ARCHON",
    }
    body.update(overrides)
    return body


@pytest.fixture
def listing(client: TestClient, user_headers) -> Dict[str, Any]:
    response = client.post("/api/v1/market", json=_listing_body(), headers=user_headers)
    assert response.status_code == 201
    return response.json()


class TestCreateListing:
    def test_requires_sign_in(self, client: TestClient):
        assert client.post("/api/v1/market", json=_listing_body()).status_code == 401

    def test_create(self, client: TestClient, user, listing):
        assert listing["seller"]["id"] == user["id"]
        assert listing["status"] == "ACTIVE"
        assert listing["view_count"] == 0
        assert listing["comments_count"] == 0
        assert listing["enchantments"] == []

    def test_price_must_be_positive(self, client: TestClient, user_headers):
        response = client.post(
            "/api/v1/market", json=_listing_body(price_amount=0), headers=user_headers
        )
        assert response.status_code == 422

    def test_unknown_currency(self, client: TestClient, user_headers):
        response = client.post(
            "/api/v1/market", json=_listing_body(price_currency="GOLD"), headers=user_headers
        )
        assert response.status_code == 422


class TestListListings:
    def test_defaults_to_active(self, client: TestClient, user_headers, listing):
        sold = client.post(
            "/api/v1/market", json=_listing_body(title="Old sale"), headers=user_headers
        ).json()
        client.put(f"/api/v1/market/{sold['id']}", json={"status": "SOLD"}, headers=user_headers)

        active = client.get("/api/v1/market").json()
        assert [l["id"] for l in active["listings"]] == [listing["id"]]

        everything = client.get("/api/v1/market?status=all").json()
        assert everything["total"] == 2

    def test_sort_by_price(self, client: TestClient, user_headers, listing):
        client.post("/api/v1/market", json=_listing_body(price_amount=50), headers=user_headers)
        client.post("/api/v1/market", json=_listing_body(price_amount=5000), headers=user_headers)

        prices = [
            l["price_amount"]
            for l in client.get("/api/v1/market?sort_by=price-low").json()["listings"]
        ]
        assert prices == [50, 500, 5000]

    def test_filters(self, client: TestClient, user_headers, listing):
        client.post(
            "/api/v1/market",
            json=_listing_body(
                title="Rare ring", item_name="Ruby Ring", item_type="RING",
                item_rarity="RARE", price_currency="PREMIUM",
            ),
            headers=user_headers,
        )
        assert client.get("/api/v1/market?item_type=RING").json()["total"] == 1
        assert client.get("/api/v1/market?currency=ARCHON").json()["total"] == 1
        assert client.get("/api/v1/market?search=ruby").json()["total"] == 1

    def test_invalid_status(self, client: TestClient):
        assert client.get("/api/v1/market?status=EXPIRED").status_code == 422


class TestListingDetail:
    def test_view_counted(self, client: TestClient, listing):
        client.get(f"/api/v1/market/{listing['id']}")
        data = client.get(f"/api/v1/market/{listing['id']}").json()
        assert data["view_count"] == 2
        assert data["comments"] == []
        assert data["item_stats"] is None

    def test_gear_listing_shows_item_stats(self, client: TestClient, user_headers, sword, fury):
        created = client.post(
            "/api/v1/market",
            json=_listing_body(
                item_id=sword["id"],
                is_gear=True,
                enhancement_level=1,
                enchantments=[{"id": fury["id"], "name": "Fury", "stat_key": "attack", "value": 4}],
            ),
            headers=user_headers,
        ).json()

        data = client.get(f"/api/v1/market/{created['id']}").json()
        # 16-22 base, +1 bonus 2-3, enchantment +4
        assert data["item_stats"]["attack"] == {"min": 22, "max": 29}

    def test_missing_listing(self, client: TestClient):
        assert client.get("/api/v1/market/404").status_code == 404


class TestUpdateDeleteListing:
    def test_seller_updates(self, client: TestClient, user_headers, listing):
        response = client.put(
            f"/api/v1/market/{listing['id']}",
            json={"price_amount": 450, "status": "SOLD"},
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json()["price_amount"] == 450
        assert response.json()["status"] == "SOLD"

    def test_non_seller_cannot_update(self, client: TestClient, other_headers, listing):
        response = client.put(
            f"/api/v1/market/{listing['id']}", json={"price_amount": 1}, headers=other_headers
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized"

    def test_non_seller_cannot_delete(self, client: TestClient, other_headers, listing):
        response = client.delete(f"/api/v1/market/{listing['id']}", headers=other_headers)
        assert response.status_code == 403

    def test_moderator_can_delete(self, client: TestClient, moderator_headers, listing):
        response = client.delete(f"/api/v1/market/{listing['id']}", headers=moderator_headers)
        assert response.status_code == 200
        assert client.get(f"/api/v1/market/{listing['id']}").status_code == 404

    def test_seller_can_delete(self, client: TestClient, user_headers, listing):
        response = client.delete(f"/api/v1/market/{listing['id']}", headers=user_headers)
        assert response.json() == {"success": True}


class TestComments:
    def test_add_and_list_newest_first(self, client: TestClient, other_user, other_headers, listing):
        url = f"/api/v1/market/{listing['id']}/comments"
        first = client.post(url, json={"content": "Still available?"}, headers=other_headers)
        assert first.status_code == 201
        assert first.json()["user"]["id"] == other_user["id"]
        client.post(url, json={"content": "  Offer 400  "}, headers=other_headers)

        comments = client.get(url).json()["comments"]
        assert [c["content"] for c in comments] == ["Offer 400", "Still available?"]

        detail = client.get(f"/api/v1/market/{listing['id']}").json()
        assert detail["comments_count"] == 2
        assert len(detail["comments"]) == 2

    def test_comment_requires_sign_in(self, client: TestClient, listing):
        url = f"/api/v1/market/{listing['id']}/comments"
        assert client.post(url, json={"content": "hi"}).status_code == 401

    def test_blank_comment_rejected(self, client: TestClient, user_headers, listing):
        url = f"/api/v1/market/{listing['id']}/comments"
        response = client.post(url, json={"content": "   "}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Comment content is required"

    def test_comment_too_long(self, client: TestClient, user_headers, listing):
        url = f"/api/v1/market/{listing['id']}/comments"
        response = client.post(url, json={"content": "x" * 2001}, headers=user_headers)
        assert response.status_code == 422

    def test_comments_on_missing_listing(self, client: TestClient, user_headers):
        assert client.get("/api/v1/market/404/comments").status_code == 404
        response = client.post(
            "/api/v1/market/404/comments", json={"content": "hello"}, headers=user_headers
        )
        assert response.status_code == 404
