"""Tests for bestiary endpoints."""

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


@pytest.fixture
def mobs(database):
    common = {"mob_type": "NORMAL", "category": "BEAST"}
    database.mobs.create(name="Forest Wolf", slug="forest-wolf", level=5, biome="FOREST", **common)
    database.mobs.create(
        name="Cave Troll", slug="cave-troll", level=18, biome="CAVE",
        mob_type="BOSS", category="GIANT", drops=[{"item_name": "Troll Hide", "drop_rate": 0.25}],
    )
    database.mobs.create(
        name="Ghost Wolf", slug="ghost-wolf", level=9, is_active=False, **common
    )


class TestListMobs:
    def test_only_active_mobs_by_level(self, client: TestClient, mobs):
        data = client.get("/api/v1/mobs").json()
        assert [m["slug"] for m in data["mobs"]] == ["forest-wolf", "cave-troll"]
        assert data["total"] == 2

    def test_level_range(self, client: TestClient, mobs):
        data = client.get("/api/v1/mobs?min_level=10&max_level=20").json()
        assert [m["slug"] for m in data["mobs"]] == ["cave-troll"]

    def test_filters(self, client: TestClient, mobs):
        assert client.get("/api/v1/mobs?mob_type=BOSS").json()["total"] == 1
        assert client.get("/api/v1/mobs?biome=FOREST").json()["total"] == 1
        assert client.get("/api/v1/mobs?category=all").json()["total"] == 2
        assert client.get("/api/v1/mobs?search=wolf").json()["total"] == 1


class TestGetMob:
    def test_get_mob_with_drops(self, client: TestClient, mobs):
        data = client.get("/api/v1/mobs/cave-troll").json()
        assert data["name"] == "Cave Troll"
        assert data["drops"] == [{"item_name": "Troll Hide", "drop_rate": 0.25}]

    def test_inactive_mob_hidden(self, client: TestClient, mobs):
        assert client.get("/api/v1/mobs/ghost-wolf").status_code == 404

    def test_missing_mob(self, client: TestClient):
        assert client.get("/api/v1/mobs/dragon").status_code == 404
