"""Unit tests for epitome.seed_data."""
import pytest

from epitome.seed_data import seed_items, starter_items

pytestmark = pytest.mark.unit


class TestStarterItems:
    def test_catalogue(self):
        items = starter_items()
        assert len(items) == 29
        assert len({item["slug"] for item in items}) == 29

    def test_item_fields(self):
        sword = next(item for item in starter_items() if item["name"] == "Iron Sword")
        assert sword == {
            "name": "Iron Sword",
            "slug": "iron-sword",
            "type": "WEAPON",
            "rarity": "COMMON",
            "level": 10,
            "required_level": 10,
            "stats": {"attack": 25},
            "image_url": "/game-images/items/weapons/iron-sword.webp",
            "is_gear": True,
        }


class TestSeedItems:
    def test_seeds_empty_database(self, temp_db):
        created, skipped = seed_items(temp_db)
        assert (created, skipped) == (29, 0)

        helmet = temp_db.items.get_by_slug("iron-helmet")
        assert helmet["stats"] == {"defense": 15, "hp": 50}
        assert helmet["is_gear"] is True

    def test_rerun_skips_existing(self, temp_db):
        seed_items(temp_db)
        temp_db.items.update(temp_db.items.get_by_slug("iron-sword")["id"], rarity="RARE")

        assert seed_items(temp_db) == (0, 29)
        assert temp_db.items.get_by_slug("iron-sword")["rarity"] == "RARE"
