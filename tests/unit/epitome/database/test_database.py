"""
Tests for epitome.database.Database - schema creation, migrations and
cross-table behaviour (cascades, transactions).
"""
import sqlite3

import pytest

from epitome.database import SCHEMA_VERSION, Database
from epitome.database.schema import CREATE_SCHEMA_SQL

pytestmark = pytest.mark.unit


def _columns(db: Database, table: str):
    return {row["name"] for row in db.conn.execute(f"PRAGMA table_info({table})")}


class TestSchema:
    def test_fresh_database_is_current(self, temp_db):
        assert temp_db.get_schema_version() == SCHEMA_VERSION

    def test_all_tables_created(self, temp_db):
        tables = {
            row["name"]
            for row in temp_db.conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {
            "users", "builds", "votes", "items", "enchantments", "mobs", "class_info",
            "guides", "trade_listings", "trade_comments", "map_markers",
            "gear_stats", "mob_types",
        } <= tables

    def test_reopen_keeps_data(self, tmp_path):
        path = tmp_path / "epitome.db"
        db = Database(path)
        db.items.create(name="Ore", slug="ore", type="MATERIAL", rarity="COMMON", stats={})
        db.close()

        reopened = Database(path)
        try:
            assert reopened.items.get_by_slug("ore")["name"] == "Ore"
            versions = reopened.conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
            assert versions == 1
        finally:
            reopened.close()

    def test_default_path(self, tmp_path, monkeypatch):
        monkeypatch.setattr("epitome.database.base.Path.home", lambda: tmp_path)
        db = Database()
        try:
            assert db.db_path == tmp_path / ".epitome" / "epitome.db"
        finally:
            db.close()


class TestMigration:
    @pytest.fixture
    def v1_path(self, tmp_path):
        """A v1 database: items without the enhancement columns."""
        path = tmp_path / "v1.db"
        conn = sqlite3.connect(str(path))
        conn.executescript(CREATE_SCHEMA_SQL)
        conn.execute("ALTER TABLE items DROP COLUMN enhancement_bonuses_json")
        conn.execute("ALTER TABLE items DROP COLUMN enhancement_materials_json")
        conn.execute("INSERT INTO schema_version (version) VALUES (1)")
        conn.execute(
            "INSERT INTO items (name, slug, type, rarity, stats_json, is_gear) "
            "VALUES ('Old Axe', 'old-axe', 'WEAPON', 'COMMON', '{\"attack\": 9}', 1)"
        )
        conn.commit()
        conn.close()
        return path

    def test_v1_to_v2_adds_enhancement_columns(self, v1_path):
        db = Database(v1_path)
        try:
            assert db.get_schema_version() == SCHEMA_VERSION
            assert {"enhancement_bonuses_json", "enhancement_materials_json"} <= _columns(db, "items")

            axe = db.items.get_by_slug("old-axe")
            assert axe["stats"] == {"attack": 9}
            assert axe["enhancement_bonuses"] == {}
            assert axe["enhancement_materials"] == {}
        finally:
            db.close()


class TestCascades:
    def test_deleting_user_removes_owned_content(self, temp_db, make_user):
        owner = make_user("owner")
        voter = make_user("voter")
        build_id = temp_db.builds.create(owner["id"], "Tank", "WARRIOR")
        temp_db.builds.vote(build_id, voter["id"], "up")
        listing_id = temp_db.market.create_listing(
            seller_id=owner["id"], title="Sword", item_name="Sword", item_type="WEAPON",
            item_rarity="COMMON", price_amount=10, price_currency="ARCHON",
        )
        temp_db.market.add_comment(listing_id, voter["id"], "mine")

        temp_db.users.delete(owner["id"])

        assert temp_db.builds.get(build_id) is None
        assert temp_db.market.get_listing(listing_id) is None
        assert temp_db.conn.execute("SELECT COUNT(*) FROM votes").fetchone()[0] == 0
        assert temp_db.conn.execute("SELECT COUNT(*) FROM trade_comments").fetchone()[0] == 0

    def test_deleting_mob_unlinks_markers(self, temp_db):
        mob_id = temp_db.mobs.create(
            name="Wolf", slug="wolf", level=3, mob_type="NORMAL", category="BEAST"
        )
        marker_id = temp_db.map_markers.create(name="Den", type="SPAWN_GENERAL", x=1, y=1, mob_id=mob_id)

        temp_db.mobs.delete(mob_id)

        marker = temp_db.map_markers.get(marker_id)
        assert marker["mob_id"] is None
        assert marker["mob"] is None


class TestTransaction:
    def test_rolls_back_on_error(self, temp_db):
        with pytest.raises(sqlite3.IntegrityError):
            with temp_db.transaction() as conn:
                conn.execute(
                    "INSERT INTO gear_stats (name, display_name) VALUES ('hp', 'HP')"
                )
                conn.execute(
                    "INSERT INTO gear_stats (name, display_name) VALUES ('hp', 'HP again')"
                )

        assert temp_db.taxonomy.list_gear_stats() == []
