"""
Tests for UserRepository.
"""
import pytest

pytestmark = pytest.mark.unit


class TestUpsertDiscordUser:
    def test_first_sign_in_creates_user(self, temp_db):
        user = temp_db.users.upsert_discord_user(
            "1234", "kazuma", email="k@example.com", name="Kazuma", image="https://cdn/a.png"
        )

        assert user["discord_id"] == "1234"
        assert user["username"] == "kazuma"
        assert user["role"] == "USER"
        assert user["created_at"] is not None

    def test_second_sign_in_refreshes_profile(self, temp_db):
        first = temp_db.users.upsert_discord_user("1234", "kazuma")
        second = temp_db.users.upsert_discord_user("1234", "kazuma_renamed", image="new.png")

        assert second["id"] == first["id"]
        assert second["username"] == "kazuma_renamed"
        assert second["image"] == "new.png"
        assert temp_db.conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1

    def test_role_is_preserved(self, temp_db):
        user = temp_db.users.upsert_discord_user("1234", "kazuma")
        temp_db.users.update_role(user["id"], "MODERATOR")

        again = temp_db.users.upsert_discord_user("1234", "kazuma")
        assert again["role"] == "MODERATOR"


class TestLookups:
    def test_by_discord_id(self, temp_db, make_user):
        user = make_user("aqua")
        assert temp_db.users.get_by_discord_id("discord-aqua")["id"] == user["id"]
        assert temp_db.users.get_by_discord_id("nobody") is None

    def test_with_counts(self, temp_db, make_user):
        user = make_user("megumin")
        temp_db.builds.create(user["id"], "Explosion", "MAGE")
        temp_db.guides.create(user["id"], "Explosions 101", "explosions-101", "Boom", "Classes")

        counted = temp_db.users.get_with_counts(user["id"])
        assert counted["builds_count"] == 1
        assert counted["guides_count"] == 1
        assert counted["votes_count"] == 0


class TestListUsers:
    @pytest.fixture
    def users(self, make_user, temp_db):
        admin = make_user("darkness", role="ADMIN")
        mod = make_user("wiz", role="MODERATOR")
        builder = make_user("chris")
        temp_db.builds.create(builder["id"], "A", "NINJA")
        temp_db.builds.create(builder["id"], "B", "NINJA")
        return {"admin": admin, "mod": mod, "builder": builder}

    def test_newest_first(self, temp_db, users):
        rows, total = temp_db.users.list_users()
        assert total == 3
        assert [u["username"] for u in rows] == ["chris", "wiz", "darkness"]

    def test_role_filter(self, temp_db, users):
        rows, total = temp_db.users.list_users(role="MODERATOR")
        assert total == 1
        assert rows[0]["username"] == "wiz"

        _, total = temp_db.users.list_users(role="all")
        assert total == 3

    def test_search_matches_email(self, temp_db, users):
        rows, _ = temp_db.users.list_users(search="darkness@")
        assert [u["username"] for u in rows] == ["darkness"]

    def test_most_builds(self, temp_db, users):
        rows, _ = temp_db.users.list_users(sort_by="most-builds")
        assert rows[0]["username"] == "chris"
        assert rows[0]["builds_count"] == 2


class TestRoleStats:
    def test_empty(self, temp_db):
        assert temp_db.users.role_stats() == {
            "total_users": 0,
            "admins": 0,
            "moderators": 0,
            "new_this_week": 0,
        }

    def test_counts(self, temp_db, make_user):
        make_user("a", role="ADMIN")
        make_user("m", role="MODERATOR")
        make_user("u")
        make_user("old")
        temp_db.conn.execute(
            "UPDATE users SET created_at = datetime('now', '-30 days') WHERE username = 'old'"
        )
        temp_db.conn.commit()

        assert temp_db.users.role_stats() == {
            "total_users": 4,
            "admins": 1,
            "moderators": 1,
            "new_this_week": 3,
        }


def test_delete(temp_db, make_user):
    user = make_user("gone")
    assert temp_db.users.delete(user["id"]) is True
    assert temp_db.users.get_by_id(user["id"]) is None
    assert temp_db.users.delete(user["id"]) is False
