"""
Tests for BuildRepository: storage, listing filters and vote toggling.
"""
import pytest

pytestmark = pytest.mark.unit


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def build_id(temp_db, owner):
    return temp_db.builds.create(
        owner["id"],
        "Glass Cannon",
        "MAGE",
        level=30,
        tags=["pve", "burst"],
        stats_allocation={"vig": 10, "int": 80, "str": 0, "dex": 5},
        skill_points={"fireball": 20},
    )


class TestCreateAndGet:
    def test_round_trip(self, temp_db, owner, build_id):
        build = temp_db.builds.get(build_id)

        assert build["title"] == "Glass Cannon"
        assert build["character_class"] == "MAGE"
        assert build["tags"] == ["pve", "burst"]
        assert build["stats_allocation"]["int"] == 80
        assert build["skill_points"] == {"fireball": 20}
        assert build["equipment"] is None
        assert build["is_published"] is True
        assert build["upvotes"] == 0
        assert build["user"] == {
            "id": owner["id"],
            "name": "Owner",
            "username": "owner",
            "image": None,
        }

    def test_default_allocation(self, temp_db, owner):
        build = temp_db.builds.get(temp_db.builds.create(owner["id"], "Empty", "NINJA"))
        assert build["stats_allocation"] == {"vig": 0, "int": 0, "str": 0, "dex": 0}
        assert build["tags"] == []

    def test_missing(self, temp_db):
        assert temp_db.builds.get(404) is None


class TestListBuilds:
    @pytest.fixture
    def builds(self, temp_db, owner):
        ids = {}
        ids["tank"] = temp_db.builds.create(owner["id"], "Iron Wall", "WARRIOR", level=50, tags=["pvp", "tank"])
        ids["mage"] = temp_db.builds.create(owner["id"], "Frost Nova", "MAGE", level=20, tags=["pve"])
        ids["draft"] = temp_db.builds.create(owner["id"], "Secret", "NINJA", is_published=False)
        return ids

    def test_published_only_by_default(self, temp_db, builds):
        rows, total = temp_db.builds.list_builds()
        assert total == 2
        assert {b["id"] for b in rows} == {builds["tank"], builds["mage"]}

    def test_drafts_and_everything(self, temp_db, builds):
        drafts, _ = temp_db.builds.list_builds(published=False)
        assert [b["id"] for b in drafts] == [builds["draft"]]
        _, total = temp_db.builds.list_builds(published=None)
        assert total == 3

    def test_class_filter(self, temp_db, builds):
        rows, total = temp_db.builds.list_builds(character_class="MAGE")
        assert total == 1
        assert rows[0]["title"] == "Frost Nova"

        _, total = temp_db.builds.list_builds(character_class="all")
        assert total == 2

    def test_tag_filter_matches_whole_tags(self, temp_db, builds):
        rows, _ = temp_db.builds.list_builds(tag="pvp")
        assert [b["id"] for b in rows] == [builds["tank"]]

        rows, _ = temp_db.builds.list_builds(tag="pv")
        assert rows == []

    def test_search_title(self, temp_db, builds):
        rows, _ = temp_db.builds.list_builds(search="frost")
        assert [b["id"] for b in rows] == [builds["mage"]]

    def test_search_escapes_wildcards(self, temp_db, builds):
        rows, _ = temp_db.builds.list_builds(search="%")
        assert rows == []

    def test_level_sort(self, temp_db, builds):
        rows, _ = temp_db.builds.list_builds(sort="level")
        assert [b["level"] for b in rows] == [50, 20]

    def test_pagination(self, temp_db, builds):
        rows, total = temp_db.builds.list_builds(limit=1, offset=1)
        assert total == 2
        assert len(rows) == 1


class TestUpdateDelete:
    def test_partial_update(self, temp_db, build_id):
        temp_db.builds.update(build_id, title="Renamed", tags=["pvp"], is_published=False)

        build = temp_db.builds.get(build_id)
        assert build["title"] == "Renamed"
        assert build["tags"] == ["pvp"]
        assert build["is_published"] is False
        assert build["character_class"] == "MAGE"

    def test_class_column_mapping(self, temp_db, build_id):
        temp_db.builds.update(build_id, character_class="SHAMAN")
        assert temp_db.builds.get(build_id)["character_class"] == "SHAMAN"

    def test_unknown_fields_ignored(self, temp_db, build_id):
        temp_db.builds.update(build_id, upvotes=999, user_id=12345)
        build = temp_db.builds.get(build_id)
        assert build["upvotes"] == 0

    def test_delete(self, temp_db, build_id, make_user):
        temp_db.builds.vote(build_id, make_user("fan")["id"], "up")

        assert temp_db.builds.delete(build_id) is True
        assert temp_db.builds.get(build_id) is None
        assert temp_db.builds.delete(build_id) is False


class TestVotes:
    @pytest.fixture
    def voter(self, make_user):
        return make_user("voter")

    def test_first_vote(self, temp_db, build_id, voter):
        result = temp_db.builds.vote(build_id, voter["id"], "up")
        assert result == {"upvotes": 1, "downvotes": 0, "user_vote": "up"}

    def test_same_vote_toggles_off(self, temp_db, build_id, voter):
        temp_db.builds.vote(build_id, voter["id"], "down")
        result = temp_db.builds.vote(build_id, voter["id"], "down")
        assert result == {"upvotes": 0, "downvotes": 0, "user_vote": None}

    def test_opposite_vote_switches(self, temp_db, build_id, voter):
        temp_db.builds.vote(build_id, voter["id"], "up")
        result = temp_db.builds.vote(build_id, voter["id"], "down")
        assert result == {"upvotes": 0, "downvotes": 1, "user_vote": "down"}
        assert temp_db.builds.get_user_vote(build_id, voter["id"]) == "down"

    def test_votes_from_several_users(self, temp_db, build_id, voter, make_user):
        temp_db.builds.vote(build_id, voter["id"], "up")
        result = temp_db.builds.vote(build_id, make_user("second")["id"], "up")
        assert result["upvotes"] == 2

    def test_counters_never_negative(self, temp_db, build_id, voter):
        temp_db.builds.vote(build_id, voter["id"], "up")
        temp_db.conn.execute("UPDATE builds SET upvotes = 0 WHERE id = ?", (build_id,))
        temp_db.conn.commit()

        result = temp_db.builds.vote(build_id, voter["id"], "up")
        assert result["upvotes"] == 0

    def test_popular_sort_uses_upvotes(self, temp_db, owner, build_id, voter):
        other_id = temp_db.builds.create(owner["id"], "Other", "WARRIOR")
        temp_db.builds.vote(other_id, voter["id"], "up")

        rows, _ = temp_db.builds.list_builds(sort="popular")
        assert [b["id"] for b in rows] == [other_id, build_id]
