"""
Unit tests for epitome.loadout - build validation before storage.
"""
import pytest

from epitome.loadout import (
    LoadoutError,
    validate_equipment,
    validate_skill_allocation,
    validate_stat_allocation,
)

pytestmark = pytest.mark.unit


FURY = {
    "id": 1,
    "name": "Fury",
    "stat_key": "attack",
    "min_value": 1,
    "max_value": 10,
    "equipment_types": ["WEAPON", "GLOVES"],
}


def lookup(enchantment_id):
    return FURY if enchantment_id == 1 else None


def weapon(**overrides):
    data = {
        "id": 3,
        "name": "Iron Sword",
        "type": "weapon",
        "stats": {"attack": {"min": 16, "max": 22}},
        "enhancement_level": 2,
        "enhancement_bonuses": {"1": {"attack": 2}},
        "enchantments": [],
    }
    data.update(overrides)
    return data


class TestStatAllocation:
    def test_fills_missing_stats(self):
        assert validate_stat_allocation(2, {"vig": 4}) == {"vig": 4, "int": 0, "str": 0, "dex": 0}

    def test_exact_budget_allowed(self):
        assert sum(validate_stat_allocation(3, {"str": 10, "dex": 5}).values()) == 15

    def test_over_budget(self):
        with pytest.raises(LoadoutError, match="level 1 allows 5"):
            validate_stat_allocation(1, {"vig": 3, "str": 3})

    def test_negative_points(self):
        with pytest.raises(LoadoutError):
            validate_stat_allocation(5, {"dex": -1})

    def test_unknown_stat(self):
        with pytest.raises(LoadoutError, match="Unknown stats: luck"):
            validate_stat_allocation(5, {"luck": 1})


class TestSkillAllocation:
    def test_empty(self):
        assert validate_skill_allocation(None) == {}

    def test_per_skill_cap(self):
        assert validate_skill_allocation({"slash": 45}) == {"slash": 45}
        with pytest.raises(LoadoutError):
            validate_skill_allocation({"slash": 46})

    def test_total_cap(self):
        skills = {f"skill-{i}": 45 for i in range(6)}
        assert sum(validate_skill_allocation(skills).values()) == 270
        skills["extra"] = 1
        with pytest.raises(LoadoutError, match="maximum is 270"):
            validate_skill_allocation(skills)


class TestEquipment:
    def test_normalizes_slot_and_item(self):
        result = validate_equipment({"weapon": weapon(), "ring": None}, lookup)
        assert result["RING"] is None
        stored = result["WEAPON"]
        assert stored["type"] == "WEAPON"
        assert stored["enhancement_bonuses"] == {"1": {"attack": {"min": 2, "max": 2}}}

    def test_unknown_slot(self):
        with pytest.raises(LoadoutError, match="Unknown equipment slot"):
            validate_equipment({"TAIL": weapon()})

    @pytest.mark.parametrize("level", [-1, 10])
    def test_enhancement_level_bounds(self, level):
        with pytest.raises(LoadoutError):
            validate_equipment({"WEAPON": weapon(enhancement_level=level)})

    def test_stored_enchantment_wins_over_client_copy(self):
        item = weapon(enchantments=[{"id": 1, "stat_key": "hp", "value": 5, "max_value": 999}])
        ench = validate_equipment({"WEAPON": item}, lookup)["WEAPON"]["enchantments"][0]
        assert ench == {
            "id": 1,
            "name": "Fury",
            "stat_key": "attack",
            "value": 5,
            "min_value": 1,
            "max_value": 10,
        }

    def test_enchantment_value_out_of_range(self):
        item = weapon(enchantments=[{"id": 1, "value": 11}])
        with pytest.raises(LoadoutError, match="outside 1..10"):
            validate_equipment({"WEAPON": item}, lookup)

    def test_enchantment_not_allowed_on_type(self):
        boots = weapon(type="BOOTS", enchantments=[{"id": 1, "value": 3}])
        with pytest.raises(LoadoutError, match="cannot be applied to BOOTS"):
            validate_equipment({"BOOTS": boots}, lookup)

    def test_duplicate_enchantment(self):
        item = weapon(enchantments=[{"id": 1, "value": 3}, {"id": 1, "value": 4}])
        with pytest.raises(LoadoutError, match="applied twice"):
            validate_equipment({"WEAPON": item}, lookup)

    def test_ad_hoc_enchantment_needs_stat_key(self):
        item = weapon(enchantments=[{"value": 3}])
        with pytest.raises(LoadoutError, match="no stat key"):
            validate_equipment({"WEAPON": item})

    def test_invalid_stats(self):
        with pytest.raises(LoadoutError, match="Invalid stats"):
            validate_equipment({"WEAPON": weapon(stats={"attack": "high"})})
