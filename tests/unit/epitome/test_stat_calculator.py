"""
Unit tests for epitome.stat_calculator.

Tests cover:
- StatRange parsing, including legacy flat stats
- Per-item ranges with enhancement bonuses and enchantments
- Equipment totals across slots
- Character stats from allocation + equipment
- Class stat profiles
"""
import pytest

from epitome.stat_calculator import (
    AppliedEnchantment,
    EquippedItem,
    StatRange,
    calculate_build,
    calculate_character_stats,
    class_stat_profile,
    equipment_totals,
    item_stat_ranges,
    item_total_stats,
    parse_enhancement_bonuses,
    round_half_up,
)

pytestmark = pytest.mark.unit


def make_sword(level: int = 0, enchantments=None) -> EquippedItem:
    return EquippedItem(
        name="Iron Sword",
        item_type="WEAPON",
        base_stats={"attack": StatRange(10, 20)},
        enhancement_level=level,
        enhancement_bonuses={
            1: {"attack": StatRange(2, 2)},
            2: {"attack": StatRange(2, 2)},
            3: {"attack": StatRange(2, 2), "critRate": StatRange(1, 1)},
        },
        enchantments=enchantments or [],
    )


# -------------------------
# StatRange
# -------------------------

class TestStatRange:
    def test_from_mapping(self):
        assert StatRange.from_value({"min": 3, "max": 7}) == StatRange(3, 7)

    def test_from_mapping_without_max(self):
        assert StatRange.from_value({"min": 4}) == StatRange(4, 4)

    def test_legacy_number_is_flat_range(self):
        assert StatRange.from_value(12) == StatRange(12, 12)
        assert StatRange.from_value(2.0) == StatRange(2, 2)

    def test_rejects_other_values(self):
        with pytest.raises(ValueError):
            StatRange.from_value("lots")
        with pytest.raises(ValueError):
            StatRange.from_value(True)

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            StatRange(5, 1)

    def test_addition_and_shift(self):
        assert StatRange(1, 2) + StatRange(3, 4) == StatRange(4, 6)
        assert StatRange(1, 2).shifted(5) == StatRange(6, 7)


class TestParseEnhancementBonuses:
    def test_string_keys_become_levels(self):
        table = parse_enhancement_bonuses({"1": {"hp": 5}, "2": {"hp": {"min": 1, "max": 3}}})
        assert table == {1: {"hp": StatRange(5, 5)}, 2: {"hp": StatRange(1, 3)}}

    @pytest.mark.parametrize("key", ["0", "10", "abc"])
    def test_bad_levels(self, key):
        with pytest.raises(ValueError):
            parse_enhancement_bonuses({key: {"hp": 1}})

    def test_empty(self):
        assert parse_enhancement_bonuses(None) == {}


# -------------------------
# Item ranges
# -------------------------

class TestItemStatRanges:
    def test_base_only(self):
        assert item_stat_ranges(make_sword()) == {"attack": StatRange(10, 20)}

    def test_bonuses_accumulate_up_to_level(self):
        ranges = item_stat_ranges(make_sword(level=3))
        assert ranges["attack"] == StatRange(16, 26)
        assert ranges["critRate"] == StatRange(1, 1)

    def test_levels_above_table_add_nothing_more(self):
        assert item_stat_ranges(make_sword(level=9)) == item_stat_ranges(make_sword(level=3))

    def test_enchantment_shifts_both_sides(self):
        fury = AppliedEnchantment(stat_key="attack", value=5, name="Fury")
        ranges = item_stat_ranges(make_sword(level=3, enchantments=[fury]))
        assert ranges["attack"] == StatRange(21, 31)

    def test_enchantment_on_new_stat_starts_from_zero(self):
        vigor = AppliedEnchantment(stat_key="hp", value=40)
        assert item_stat_ranges(make_sword(enchantments=[vigor]))["hp"] == StatRange(40, 40)

    def test_totals_use_max_side(self):
        fury = AppliedEnchantment(stat_key="attack", value=5)
        assert item_total_stats(make_sword(level=3, enchantments=[fury])) == {
            "attack": 31,
            "critRate": 1,
        }


class TestEquippedItemFromDict:
    def test_camel_case_keys(self):
        item = EquippedItem.from_dict({
            "name": "Boots",
            "type": "boots",
            "stats": {"defense": 4},
            "enhancementLevel": 1,
            "enhancementBonuses": {"1": {"defense": {"min": 1, "max": 2}}},
            "enchantments": [{"statKey": "moveSpeed", "value": 3}],
        })
        assert item.item_type == "BOOTS"
        assert item.enhancement_level == 1
        assert item_total_stats(item) == {"defense": 6, "moveSpeed": 3}


class TestEquipmentTotals:
    def test_sums_across_slots_and_skips_empty(self):
        helmet = EquippedItem(
            name="Cap", item_type="HELMET", base_stats={"defense": StatRange(3, 5), "hp": StatRange(20, 20)}
        )
        gloves = EquippedItem(
            name="Mitts", item_type="GLOVES", base_stats={"defense": StatRange(1, 2)}
        )
        totals = equipment_totals({"HELMET": helmet, "GLOVES": gloves, "RING": None})
        assert totals == {"defense": 7, "hp": 20}


# -------------------------
# Character stats
# -------------------------

class TestCharacterStats:
    def test_base_values(self):
        stats = calculate_character_stats({}, {})
        assert stats.to_dict() == {
            "hp": 1000,
            "mp": 500,
            "attack_power": 100,
            "magic_attack": 100,
            "defense": 50,
            "crit_rate": 5,
        }

    def test_allocation_and_equipment(self):
        stats = calculate_character_stats(
            {"vig": 10, "int": 4, "str": 7, "dex": 9},
            {"hp": 50, "mp": 20, "attack": 31, "magicAttack": 8, "defense": 12, "critRate": 1},
        )
        assert stats.hp == 1000 + 150 + 50
        assert stats.mp == 500 + 20 + 20
        assert stats.attack_power == 100 + 21 + 31
        assert stats.magic_attack == 100 + 12 + 8
        assert stats.defense == 50 + 15 + 12
        # floor(9 * 0.2) == 1
        assert stats.crit_rate == 5 + 1 + 1

    def test_calculate_build_from_stored_slots(self):
        result = calculate_build(
            {"str": 2},
            {
                "WEAPON": {
                    "name": "Blade",
                    "type": "WEAPON",
                    "stats": {"attack": {"min": 10, "max": 20}},
                    "enhancement_level": 3,
                    "enhancement_bonuses": {
                        "1": {"attack": {"min": 2, "max": 2}},
                        "2": {"attack": {"min": 2, "max": 2}},
                        "3": {"attack": {"min": 2, "max": 2}},
                    },
                    "enchantments": [{"stat_key": "attack", "value": 5}],
                },
                "SHIELD": None,
            },
        )
        assert result["equipment_stats"] == {"attack": 31}
        assert result["calculated_stats"]["attack_power"] == 100 + 6 + 31


class TestClassStatProfile:
    def test_warrior_profile(self):
        profile = class_stat_profile("warrior", 4, {"vig": 4, "str": 6})
        assert profile["hp"] == 100 + 40 + 60
        assert profile["attack"] == 10 + 8 + 18
        assert profile["critDamage"] == 153

    def test_fractional_gains_rounded_to_cents(self):
        profile = class_stat_profile("WARRIOR", 1, {"dex": 1, "int": 3})
        assert profile["critRate"] == 5.15
        assert profile["attackSpeed"] == 100.8
        assert profile["magicAttack"] == 13.5

    @pytest.mark.parametrize(
        "value, expected",
        [(0.125, 0.13), (0.375, 0.38), (2.5, 2.5), (-0.125, -0.12), (1.004, 1.0)],
    )
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_unknown_class(self):
        with pytest.raises(ValueError):
            class_stat_profile("BARD", 1, {})
