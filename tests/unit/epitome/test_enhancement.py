"""Unit tests for epitome.enhancement."""
import pytest

from epitome.enhancement import (
    EnhancementDataError,
    MaterialCost,
    bonus_for_level,
    materials_for_range,
    normalize_enhancement_bonuses,
    normalize_enhancement_materials,
    parse_enhancement_materials,
)
from epitome.stat_calculator import StatRange

pytestmark = pytest.mark.unit


MATERIALS = {
    "1": [{"item_name": "Iron Ore", "quantity": 2}],
    "2": [{"item_name": "Iron Ore", "quantity": 3}],
    "3": [
        {"item_name": "Iron Ore", "quantity": 5},
        {"item_id": 7, "item_name": "Spirit Stone", "quantity": 1},
    ],
}


class TestParseMaterials:
    def test_parses_levels(self):
        table = parse_enhancement_materials(MATERIALS)
        assert sorted(table) == [1, 2, 3]
        assert table[3][1] == MaterialCost(7, "Spirit Stone", 1)

    def test_camel_case_entries(self):
        table = parse_enhancement_materials({"1": [{"itemId": 4, "itemName": "Ore", "quantity": 1}]})
        assert table[1] == [MaterialCost(4, "Ore", 1)]

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(EnhancementDataError):
            parse_enhancement_materials({"1": [{"item_name": "Ore", "quantity": 0}]})

    @pytest.mark.parametrize("quantity", ["lots", "2.5", [3], {"n": 1}])
    def test_rejects_non_integer_quantity(self, quantity):
        with pytest.raises(EnhancementDataError, match="must be an integer"):
            parse_enhancement_materials({"2": [{"item_name": "Ore", "quantity": quantity}]})

    def test_rejects_non_object_entry(self):
        with pytest.raises(EnhancementDataError):
            parse_enhancement_materials({"1": ["Iron Ore"]})

    @pytest.mark.parametrize("key", ["0", "10", "one"])
    def test_rejects_bad_level(self, key):
        with pytest.raises(EnhancementDataError):
            parse_enhancement_materials({key: []})


class TestMaterialsForRange:
    def test_full_range_sums_per_material(self):
        costs = materials_for_range(parse_enhancement_materials(MATERIALS), 0, 3)
        assert [c.to_dict() for c in costs] == [
            {"item_id": None, "item_name": "Iron Ore", "quantity": 10},
            {"item_id": 7, "item_name": "Spirit Stone", "quantity": 1},
        ]

    def test_partial_range(self):
        costs = materials_for_range(parse_enhancement_materials(MATERIALS), 1, 2)
        assert [(c.item_name, c.quantity) for c in costs] == [("Iron Ore", 3)]

    def test_empty_when_not_increasing(self):
        table = parse_enhancement_materials(MATERIALS)
        assert materials_for_range(table, 3, 3) == []
        assert materials_for_range(table, 3, 1) == []

    def test_does_not_mutate_table(self):
        table = parse_enhancement_materials(MATERIALS)
        materials_for_range(table, 0, 3)
        assert table[1][0].quantity == 2


class TestBonusForLevel:
    def test_cumulative(self):
        bonuses = {1: {"hp": StatRange(1, 2)}, 2: {"hp": StatRange(3, 4), "mp": StatRange(1, 1)}}
        assert bonus_for_level(bonuses, 2) == {"hp": StatRange(4, 6), "mp": StatRange(1, 1)}
        assert bonus_for_level(bonuses, 0) == {}


class TestNormalize:
    def test_bonuses_storage_form(self):
        stored = normalize_enhancement_bonuses({2: {"hp": 5}, "1": {"hp": {"min": 1, "max": 2}}, "3": {}})
        assert stored == {"1": {"hp": {"min": 1, "max": 2}}, "2": {"hp": {"min": 5, "max": 5}}}

    def test_empty_tables_become_none(self):
        assert normalize_enhancement_bonuses({}) is None
        assert normalize_enhancement_materials({"1": []}) is None

    def test_bad_bonus_level(self):
        with pytest.raises(EnhancementDataError):
            normalize_enhancement_bonuses({"12": {"hp": 1}})

    def test_materials_storage_form(self):
        stored = normalize_enhancement_materials({"2": [{"item_name": "Ore", "quantity": 4}]})
        assert stored == {"2": [{"item_id": None, "item_name": "Ore", "quantity": 4}]}
