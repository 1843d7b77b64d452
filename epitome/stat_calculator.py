"""
Equipment Stat Calculator.

Aggregates item stats for the build planner and the item, build and
market detail views. An equipped item contributes:

    base range (max side)
    + every enhancement bonus from level 1 up to the selected level
    + every applied enchantment whose stat key matches

Per-item totals are summed across all equipped slots and fed into the
character layer (HP, MP, Attack Power, Magic Attack, Defense, Crit Rate)
together with the four allocatable stats (VIG, INT, STR, DEX).

Everything here is pure; results are recomputed on every read and never
persisted.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from epitome.game_data import (
    BASE_STATS,
    CLASS_STAT_SCALING,
    LEVEL_GROWTH,
    MAX_ENHANCEMENT_LEVEL,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatRange:
    """Roll range for one named stat, e.g. attack 16-22."""
    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"Stat range min {self.min} exceeds max {self.max}")

    def __add__(self, other: "StatRange") -> "StatRange":
        return StatRange(self.min + other.min, self.max + other.max)

    def shifted(self, amount: int) -> "StatRange":
        """Return the range with a flat amount added to both sides."""
        return StatRange(self.min + amount, self.max + amount)

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_value(cls, value: Any) -> "StatRange":
        """
        Build a range from stored data.

        Accepts a {"min": x, "max": y} mapping, or a bare number which is
        the legacy flat-stat format and reads as (n, n).
        """
        if isinstance(value, StatRange):
            return value
        if isinstance(value, Mapping):
            low = value.get("min", 0) or 0
            high = value.get("max", low)
            if high is None:
                high = low
            return cls(int(low), int(high))
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(int(value), int(value))
        raise ValueError(f"Unsupported stat value: {value!r}")


ZERO_RANGE = StatRange(0, 0)


def parse_stat_ranges(raw: Optional[Mapping[str, Any]]) -> Dict[str, StatRange]:
    """Convert a stored stat mapping into StatRange values."""
    if not raw:
        return {}
    return {stat: StatRange.from_value(value) for stat, value in raw.items()}


def parse_enhancement_bonuses(
    raw: Optional[Mapping[Any, Any]],
) -> Dict[int, Dict[str, StatRange]]:
    """
    Convert a stored enhancement bonus table into {level: {stat: range}}.

    Level keys arrive as strings from JSON and are converted to integers.

    Raises:
        ValueError: if a level is not an integer in 1..9
    """
    if not raw:
        return {}
    table: Dict[int, Dict[str, StatRange]] = {}
    for key, stats in raw.items():
        try:
            level = int(key)
        except (TypeError, ValueError):
            raise ValueError(f"Enhancement level must be an integer, got {key!r}")
        if not 1 <= level <= MAX_ENHANCEMENT_LEVEL:
            raise ValueError(
                f"Enhancement level {level} outside 1..{MAX_ENHANCEMENT_LEVEL}"
            )
        table[level] = parse_stat_ranges(stats)
    return table


@dataclass
class AppliedEnchantment:
    """A concrete enchantment on an item, with its rolled value."""
    stat_key: str
    value: int
    name: str = ""
    enchantment_id: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppliedEnchantment":
        return cls(
            stat_key=data.get("stat_key") or data.get("statKey") or "",
            value=int(data.get("value", 0) or 0),
            name=data.get("name", "") or "",
            enchantment_id=data.get("id", data.get("enchantment_id")),
            min_value=data.get("min_value", data.get("minValue")),
            max_value=data.get("max_value", data.get("maxValue")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.enchantment_id,
            "name": self.name,
            "stat_key": self.stat_key,
            "value": self.value,
            "min_value": self.min_value,
            "max_value": self.max_value,
        }


@dataclass
class EquippedItem:
    """An item in a build slot, with its enhancement level and enchantments."""
    name: str
    item_type: str
    base_stats: Dict[str, StatRange] = field(default_factory=dict)
    enhancement_level: int = 0
    enhancement_bonuses: Dict[int, Dict[str, StatRange]] = field(default_factory=dict)
    enchantments: List[AppliedEnchantment] = field(default_factory=list)
    item_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EquippedItem":
        """Build an equipped item from a stored build slot or an item row."""
        return cls(
            name=data.get("name", "") or "",
            item_type=(data.get("type") or data.get("item_type") or "").upper(),
            base_stats=parse_stat_ranges(data.get("stats")),
            enhancement_level=int(data.get("enhancement_level", data.get("enhancementLevel", 0)) or 0),
            enhancement_bonuses=parse_enhancement_bonuses(
                data.get("enhancement_bonuses", data.get("enhancementBonuses"))
            ),
            enchantments=[
                AppliedEnchantment.from_dict(e) for e in data.get("enchantments") or []
            ],
            item_id=data.get("id", data.get("item_id")),
        )


def item_stat_ranges(item: EquippedItem) -> Dict[str, StatRange]:
    """
    Calculate an item's stat ranges at its selected enhancement level.

    Enhancement bonuses and enchantment values are added to both sides of
    the range. A stat that only appears in a bonus or enchantment starts
    from zero.
    """
    ranges: Dict[str, StatRange] = dict(item.base_stats)

    level = max(0, min(item.enhancement_level, MAX_ENHANCEMENT_LEVEL))
    for lvl in range(1, level + 1):
        for stat, bonus in item.enhancement_bonuses.get(lvl, {}).items():
            ranges[stat] = ranges.get(stat, ZERO_RANGE) + bonus

    for enchantment in item.enchantments:
        if not enchantment.stat_key:
            continue
        current = ranges.get(enchantment.stat_key, ZERO_RANGE)
        ranges[enchantment.stat_key] = current.shifted(enchantment.value)

    return ranges


def item_total_stats(item: EquippedItem) -> Dict[str, int]:
    """Display totals for one item: the max side of every stat range."""
    return {stat: rng.max for stat, rng in item_stat_ranges(item).items()}


def equipment_totals(
    equipment: Mapping[str, Optional[EquippedItem]],
) -> Dict[str, int]:
    """Sum item totals across all filled slots."""
    totals: Dict[str, int] = {}
    for slot, item in equipment.items():
        if item is None:
            continue
        for stat, value in item_total_stats(item).items():
            totals[stat] = totals.get(stat, 0) + value
    return totals


@dataclass
class CharacterStats:
    """Character-level stats shown in the planner and on build pages."""
    hp: float
    mp: float
    attack_power: float
    magic_attack: float
    defense: float
    crit_rate: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "hp": self.hp,
            "mp": self.mp,
            "attack_power": self.attack_power,
            "magic_attack": self.magic_attack,
            "defense": self.defense,
            "crit_rate": self.crit_rate,
        }


def calculate_character_stats(
    allocation: Mapping[str, Any],
    equipment: Mapping[str, Any],
) -> CharacterStats:
    """
    Combine allocated stat points with equipment totals.

    Args:
        allocation: {"vig", "int", "str", "dex"} point counts
        equipment: summed equipment stats keyed by stat name

    Missing keys in either mapping count as zero.
    """
    vig = allocation.get("vig", 0) or 0
    intel = allocation.get("int", 0) or 0
    strength = allocation.get("str", 0) or 0
    dex = allocation.get("dex", 0) or 0

    return CharacterStats(
        hp=1000 + vig * 15 + (equipment.get("hp", 0) or 0),
        mp=500 + intel * 5 + (equipment.get("mp", 0) or 0),
        attack_power=100 + strength * 3 + (equipment.get("attack", 0) or 0),
        magic_attack=100 + intel * 3 + (equipment.get("magicAttack", 0) or 0),
        defense=50 + vig * 1.5 + (equipment.get("defense", 0) or 0),
        crit_rate=5 + math.floor(dex * 0.2) + (equipment.get("critRate", 0) or 0),
    )


def calculate_build(
    allocation: Mapping[str, Any],
    equipment: Mapping[str, Optional[Mapping[str, Any]]],
) -> Dict[str, Dict[str, float]]:
    """
    Full planner calculation from stored build data.

    Returns:
        {"equipment_stats": {...}, "calculated_stats": {...}}
    """
    equipped = {
        slot: EquippedItem.from_dict(data) if data else None
        for slot, data in (equipment or {}).items()
    }
    totals = equipment_totals(equipped)
    return {
        "equipment_stats": totals,
        "calculated_stats": calculate_character_stats(allocation or {}, totals).to_dict(),
    }


def round_half_up(value: float, digits: int = 2) -> float:
    """Round to `digits` decimals with halves going up, e.g. 0.125 -> 0.13."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def class_stat_profile(
    class_name: str,
    level: int,
    allocation: Mapping[str, Any],
) -> Dict[str, float]:
    """
    Class-scaled stat profile at a given level.

    Starts from the shared base stats, adds per-level growth, then applies
    the class's per-point multipliers for each allocated stat. Values are
    rounded half up to two decimals.

    Raises:
        ValueError: if the class is unknown
    """
    scaling = CLASS_STAT_SCALING.get(class_name.upper())
    if scaling is None:
        raise ValueError(f"Unknown class: {class_name}")

    stats: Dict[str, float] = dict(BASE_STATS)
    for stat, growth in LEVEL_GROWTH.items():
        stats[stat] += level * growth

    for attribute, gains in scaling.items():
        points = allocation.get(attribute, 0) or 0
        for stat, per_point in gains.items():
            stats[stat] = stats.get(stat, 0) + points * per_point

    return {stat: round_half_up(value) for stat, value in stats.items()}
