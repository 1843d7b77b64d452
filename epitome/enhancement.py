"""
Enhancement data model for gear items.

Gear carries two per-level tables keyed by enhancement level (1..9):

- bonuses: stat deltas added at each level up to the selected one
- materials: the crafting materials consumed to reach a level from the
  level below it

This module validates both tables, normalizes them for storage, and
totals material costs across a span of levels.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from epitome.game_data import MAX_ENHANCEMENT_LEVEL
from epitome.stat_calculator import StatRange, parse_enhancement_bonuses

logger = logging.getLogger(__name__)


class EnhancementDataError(ValueError):
    """Raised when an enhancement bonus or material table is malformed."""


@dataclass
class MaterialCost:
    """A crafting material and how many of it are needed."""
    item_id: Optional[Any]
    item_name: str
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MaterialCost":
        return cls(
            item_id=data.get("item_id", data.get("itemId")),
            item_name=data.get("item_name", data.get("itemName", "")) or "",
            quantity=int(data.get("quantity", 0) or 0),
        )


def _parse_level(key: Any) -> int:
    try:
        level = int(key)
    except (TypeError, ValueError):
        raise EnhancementDataError(f"Enhancement level must be an integer, got {key!r}")
    if not 1 <= level <= MAX_ENHANCEMENT_LEVEL:
        raise EnhancementDataError(
            f"Enhancement level {level} outside 1..{MAX_ENHANCEMENT_LEVEL}"
        )
    return level


def _parse_cost(entry: Any, level: int) -> MaterialCost:
    if not isinstance(entry, Mapping):
        raise EnhancementDataError(f"Material at +{level} must be an object, got {entry!r}")
    try:
        return MaterialCost.from_dict(entry)
    except (TypeError, ValueError):
        raise EnhancementDataError(
            f"Material quantity at +{level} must be an integer, got {entry.get('quantity')!r}"
        )


def parse_enhancement_materials(
    raw: Optional[Mapping[Any, Any]],
) -> Dict[int, List[MaterialCost]]:
    """
    Convert a stored material table into {level: [MaterialCost, ...]}.

    Raises:
        EnhancementDataError: on a bad level key, a malformed entry or a
            non-positive quantity
    """
    if not raw:
        return {}
    table: Dict[int, List[MaterialCost]] = {}
    for key, entries in raw.items():
        level = _parse_level(key)
        costs = [_parse_cost(entry, level) for entry in entries or []]
        for cost in costs:
            if cost.quantity <= 0:
                raise EnhancementDataError(
                    f"Material {cost.item_name or cost.item_id} at +{level} "
                    f"needs a positive quantity"
                )
        table[level] = costs
    return table


def normalize_enhancement_bonuses(
    raw: Optional[Mapping[Any, Any]],
) -> Optional[Dict[str, Dict[str, Dict[str, int]]]]:
    """
    Validate a bonus table and return its storage form.

    Levels with no stats are dropped; an empty table becomes None.
    """
    try:
        table = parse_enhancement_bonuses(raw)
    except ValueError as exc:
        raise EnhancementDataError(str(exc)) from exc

    stored = {
        str(level): {stat: rng.to_dict() for stat, rng in stats.items()}
        for level, stats in sorted(table.items())
        if stats
    }
    return stored or None


def normalize_enhancement_materials(
    raw: Optional[Mapping[Any, Any]],
) -> Optional[Dict[str, List[Dict[str, Any]]]]:
    """
    Validate a material table and return its storage form.

    Levels with no materials are dropped; an empty table becomes None.
    """
    table = parse_enhancement_materials(raw)
    stored = {
        str(level): [cost.to_dict() for cost in costs]
        for level, costs in sorted(table.items())
        if costs
    }
    return stored or None


def materials_for_range(
    materials: Mapping[int, List[MaterialCost]],
    from_level: int,
    to_level: int,
) -> List[MaterialCost]:
    """
    Total the materials needed to go from one enhancement level to another.

    Sums quantities per material over levels from_level+1 .. to_level,
    keeping the order in which materials first appear. Returns an empty
    list when from_level >= to_level.
    """
    if from_level >= to_level:
        return []

    totals: Dict[Any, MaterialCost] = {}
    for level in range(max(from_level, 0) + 1, min(to_level, MAX_ENHANCEMENT_LEVEL) + 1):
        for cost in materials.get(level, []):
            key = cost.item_id if cost.item_id is not None else cost.item_name
            if key in totals:
                totals[key].quantity += cost.quantity
            else:
                totals[key] = MaterialCost(cost.item_id, cost.item_name, cost.quantity)
    return list(totals.values())


def bonus_for_level(
    bonuses: Mapping[int, Mapping[str, StatRange]],
    level: int,
) -> Dict[str, StatRange]:
    """Cumulative bonus ranges from +1 up to and including the given level."""
    cumulative: Dict[str, StatRange] = {}
    for lvl in range(1, min(level, MAX_ENHANCEMENT_LEVEL) + 1):
        for stat, rng in bonuses.get(lvl, {}).items():
            current = cumulative.get(stat)
            cumulative[stat] = rng if current is None else current + rng
    return cumulative
