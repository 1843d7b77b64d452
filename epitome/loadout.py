"""
Build loadout validation.

Checks a build's stat allocation, skill allocation and equipment before
it is stored. Validation errors raise LoadoutError, which the API turns
into a 400 response.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from epitome.game_data import (
    ALLOCATABLE_STATS,
    EQUIPMENT_SLOTS,
    MAX_ENHANCEMENT_LEVEL,
    MIN_ENHANCEMENT_LEVEL,
)
from epitome.progression import (
    MAX_SKILL_POINTS,
    MAX_TOTAL_SKILL_POINTS,
    stat_points_for_level,
)
from epitome.stat_calculator import parse_enhancement_bonuses, parse_stat_ranges

logger = logging.getLogger(__name__)

EnchantmentLookup = Callable[[Any], Optional[Dict[str, Any]]]


class LoadoutError(ValueError):
    """Raised when a build's allocation or equipment is invalid."""


def validate_stat_allocation(level: int, allocation: Mapping[str, Any]) -> Dict[str, int]:
    """
    Check allocated points against the level's budget.

    Returns the allocation with every allocatable stat present.
    """
    result: Dict[str, int] = {}
    for stat in ALLOCATABLE_STATS:
        points = int(allocation.get(stat, 0) or 0)
        if points < 0:
            raise LoadoutError(f"Stat '{stat}' cannot be negative")
        result[stat] = points

    unknown = set(allocation) - set(ALLOCATABLE_STATS)
    if unknown:
        raise LoadoutError(f"Unknown stats: {', '.join(sorted(unknown))}")

    budget = stat_points_for_level(level)
    spent = sum(result.values())
    if spent > budget:
        raise LoadoutError(
            f"Allocated {spent} stat points but level {level} allows {budget}"
        )
    return result


def validate_skill_allocation(skills: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    if not skills:
        return {}
    result: Dict[str, int] = {}
    for skill_id, points in skills.items():
        points = int(points or 0)
        if points < 0 or points > MAX_SKILL_POINTS:
            raise LoadoutError(
                f"Skill '{skill_id}' has {points} points (allowed 0..{MAX_SKILL_POINTS})"
            )
        result[str(skill_id)] = points

    total = sum(result.values())
    if total > MAX_TOTAL_SKILL_POINTS:
        raise LoadoutError(
            f"Allocated {total} skill points, maximum is {MAX_TOTAL_SKILL_POINTS}"
        )
    return result


def _validate_enchantments(
    slot: str,
    item_type: str,
    enchantments: Any,
    lookup: Optional[EnchantmentLookup],
) -> list:
    checked = []
    seen = set()
    for raw in enchantments or []:
        ench_id = raw.get("id")
        value = int(raw.get("value", 0) or 0)
        stat_key = raw.get("stat_key") or ""
        low = raw.get("min_value")
        high = raw.get("max_value")
        name = raw.get("name", "") or ""

        if ench_id is not None:
            if ench_id in seen:
                raise LoadoutError(f"Enchantment {ench_id} applied twice on {slot}")
            seen.add(ench_id)

        stored = lookup(ench_id) if (lookup and ench_id is not None) else None
        if stored is not None:
            stat_key = stored["stat_key"]
            low = stored["min_value"]
            high = stored["max_value"]
            name = stored["name"]
            allowed = stored.get("equipment_types") or []
            if allowed and item_type and item_type not in allowed:
                raise LoadoutError(
                    f"Enchantment '{name}' cannot be applied to {item_type}"
                )

        if not stat_key:
            raise LoadoutError(f"Enchantment on {slot} has no stat key")
        if low is not None and high is not None and not low <= value <= high:
            raise LoadoutError(
                f"Enchantment '{name or stat_key}' value {value} outside {low}..{high}"
            )

        checked.append({
            "id": ench_id,
            "name": name,
            "stat_key": stat_key,
            "value": value,
            "min_value": low,
            "max_value": high,
        })
    return checked


def validate_equipment(
    equipment: Optional[Mapping[str, Any]],
    enchantment_lookup: Optional[EnchantmentLookup] = None,
) -> Dict[str, Optional[Dict[str, Any]]]:
    """
    Validate and normalize a slot -> equipped item mapping.

    Args:
        equipment: slot name -> equipped item dict, or None for empty slots
        enchantment_lookup: resolves an enchantment id to its stored record;
            stored ranges and equipment types take precedence over the
            client's copy

    Returns:
        Normalized mapping with upper-case slot keys.
    """
    result: Dict[str, Optional[Dict[str, Any]]] = {}
    for raw_slot, data in (equipment or {}).items():
        slot = str(raw_slot).upper()
        if slot not in EQUIPMENT_SLOTS:
            raise LoadoutError(f"Unknown equipment slot: {raw_slot}")
        if not data:
            result[slot] = None
            continue

        level = int(data.get("enhancement_level", 0) or 0)
        if not MIN_ENHANCEMENT_LEVEL <= level <= MAX_ENHANCEMENT_LEVEL:
            raise LoadoutError(
                f"Enhancement level {level} on {slot} outside "
                f"{MIN_ENHANCEMENT_LEVEL}..{MAX_ENHANCEMENT_LEVEL}"
            )

        item_type = (data.get("type") or "").upper()
        try:
            stats = parse_stat_ranges(data.get("stats"))
            bonuses = parse_enhancement_bonuses(data.get("enhancement_bonuses"))
        except ValueError as exc:
            raise LoadoutError(f"Invalid stats on {slot}: {exc}") from exc

        result[slot] = {
            "id": data.get("id"),
            "name": data.get("name", ""),
            "type": item_type,
            "rarity": data.get("rarity"),
            "image_url": data.get("image_url"),
            "stats": {stat: rng.to_dict() for stat, rng in stats.items()},
            "enhancement_level": level,
            "enhancement_bonuses": {
                str(lvl): {stat: rng.to_dict() for stat, rng in values.items()}
                for lvl, values in bonuses.items()
            },
            "enchantments": _validate_enchantments(
                slot, item_type, data.get("enchantments"), enchantment_lookup
            ),
        }
    return result
