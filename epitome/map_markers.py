"""
Interactive map marker model.

The world map is a flat pixel plane from (0, 0) to (2048, 2048) by
default. Markers belong to one of three categories (spawns, points of
interest, NPCs) and can be filtered by type and by level.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_MIN_LEVEL = 0
DEFAULT_MAX_LEVEL = 999

MARKER_CATEGORIES: Dict[str, Sequence[str]] = {
    "spawns": (
        "SPAWN_GENERAL",
        "SPAWN_MINI_BOSS",
        "SPAWN_BOSS",
        "SPAWN_TAMEABLE",
    ),
    "poi": (
        "POI_NODE",
        "POI_DUNGEON",
        "POI_SHRINE",
        "POI_DOMINATION",
        "POI_QUEST",
        "POI_EVENT",
    ),
    "npcs": (
        "NPC_QUEST_GIVER",
        "NPC_VENDOR",
        "NPC_BLACKSMITH",
        "NPC_STABLEMAN",
        "NPC_VAULTKEEPER",
        "NPC_FISHERMAN",
        "NPC_MASTER_TRADITION",
        "NPC_ARMOR_DEALER",
        "NPC_WEAPON_DEALER",
        "NPC_BIOLOGIST",
        "NPC_BOTANIST",
        "NPC_GEOLOGIST",
        "NPC_ZOOLOGIST",
        "NPC_HYDROLOGIST",
    ),
}

MARKER_TYPES = tuple(t for types in MARKER_CATEGORIES.values() for t in types)


@dataclass(frozen=True)
class MapBounds:
    """Pixel bounds of the world map image."""
    width: float = 2048
    height: float = 2048

    @property
    def center(self) -> tuple:
        return (self.width / 2, self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return 0 <= x <= self.width and 0 <= y <= self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bounds": [[0, 0], [self.width, self.height]],
            "center": list(self.center),
        }


def category_for_type(marker_type: str) -> Optional[str]:
    for category, types in MARKER_CATEGORIES.items():
        if marker_type in types:
            return category
    return None


def parse_type_filter(
    types: Optional[str] = None,
    categories: Optional[str] = None,
) -> Optional[List[str]]:
    """
    Resolve comma-separated type and category filters into marker types.

    Returns None when neither filter is given, meaning "no type
    restriction". Unknown types and categories select nothing, so a
    filter made only of unknown names yields an empty list.
    """
    if not types and not categories:
        return None
    selected: List[str] = []
    if types:
        selected.extend(t.strip() for t in types.split(",") if t.strip())
    if categories:
        for name in categories.split(","):
            selected.extend(MARKER_CATEGORIES.get(name.strip().lower(), ()))
    # de-duplicate, keep order
    return list(dict.fromkeys(selected))


def _numeric(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def marker_in_level_range(marker: Mapping[str, Any], min_level: int, max_level: int) -> bool:
    """
    Decide whether a marker passes a level filter.

    Checked in order: the linked mob's level, then metadata "level", then
    an overlapping metadata "levelRange". Non-numeric level values count
    as missing, and markers without any level information always pass.
    """
    mob = marker.get("mob")
    if mob:
        return min_level <= mob.get("level", 0) <= max_level

    metadata = marker.get("metadata")
    if not isinstance(metadata, Mapping):
        return True

    level = _numeric(metadata.get("level"))
    if level:
        return min_level <= level <= max_level

    level_range = metadata.get("levelRange")
    if isinstance(level_range, Mapping):
        low = _numeric(level_range.get("min"))
        high = _numeric(level_range.get("max"))
        if low is not None and high is not None:
            return high >= min_level and low <= max_level

    return True


def filter_markers_by_level(
    markers: Iterable[Mapping[str, Any]],
    min_level: Optional[int] = None,
    max_level: Optional[int] = None,
) -> List[Mapping[str, Any]]:
    """Apply the level filter; no bounds given means no filtering."""
    markers = list(markers)
    if min_level is None and max_level is None:
        return markers

    low = DEFAULT_MIN_LEVEL if min_level is None else min_level
    high = DEFAULT_MAX_LEVEL if max_level is None else max_level
    return [m for m in markers if marker_in_level_range(m, low, high)]
