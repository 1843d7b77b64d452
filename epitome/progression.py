"""
Character progression tables.

XP requirements per level, the stat point budget, and skill evolution
tiers by invested points.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List

from epitome.game_data import STAT_POINTS_PER_LEVEL

MAX_XP_LEVEL = 100

MAX_SKILL_POINTS = 45
MAX_TOTAL_SKILL_POINTS = 270


@dataclass(frozen=True)
class XpTableEntry:
    level: int
    xp_required: int
    total_xp: int
    stat_points: int
    skill_points: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "level": self.level,
            "xp_required": self.xp_required,
            "total_xp": self.total_xp,
            "stat_points": self.stat_points,
            "skill_points": self.skill_points,
        }


def _xp_required(level: int) -> int:
    return math.floor(100 * level ** 2.5)


def _build_xp_table() -> List[XpTableEntry]:
    table: List[XpTableEntry] = []
    total = 0
    for level in range(1, MAX_XP_LEVEL + 1):
        required = _xp_required(level)
        total += required
        table.append(
            XpTableEntry(
                level=level,
                xp_required=required,
                total_xp=total,
                stat_points=STAT_POINTS_PER_LEVEL,
                skill_points=1 if level % 5 == 0 else 0,
            )
        )
    return table


XP_TABLE: List[XpTableEntry] = _build_xp_table()


def get_xp_for_level(level: int) -> int:
    """XP needed to complete the given level; 0 outside 1..100."""
    if level < 1 or level > MAX_XP_LEVEL:
        return 0
    return XP_TABLE[level - 1].xp_required


def get_total_xp_for_level(level: int) -> int:
    """Cumulative XP through the given level; 0 outside 1..100."""
    if level < 1 or level > MAX_XP_LEVEL:
        return 0
    return XP_TABLE[level - 1].total_xp


def get_xp_between_levels(from_level: int, to_level: int) -> int:
    if from_level >= to_level:
        return 0
    from_xp = get_total_xp_for_level(from_level) if from_level > 0 else 0
    return get_total_xp_for_level(to_level) - from_xp


def stat_points_for_level(level: int) -> int:
    """Total allocatable stat points available at a character level."""
    return max(level, 0) * STAT_POINTS_PER_LEVEL


# name -> (min points, max points, icon suffix, label)
SKILL_EVOLUTION_TIERS = {
    "NONE": (0, 0, "", "Locked"),
    "BASIC": (1, 14, "_basic", "Basic"),
    "DEVELOPED": (15, 24, "_developed", "Developed"),
    "MASTER": (25, 34, "_master", "Master"),
    "PERFECT": (35, 45, "_perfect", "Perfect"),
}


def skill_evolution_tier(points: int) -> str:
    """Evolution tier name for a skill with this many points."""
    if points <= 0:
        return "NONE"
    if points <= 14:
        return "BASIC"
    if points <= 24:
        return "DEVELOPED"
    if points <= 34:
        return "MASTER"
    return "PERFECT"


def skill_icon_path(base_icon_path: str, points: int) -> str:
    """
    Icon path for a skill at its current evolution tier.

    Locked skills use the basic icon; the client greys it out.
    """
    tier = skill_evolution_tier(points)
    suffix = SKILL_EVOLUTION_TIERS[tier][2] if tier != "NONE" else "_basic"
    return base_icon_path.replace(".png", f"{suffix}.png")
