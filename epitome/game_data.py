"""
Game reference data for Epitome.

Rarity tiers and the constant tables shared by the stat engine, the
repositories and the API models: gear types, equipment slots, build
tags and the per-class stat scaling tables.
"""

from enum import Enum
from typing import Dict, Optional


class Rarity(Enum):
    """
    Item rarity tiers, ordered from lowest to highest.

    Rarity is a display and sort attribute only; it has no effect on stats.
    """
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"
    MYTHIC = "MYTHIC"

    def __str__(self) -> str:
        return self.value

    @property
    def tier(self) -> int:
        """Zero-based position in the rarity ordering."""
        return list(Rarity).index(self)

    @classmethod
    def from_string(cls, value: str) -> Optional["Rarity"]:
        value_upper = value.upper().strip()
        for rarity in cls:
            if rarity.value == value_upper:
                return rarity
        return None


# Item types that can be equipped and enhanced
GEAR_TYPES = (
    "WEAPON",
    "HELMET",
    "ARMOR",
    "GLOVES",
    "BOOTS",
    "SHIELD",
    "EARRING",
    "NECKLACE",
    "RING",
)

# A build holds at most one item per slot
EQUIPMENT_SLOTS = (
    "HELMET",
    "ARMOR",
    "WEAPON",
    "SHIELD",
    "GLOVES",
    "BOOTS",
    "NECKLACE",
    "EARRING",
    "RING",
)

MIN_ENHANCEMENT_LEVEL = 0
MAX_ENHANCEMENT_LEVEL = 9

STAT_POINTS_PER_LEVEL = 5

ALLOCATABLE_STATS = ("vig", "int", "str", "dex")

BUILD_TAGS = (
    "PvP",
    "PvE",
    "1v1",
    "Mass War",
    "Leveling",
    "Farming",
    "Boss",
    "Tank",
    "DPS",
    "Support",
)

# Base character stats before level growth and point allocation
BASE_STATS: Dict[str, float] = {
    "hp": 100,
    "mp": 50,
    "attack": 10,
    "magicAttack": 10,
    "defense": 5,
    "critRate": 5,
    "critDamage": 150,
    "attackSpeed": 100,
    "moveSpeed": 100,
}

# Flat growth per character level
LEVEL_GROWTH: Dict[str, float] = {
    "hp": 10,
    "mp": 5,
    "attack": 2,
    "magicAttack": 2,
    "defense": 1,
}

# Per allocated point: class -> allocatable stat -> derived stat -> gain
CLASS_STAT_SCALING: Dict[str, Dict[str, Dict[str, float]]] = {
    "WARRIOR": {
        "vig": {"hp": 15, "defense": 1.5},
        "int": {"magicAttack": 0.5, "mp": 2},
        "str": {"attack": 3.0, "critDamage": 0.5},
        "dex": {"critRate": 0.15, "attackSpeed": 0.8},
    },
    "NINJA": {
        "vig": {"hp": 10, "defense": 0.8},
        "int": {"magicAttack": 0.3, "mp": 1.5},
        "str": {"attack": 1.5, "critDamage": 0.3},
        "dex": {"attack": 2.5, "critRate": 0.25, "attackSpeed": 1.2},
    },
    "SHAMAN": {
        "vig": {"hp": 10, "defense": 0.8},
        "int": {"magicAttack": 3.0, "mp": 5},
        "str": {"attack": 0.5},
        "dex": {"critRate": 0.1, "attackSpeed": 0.5},
    },
    "NECROMANCER": {
        "vig": {"hp": 8, "defense": 0.6},
        "int": {"magicAttack": 2.5, "mp": 6},
        "str": {"attack": 0.3},
        "dex": {"critRate": 0.12, "attackSpeed": 0.4},
    },
}


def is_gear_type(item_type: str) -> bool:
    """Return True if an item of this type can be equipped."""
    return item_type.upper() in GEAR_TYPES


def rarity_tier(value: str) -> int:
    """Sort key for a rarity string; unknown rarities sort lowest."""
    rarity = Rarity.from_string(value or "")
    return rarity.tier if rarity else -1
