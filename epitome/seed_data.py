"""
Starter item catalogue.

Loads the base gear set into an empty (or partially filled) database.
Items already present by slug are left untouched, so seeding can be
re-run safely after admins have edited the catalogue.

Stats here use the flat legacy format (a bare number per stat), which
reads back as a zero-width range.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from epitome.game_data import is_gear_type

logger = logging.getLogger(__name__)

_IMAGE_ROOT = "/game-images/items"

# (name, type, rarity, level, stats, image folder)
_STARTER_GEAR = [
    ("Iron Helmet", "HELMET", "COMMON", 10, {"defense": 15, "hp": 50}, "helmets"),
    ("Steel Helmet", "HELMET", "UNCOMMON", 20, {"defense": 30, "hp": 100}, "helmets"),
    ("Mithril Helmet", "HELMET", "RARE", 35, {"defense": 50, "hp": 200}, "helmets"),
    ("Dragon Helmet", "HELMET", "EPIC", 50, {"defense": 80, "hp": 350}, "helmets"),
    ("Abyssal Crown", "HELMET", "LEGENDARY", 70, {"defense": 120, "hp": 500}, "helmets"),

    ("Iron Sword", "WEAPON", "COMMON", 10, {"attack": 25}, "weapons"),
    ("Steel Blade", "WEAPON", "UNCOMMON", 20, {"attack": 50}, "weapons"),
    ("Mithril Sword", "WEAPON", "RARE", 35, {"attack": 85}, "weapons"),
    ("Dragon Slayer", "WEAPON", "EPIC", 50, {"attack": 130}, "weapons"),
    ("Abyssal Edge", "WEAPON", "LEGENDARY", 70, {"attack": 200}, "weapons"),

    ("Leather Bracelet", "GLOVES", "COMMON", 10, {"attack": 5, "critRate": 1}, "gloves"),
    ("Steel Bracelet", "GLOVES", "UNCOMMON", 20, {"attack": 10, "critRate": 2}, "gloves"),
    ("Mithril Bracelet", "GLOVES", "RARE", 35, {"attack": 20, "critRate": 3}, "gloves"),

    ("Leather Boots", "BOOTS", "COMMON", 10, {"defense": 8, "moveSpeed": 5}, "boots"),
    ("Steel Boots", "BOOTS", "UNCOMMON", 20, {"defense": 15, "moveSpeed": 8}, "boots"),
    ("Mithril Boots", "BOOTS", "RARE", 35, {"defense": 25, "moveSpeed": 12}, "boots"),

    ("Wooden Shield", "SHIELD", "COMMON", 10, {"defense": 20, "blockRate": 5}, "shields"),
    ("Iron Shield", "SHIELD", "UNCOMMON", 20, {"defense": 40, "blockRate": 8}, "shields"),
    ("Tower Shield", "SHIELD", "RARE", 35, {"defense": 70, "blockRate": 12}, "shields"),

    ("Silver Earring", "EARRING", "COMMON", 10, {"magicAttack": 10, "mp": 30}, "earrings"),
    ("Gold Earring", "EARRING", "UNCOMMON", 20, {"magicAttack": 20, "mp": 60}, "earrings"),
    ("Diamond Earring", "EARRING", "RARE", 35, {"magicAttack": 35, "mp": 100}, "earrings"),

    ("Leather Armor", "ARMOR", "COMMON", 10, {"defense": 25, "hp": 80}, "armors"),
    ("Chain Mail", "ARMOR", "UNCOMMON", 20, {"defense": 50, "hp": 150}, "armors"),
    ("Plate Armor", "ARMOR", "RARE", 35, {"defense": 85, "hp": 250}, "armors"),
    ("Dragon Armor", "ARMOR", "EPIC", 50, {"defense": 130, "hp": 400}, "armors"),

    ("Bronze Necklace", "NECKLACE", "COMMON", 10, {"hp": 50, "mp": 30}, "necklaces"),
    ("Silver Necklace", "NECKLACE", "UNCOMMON", 20, {"hp": 100, "mp": 60}, "necklaces"),
    ("Gold Necklace", "NECKLACE", "RARE", 35, {"hp": 180, "mp": 100}, "necklaces"),
]


def _slug(name: str) -> str:
    return name.lower().replace(" ", "-")


def starter_items() -> List[Dict[str, Any]]:
    """The starter catalogue as item field dicts ready for ItemRepository.create."""
    items = []
    for name, item_type, rarity, level, stats, folder in _STARTER_GEAR:
        slug = _slug(name)
        items.append({
            "name": name,
            "slug": slug,
            "type": item_type,
            "rarity": rarity,
            "level": level,
            "required_level": level,
            "stats": dict(stats),
            "image_url": f"{_IMAGE_ROOT}/{folder}/{slug}.webp",
            "is_gear": is_gear_type(item_type),
        })
    return items


def seed_items(db) -> Tuple[int, int]:
    """
    Insert every starter item whose slug is not yet taken.

    Returns:
        (created, skipped)
    """
    created = 0
    skipped = 0
    for item in starter_items():
        if db.items.slug_exists(item["slug"]):
            logger.info(f"Skipped (exists): {item['name']}")
            skipped += 1
            continue
        db.items.create(**item)
        logger.info(f"Created: {item['name']}")
        created += 1

    logger.info(f"Seeding complete: {created} created, {skipped} skipped")
    return created, skipped
