"""
Item repository.

Stores the item catalogue, including gear enhancement tables. Stat maps
and enhancement tables are JSON text columns; empty enhancement tables
are stored as NULL.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update
from epitome.game_data import Rarity

logger = logging.getLogger(__name__)

# Rarity sorts by tier, not alphabetically
_RARITY_ORDER = "CASE rarity {} ELSE -1 END".format(
    " ".join(f"WHEN '{r.value}' THEN {r.tier}" for r in Rarity)
)

_JSON_FIELDS = {
    "stats": "stats_json",
    "drop_sources": "drop_sources_json",
    "craft_recipe": "craft_recipe_json",
    "enhancement_bonuses": "enhancement_bonuses_json",
    "enhancement_materials": "enhancement_materials_json",
}

_COLUMNS = (
    "name",
    "slug",
    "description",
    "type",
    "rarity",
    "level",
    "image_url",
    "is_gear",
    "stats_json",
    "required_level",
    "required_class",
    "drop_sources_json",
    "craft_recipe_json",
    "enhancement_bonuses_json",
    "enhancement_materials_json",
)


class ItemRepository(BaseRepository):
    """Repository for the item catalogue."""

    json_columns = {
        "stats_json": ("stats", dict),
        "drop_sources_json": ("drop_sources", None),
        "craft_recipe_json": ("craft_recipe", None),
        "enhancement_bonuses_json": ("enhancement_bonuses", dict),
        "enhancement_materials_json": ("enhancement_materials", dict),
    }
    bool_columns = ("is_gear",)

    def _to_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns: Dict[str, Any] = {}
        for key, value in fields.items():
            if key in _JSON_FIELDS:
                if key.startswith("enhancement_") and not value:
                    value = None
                columns[_JSON_FIELDS[key]] = self._dumps(value)
            elif key == "is_gear":
                columns[key] = 1 if value else 0
            else:
                columns[key] = value
        return columns

    def create(self, **fields: Any) -> int:
        """
        Insert an item.

        Raises:
            sqlite3.IntegrityError: if the slug is already taken
        """
        columns = {k: v for k, v in self._to_columns(fields).items() if k in _COLUMNS}
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = self._execute(
            f"INSERT INTO items ({names}) VALUES ({placeholders})",
            tuple(columns.values()),
        )
        item_id = cursor.lastrowid or 0
        logger.info(f"Created item {item_id} ({fields.get('slug')})")
        return item_id

    def get(self, item_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone("SELECT * FROM items WHERE id = ?", (item_id,))
        return self._row_to_dict(row)

    def get_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone("SELECT * FROM items WHERE slug = ?", (slug,))
        return self._row_to_dict(row)

    def slug_exists(self, slug: str) -> bool:
        return self._execute_fetchone("SELECT 1 FROM items WHERE slug = ?", (slug,)) is not None

    def get_many(self, item_ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not item_ids:
            return {}
        placeholders = ", ".join("?" for _ in item_ids)
        rows = self._execute_fetchall(
            f"SELECT * FROM items WHERE id IN ({placeholders})", tuple(item_ids)
        )
        return {row["id"]: d for row, d in zip(rows, self._rows_to_dicts(rows))}

    def _filters(
        self,
        search: Optional[str],
        item_type: Optional[str],
        rarity: Optional[str],
        is_gear: Optional[bool],
    ) -> Tuple[str, List[Any]]:
        where: List[str] = []
        params: List[Any] = []
        if search:
            where.append("name LIKE ? ESCAPE '\\'")
            params.append(self._like(search))
        if item_type:
            where.append("type = ?")
            params.append(item_type)
        if rarity:
            where.append("rarity = ?")
            params.append(rarity)
        if is_gear is not None:
            where.append("is_gear = ?")
            params.append(1 if is_gear else 0)
        return (f"WHERE {' AND '.join(where)}" if where else ""), params

    def list_public(
        self,
        search: Optional[str] = None,
        item_type: Optional[str] = None,
        rarity: Optional[str] = None,
        is_gear: Optional[bool] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """Catalogue listing, highest rarity then highest level first."""
        where_sql, params = self._filters(search, item_type, rarity, is_gear)
        rows = self._execute_fetchall(
            f"""
            SELECT * FROM items {where_sql}
            ORDER BY {_RARITY_ORDER} DESC, level DESC, name ASC
            LIMIT ?
            """,
            tuple(params + [limit]),
        )
        return self._rows_to_dicts(rows)

    def list_admin(
        self,
        search: Optional[str] = None,
        type_filter: Optional[str] = None,
        rarity: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Admin listing, newest first.

        type_filter accepts an item type, or the pseudo-types "gear" and
        "other" which select on the gear flag.
        """
        item_type = None
        is_gear = None
        if type_filter and type_filter != "all":
            if type_filter == "gear":
                is_gear = True
            elif type_filter == "other":
                is_gear = False
            else:
                item_type = type_filter
        if rarity == "all":
            rarity = None

        where_sql, params = self._filters(search, item_type, rarity, is_gear)
        rows = self._execute_fetchall(
            f"SELECT * FROM items {where_sql} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )
        total = self._count(f"SELECT COUNT(*) FROM items {where_sql}", tuple(params))
        return self._rows_to_dicts(rows), total

    def update(self, item_id: int, **fields: Any) -> None:
        """
        Apply a partial update.

        Raises:
            sqlite3.IntegrityError: if a new slug collides
        """
        sql, params = build_update("items", self._to_columns(fields), _COLUMNS)
        if sql is None:
            return
        self._execute(sql, tuple(params + [item_id]))

    def delete(self, item_id: int) -> bool:
        cursor = self._execute("DELETE FROM items WHERE id = ?", (item_id,))
        return cursor.rowcount > 0
