"""
Enchantment repository.

An enchantment modifies one stat within a value range and lists the
equipment types it may be applied to.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update

logger = logging.getLogger(__name__)

_COLUMNS = (
    "name",
    "slug",
    "description",
    "image_url",
    "min_value",
    "max_value",
    "stat_key",
    "equipment_types_json",
)

_TYPE_FILTER = (
    "EXISTS (SELECT 1 FROM json_each(equipment_types_json) WHERE json_each.value = ?)"
)


class EnchantmentRepository(BaseRepository):
    """Repository for enchantment definitions."""

    json_columns = {"equipment_types_json": ("equipment_types", list)}

    def _to_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns = dict(fields)
        if "equipment_types" in columns:
            columns["equipment_types_json"] = self._dumps(columns.pop("equipment_types") or [])
        return columns

    def create(self, **fields: Any) -> int:
        """
        Insert an enchantment.

        Raises:
            sqlite3.IntegrityError: if the slug is already taken
        """
        columns = {k: v for k, v in self._to_columns(fields).items() if k in _COLUMNS}
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = self._execute(
            f"INSERT INTO enchantments ({names}) VALUES ({placeholders})",
            tuple(columns.values()),
        )
        return cursor.lastrowid or 0

    def get(self, enchantment_id: Any) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone(
            "SELECT * FROM enchantments WHERE id = ?", (enchantment_id,)
        )
        return self._row_to_dict(row)

    def list_for_type(self, equipment_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """All enchantments, optionally only those allowed on one equipment type."""
        if equipment_type:
            rows = self._execute_fetchall(
                f"SELECT * FROM enchantments WHERE {_TYPE_FILTER} ORDER BY name ASC",
                (equipment_type,),
            )
        else:
            rows = self._execute_fetchall("SELECT * FROM enchantments ORDER BY name ASC")
        return self._rows_to_dicts(rows)

    def list_admin(
        self,
        search: Optional[str] = None,
        equipment_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where: List[str] = []
        params: List[Any] = []
        if search:
            where.append("name LIKE ? ESCAPE '\\'")
            params.append(self._like(search))
        if equipment_type:
            where.append(_TYPE_FILTER)
            params.append(equipment_type)
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""

        rows = self._execute_fetchall(
            f"SELECT * FROM enchantments {where_sql} ORDER BY name ASC LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )
        total = self._count(f"SELECT COUNT(*) FROM enchantments {where_sql}", tuple(params))
        return self._rows_to_dicts(rows), total

    def update(self, enchantment_id: int, **fields: Any) -> None:
        sql, params = build_update("enchantments", self._to_columns(fields), _COLUMNS)
        if sql is None:
            return
        self._execute(sql, tuple(params + [enchantment_id]))

    def delete(self, enchantment_id: int) -> bool:
        cursor = self._execute("DELETE FROM enchantments WHERE id = ?", (enchantment_id,))
        return cursor.rowcount > 0
