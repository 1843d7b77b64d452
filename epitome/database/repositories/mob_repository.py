"""
Mob repository.

Mobs carry a stat map and a drop list (JSON text columns). Public
queries only ever see active mobs.
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
    "level",
    "xp_reward",
    "respawn_time",
    "mob_type",
    "category",
    "biome",
    "image_url",
    "stats_json",
    "drops_json",
    "archon_drop_min",
    "archon_drop_max",
    "is_active",
)


class MobRepository(BaseRepository):
    """Repository for mobs."""

    json_columns = {
        "stats_json": ("stats", dict),
        "drops_json": ("drops", list),
    }
    bool_columns = ("is_active",)

    def _to_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns = dict(fields)
        if "stats" in columns:
            columns["stats_json"] = self._dumps(columns.pop("stats") or {})
        if "drops" in columns:
            columns["drops_json"] = self._dumps(columns.pop("drops") or [])
        if "is_active" in columns:
            columns["is_active"] = 1 if columns["is_active"] else 0
        return columns

    def create(self, **fields: Any) -> int:
        """
        Insert a mob.

        Raises:
            sqlite3.IntegrityError: if the slug is already taken
        """
        columns = {k: v for k, v in self._to_columns(fields).items() if k in _COLUMNS}
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = self._execute(
            f"INSERT INTO mobs ({names}) VALUES ({placeholders})",
            tuple(columns.values()),
        )
        return cursor.lastrowid or 0

    def get(self, mob_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone("SELECT * FROM mobs WHERE id = ?", (mob_id,))
        return self._row_to_dict(row)

    def get_by_slug(self, slug: str, active_only: bool = True) -> Optional[Dict[str, Any]]:
        sql = "SELECT * FROM mobs WHERE slug = ?"
        if active_only:
            sql += " AND is_active = 1"
        return self._row_to_dict(self._execute_fetchone(sql, (slug,)))

    def slug_exists(self, slug: str) -> bool:
        return self._execute_fetchone("SELECT 1 FROM mobs WHERE slug = ?", (slug,)) is not None

    def list_mobs(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        mob_type: Optional[str] = None,
        biome: Optional[str] = None,
        min_level: Optional[int] = None,
        max_level: Optional[int] = None,
        active_only: bool = True,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List mobs ordered by level.

        The string filters ignore None and the value "all".
        """
        where: List[str] = []
        params: List[Any] = []
        if active_only:
            where.append("is_active = 1")
        if search:
            where.append("name LIKE ? ESCAPE '\\'")
            params.append(self._like(search))
        for column, value in (("category", category), ("mob_type", mob_type), ("biome", biome)):
            if value and value != "all":
                where.append(f"{column} = ?")
                params.append(value)
        if min_level is not None:
            where.append("level >= ?")
            params.append(min_level)
        if max_level is not None:
            where.append("level <= ?")
            params.append(max_level)

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        rows = self._execute_fetchall(
            f"SELECT * FROM mobs {where_sql} ORDER BY level ASC, name ASC LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )
        total = self._count(f"SELECT COUNT(*) FROM mobs {where_sql}", tuple(params))
        return self._rows_to_dicts(rows), total

    def update(self, mob_id: int, **fields: Any) -> None:
        sql, params = build_update("mobs", self._to_columns(fields), _COLUMNS)
        if sql is None:
            return
        self._execute(sql, tuple(params + [mob_id]))

    def delete(self, mob_id: int) -> bool:
        cursor = self._execute("DELETE FROM mobs WHERE id = ?", (mob_id,))
        return cursor.rowcount > 0
