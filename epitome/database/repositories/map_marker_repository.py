"""
Map marker repository.

Markers optionally link to a mob; when they do, the mob's summary is
joined in so level filtering and popups can use it.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update

logger = logging.getLogger(__name__)

_SELECT_MARKER = """
    SELECT m.*,
           mob.name AS mob_name,
           mob.slug AS mob_slug,
           mob.level AS mob_level,
           mob.xp_reward AS mob_xp_reward,
           mob.respawn_time AS mob_respawn_time,
           mob.mob_type AS mob_mob_type,
           mob.category AS mob_category,
           mob.image_url AS mob_image_url,
           mob.stats_json AS mob_stats_json,
           mob.drops_json AS mob_drops_json
    FROM map_markers m
    LEFT JOIN mobs mob ON mob.id = m.mob_id
"""

_COLUMNS = (
    "name",
    "description",
    "type",
    "x",
    "y",
    "icon_url",
    "mob_id",
    "metadata_json",
    "is_active",
)


class MapMarkerRepository(BaseRepository):
    """Repository for interactive map markers."""

    json_columns = {"metadata_json": ("metadata", None)}
    bool_columns = ("is_active",)

    def _row_to_dict(self, row):
        data = super()._row_to_dict(row)
        if data is None:
            return None
        mob_fields = {
            key[len("mob_"):]: data.pop(key)
            for key in list(data)
            if key.startswith("mob_") and key != "mob_id"
        }
        if data.get("mob_id") is not None and mob_fields.get("name") is not None:
            data["mob"] = {
                "id": data["mob_id"],
                "name": mob_fields["name"],
                "slug": mob_fields["slug"],
                "level": mob_fields["level"],
                "xp_reward": mob_fields["xp_reward"],
                "respawn_time": mob_fields["respawn_time"],
                "mob_type": mob_fields["mob_type"],
                "category": mob_fields["category"],
                "image_url": mob_fields["image_url"],
                "stats": self._loads(mob_fields["stats_json"], {}),
                "drops": self._loads(mob_fields["drops_json"], []),
            }
        else:
            data["mob"] = None
        return data

    def _to_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns = dict(fields)
        if "metadata" in columns:
            columns["metadata_json"] = self._dumps(columns.pop("metadata") or None)
        if "is_active" in columns:
            columns["is_active"] = 1 if columns["is_active"] else 0
        return columns

    def create(self, **fields: Any) -> int:
        columns = {k: v for k, v in self._to_columns(fields).items() if k in _COLUMNS}
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = self._execute(
            f"INSERT INTO map_markers ({names}) VALUES ({placeholders})",
            tuple(columns.values()),
        )
        return cursor.lastrowid or 0

    def get(self, marker_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone(f"{_SELECT_MARKER} WHERE m.id = ?", (marker_id,))
        return self._row_to_dict(row)

    def list_active(self, types: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
        """
        Active markers, optionally restricted to a set of types.

        None means every type; an empty sequence matches nothing.
        """
        if types is not None and not types:
            return []
        where = ["m.is_active = 1"]
        params: List[Any] = []
        if types:
            where.append(f"m.type IN ({', '.join('?' for _ in types)})")
            params.extend(types)
        rows = self._execute_fetchall(
            f"{_SELECT_MARKER} WHERE {' AND '.join(where)} ORDER BY m.id ASC",
            tuple(params),
        )
        return self._rows_to_dicts(rows)

    def list_admin(
        self,
        search: Optional[str] = None,
        marker_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        where: List[str] = []
        params: List[Any] = []
        if search:
            where.append("m.name LIKE ? ESCAPE '\\'")
            params.append(self._like(search))
        if marker_type and marker_type != "all":
            where.append("m.type = ?")
            params.append(marker_type)
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""

        rows = self._execute_fetchall(
            f"{_SELECT_MARKER} {where_sql} ORDER BY m.created_at DESC, m.id DESC LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )
        total = self._count(f"SELECT COUNT(*) FROM map_markers m {where_sql}", tuple(params))
        return self._rows_to_dicts(rows), total

    def update(self, marker_id: int, **fields: Any) -> None:
        sql, params = build_update("map_markers", self._to_columns(fields), _COLUMNS)
        if sql is None:
            return
        self._execute(sql, tuple(params + [marker_id]))

    def delete(self, marker_id: int) -> bool:
        cursor = self._execute("DELETE FROM map_markers WHERE id = ?", (marker_id,))
        return cursor.rowcount > 0
