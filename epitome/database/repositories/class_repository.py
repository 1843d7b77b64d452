"""
Class info repository.

Descriptive pages for the four playable classes. The class key is
stored upper-case and is unique.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update

logger = logging.getLogger(__name__)

_COLUMNS = (
    "class",
    "name",
    "description",
    "image_url",
    "color",
    "primary_stat",
    "secondary_stat",
    "difficulty",
    "playstyle_json",
    "strengths_json",
    "weaknesses_json",
    "stat_scaling_json",
    "sort_order",
    "is_active",
)

_LIST_FIELDS = ("playstyle", "strengths", "weaknesses")


class ClassRepository(BaseRepository):
    """Repository for class info pages."""

    json_columns = {
        "playstyle_json": ("playstyle", list),
        "strengths_json": ("strengths", list),
        "weaknesses_json": ("weaknesses", list),
        "stat_scaling_json": ("stat_scaling", dict),
    }
    bool_columns = ("is_active",)

    def _row_to_dict(self, row):
        data = super()._row_to_dict(row)
        if data is not None:
            data["class_key"] = data.pop("class")
        return data

    def _to_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns: Dict[str, Any] = {}
        for key, value in fields.items():
            if key == "class_key":
                columns["class"] = value.upper() if value else value
            elif key in _LIST_FIELDS:
                columns[f"{key}_json"] = self._dumps(value) if value else None
            elif key == "stat_scaling":
                columns["stat_scaling_json"] = self._dumps(value) if value else None
            elif key == "is_active":
                columns[key] = 1 if value else 0
            else:
                columns[key] = value
        return columns

    def create(self, **fields: Any) -> int:
        """
        Insert a class page.

        Raises:
            sqlite3.IntegrityError: if the class key already exists
        """
        columns = {k: v for k, v in self._to_columns(fields).items() if k in _COLUMNS}
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = self._execute(
            f"INSERT INTO class_info ({names}) VALUES ({placeholders})",
            tuple(columns.values()),
        )
        return cursor.lastrowid or 0

    def get(self, class_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone("SELECT * FROM class_info WHERE id = ?", (class_id,))
        return self._row_to_dict(row)

    def get_by_key(self, class_key: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive lookup by class key (e.g. "ninja")."""
        row = self._execute_fetchone(
            "SELECT * FROM class_info WHERE class = ?", (class_key.upper(),)
        )
        return self._row_to_dict(row)

    def list_classes(self, active_only: bool = True) -> List[Dict[str, Any]]:
        sql = "SELECT * FROM class_info"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY sort_order ASC, name ASC"
        return self._rows_to_dicts(self._execute_fetchall(sql))

    def update(self, class_id: int, **fields: Any) -> None:
        sql, params = build_update("class_info", self._to_columns(fields), _COLUMNS)
        if sql is None:
            return
        self._execute(sql, tuple(params + [class_id]))

    def delete(self, class_id: int) -> bool:
        cursor = self._execute("DELETE FROM class_info WHERE id = ?", (class_id,))
        return cursor.rowcount > 0
