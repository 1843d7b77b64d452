"""
Taxonomy repository for admin-managed vocabularies.

- gear stats: the stat names items and enchantments may use (lower-case)
- mob types: the mob classification used by the bestiary (upper-case)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from epitome.database.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TaxonomyRepository(BaseRepository):
    """Repository for gear stats and mob types."""

    # ------------------------------------------------------------------
    # Gear stats
    # ------------------------------------------------------------------

    def list_gear_stats(self) -> List[Dict[str, Any]]:
        rows = self._execute_fetchall("SELECT * FROM gear_stats ORDER BY display_name ASC")
        return self._rows_to_dicts(rows)

    def create_gear_stat(self, name: str, display_name: str) -> Dict[str, Any]:
        """
        Raises:
            sqlite3.IntegrityError: if the name is already taken
        """
        cursor = self._execute(
            "INSERT INTO gear_stats (name, display_name) VALUES (?, ?)",
            (name.lower(), display_name),
        )
        row = self._execute_fetchone("SELECT * FROM gear_stats WHERE id = ?", (cursor.lastrowid,))
        return self._row_to_dict(row) or {}

    def delete_gear_stat(self, stat_id: int) -> bool:
        cursor = self._execute("DELETE FROM gear_stats WHERE id = ?", (stat_id,))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Mob types
    # ------------------------------------------------------------------

    def list_mob_types(self) -> List[Dict[str, Any]]:
        rows = self._execute_fetchall("SELECT * FROM mob_types ORDER BY display_name ASC")
        return self._rows_to_dicts(rows)

    def get_mob_type(self, type_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone("SELECT * FROM mob_types WHERE id = ?", (type_id,))
        return self._row_to_dict(row)

    def create_mob_type(self, name: str, display_name: str) -> Dict[str, Any]:
        """
        Raises:
            sqlite3.IntegrityError: if the name is already taken
        """
        cursor = self._execute(
            "INSERT INTO mob_types (name, display_name) VALUES (?, ?)",
            (name.upper(), display_name),
        )
        return self.get_mob_type(cursor.lastrowid or 0) or {}

    def update_mob_type(
        self,
        type_id: int,
        name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> bool:
        """Returns False when the mob type does not exist."""
        current = self.get_mob_type(type_id)
        if current is None:
            return False
        self._execute(
            "UPDATE mob_types SET name = ?, display_name = ? WHERE id = ?",
            (
                name.upper() if name else current["name"],
                display_name or current["display_name"],
                type_id,
            ),
        )
        return True

    def delete_mob_type(self, type_id: int) -> bool:
        cursor = self._execute("DELETE FROM mob_types WHERE id = ?", (type_id,))
        return cursor.rowcount > 0
