"""
Build repository.

Handles saved character builds and community votes:
- Creating, updating and deleting builds
- Public listing with class/tag/title filters and sort orders
- Up/down votes with toggle semantics
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update

logger = logging.getLogger(__name__)

BUILD_SORTS = {
    "newest": "b.created_at DESC, b.id DESC",
    "oldest": "b.created_at ASC, b.id ASC",
    "popular": "b.upvotes DESC, b.created_at DESC",
    "level": "b.level DESC, b.created_at DESC",
}

_SELECT_BUILD = """
    SELECT b.*,
           u.name AS user_name,
           u.username AS user_username,
           u.image AS user_image
    FROM builds b
    JOIN users u ON u.id = b.user_id
"""

VOTE_VALUES = {"up": 1, "down": -1}


class BuildRepository(BaseRepository):
    """Repository for builds and votes."""

    json_columns = {
        "tags_json": ("tags", list),
        "stats_allocation_json": ("stats_allocation", dict),
        "equipment_json": ("equipment", None),
        "skills_json": ("skill_points", dict),
        "skill_path_json": ("skill_path", None),
    }
    bool_columns = ("is_published",)

    _UPDATABLE = (
        "title",
        "description",
        "guide",
        "class",
        "level",
        "tags_json",
        "stats_allocation_json",
        "equipment_json",
        "skills_json",
        "skill_path_json",
        "is_published",
    )

    def _row_to_dict(self, row):
        data = super()._row_to_dict(row)
        if data is None:
            return None
        data["character_class"] = data.pop("class")
        data["user"] = {
            "id": data["user_id"],
            "name": data.pop("user_name", None),
            "username": data.pop("user_username", None),
            "image": data.pop("user_image", None),
        }
        return data

    def create(
        self,
        user_id: int,
        title: str,
        character_class: str,
        level: int = 1,
        description: Optional[str] = None,
        guide: Optional[str] = None,
        tags: Optional[List[str]] = None,
        stats_allocation: Optional[Dict[str, int]] = None,
        equipment: Optional[Dict[str, Any]] = None,
        skill_points: Optional[Dict[str, int]] = None,
        skill_path: Optional[Any] = None,
        is_published: bool = True,
    ) -> int:
        cursor = self._execute(
            """
            INSERT INTO builds (
                title, description, guide, class, level, tags_json,
                stats_allocation_json, equipment_json, skills_json,
                skill_path_json, is_published, user_id
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                title,
                description,
                guide,
                character_class,
                level,
                self._dumps(tags or []),
                self._dumps(stats_allocation or {"vig": 0, "int": 0, "str": 0, "dex": 0}),
                self._dumps(equipment) if equipment else None,
                self._dumps(skill_points or {}),
                self._dumps(skill_path) if skill_path else None,
                1 if is_published else 0,
                user_id,
            ),
        )
        build_id = cursor.lastrowid or 0
        logger.info(f"Created build {build_id} for user {user_id}")
        return build_id

    def get(self, build_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone(f"{_SELECT_BUILD} WHERE b.id = ?", (build_id,))
        return self._row_to_dict(row)

    def list_builds(
        self,
        character_class: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        published: Optional[bool] = True,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List builds with filters.

        Args:
            character_class: exact class, or None / "all"
            tag: build must carry this tag; None / "all" disables
            search: substring of the title
            sort: newest, oldest, popular or level
            published: True for public listings, False for drafts, None for both

        Returns:
            (page of builds, total matching count)
        """
        where: List[str] = []
        params: List[Any] = []
        if published is not None:
            where.append("b.is_published = ?")
            params.append(1 if published else 0)
        if character_class and character_class != "all":
            where.append("b.class = ?")
            params.append(character_class)
        if search:
            where.append("b.title LIKE ? ESCAPE '\\'")
            params.append(self._like(search))
        if tag and tag != "all":
            where.append("EXISTS (SELECT 1 FROM json_each(b.tags_json) WHERE json_each.value = ?)")
            params.append(tag)

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        order_sql = BUILD_SORTS.get(sort, BUILD_SORTS["newest"])

        rows = self._execute_fetchall(
            f"{_SELECT_BUILD} {where_sql} ORDER BY {order_sql} LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )
        total = self._count(f"SELECT COUNT(*) FROM builds b {where_sql}", tuple(params))
        return self._rows_to_dicts(rows), total

    def update(self, build_id: int, **changes: Any) -> None:
        """
        Apply a partial update.

        Keyword names follow the API fields (character_class, tags,
        stats_allocation, equipment, skill_points, skill_path, ...).
        """
        columns: Dict[str, Any] = {}
        for key, value in changes.items():
            if key == "character_class":
                columns["class"] = value
            elif key == "tags":
                columns["tags_json"] = self._dumps(value or [])
            elif key == "stats_allocation":
                columns["stats_allocation_json"] = self._dumps(value or {})
            elif key == "equipment":
                columns["equipment_json"] = self._dumps(value) if value else None
            elif key == "skill_points":
                columns["skills_json"] = self._dumps(value or {})
            elif key == "skill_path":
                columns["skill_path_json"] = self._dumps(value) if value else None
            elif key == "is_published":
                columns["is_published"] = 1 if value else 0
            else:
                columns[key] = value

        sql, params = build_update("builds", columns, self._UPDATABLE)
        if sql is None:
            return
        self._execute(sql, tuple(params + [build_id]))

    def delete(self, build_id: int) -> bool:
        """Delete a build together with its votes."""
        with self.transaction() as conn:
            conn.execute("DELETE FROM votes WHERE build_id = ?", (build_id,))
            cursor = conn.execute("DELETE FROM builds WHERE id = ?", (build_id,))
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------

    def get_user_vote(self, build_id: int, user_id: int) -> Optional[str]:
        """Return "up", "down" or None for the user's vote on a build."""
        row = self._execute_fetchone(
            "SELECT value FROM votes WHERE build_id = ? AND user_id = ?",
            (build_id, user_id),
        )
        if row is None:
            return None
        return "up" if row["value"] == 1 else "down"

    def vote(self, build_id: int, user_id: int, vote_type: str) -> Dict[str, Any]:
        """
        Record a vote with toggle semantics.

        - no previous vote: the vote is added
        - same vote again: the vote is removed
        - opposite vote: the vote is switched

        Counters are clamped at zero.

        Returns:
            {"upvotes", "downvotes", "user_vote"}
        """
        value = VOTE_VALUES[vote_type]
        up_delta = 0
        down_delta = 0

        with self.transaction() as conn:
            existing = conn.execute(
                "SELECT id, value FROM votes WHERE build_id = ? AND user_id = ?",
                (build_id, user_id),
            ).fetchone()

            if existing is None:
                conn.execute(
                    "INSERT INTO votes (value, user_id, build_id) VALUES (?, ?, ?)",
                    (value, user_id, build_id),
                )
                if value == 1:
                    up_delta = 1
                else:
                    down_delta = 1
            elif existing["value"] == value:
                conn.execute("DELETE FROM votes WHERE id = ?", (existing["id"],))
                if value == 1:
                    up_delta = -1
                else:
                    down_delta = -1
            else:
                conn.execute(
                    "UPDATE votes SET value = ? WHERE id = ?", (value, existing["id"])
                )
                up_delta = 1 if value == 1 else -1
                down_delta = -up_delta

            conn.execute(
                """
                UPDATE builds
                SET upvotes = MAX(0, upvotes + ?),
                    downvotes = MAX(0, downvotes + ?)
                WHERE id = ?
                """,
                (up_delta, down_delta, build_id),
            )
            counts = conn.execute(
                "SELECT upvotes, downvotes FROM builds WHERE id = ?", (build_id,)
            ).fetchone()

        return {
            "upvotes": counts["upvotes"],
            "downvotes": counts["downvotes"],
            "user_vote": self.get_user_vote(build_id, user_id),
        }
