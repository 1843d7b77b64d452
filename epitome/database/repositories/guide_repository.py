"""
Guide repository.

Guides hold raw markdown content; rendering is left to the client.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update

logger = logging.getLogger(__name__)

_SELECT_GUIDE = """
    SELECT g.*,
           u.name AS author_name,
           u.username AS author_username,
           u.image AS author_image
    FROM guides g
    JOIN users u ON u.id = g.author_id
"""

_COLUMNS = (
    "title",
    "slug",
    "content",
    "excerpt",
    "category",
    "is_published",
    "is_featured",
    "meta_title",
    "meta_description",
)


class GuideRepository(BaseRepository):
    """Repository for community guides."""

    bool_columns = ("is_published", "is_featured")

    def _row_to_dict(self, row):
        data = super()._row_to_dict(row)
        if data is None:
            return None
        data["author"] = {
            "id": data["author_id"],
            "name": data.pop("author_name", None),
            "username": data.pop("author_username", None),
            "image": data.pop("author_image", None),
        }
        return data

    def create(
        self,
        author_id: int,
        title: str,
        slug: str,
        content: str,
        category: str,
        excerpt: Optional[str] = None,
        is_published: bool = False,
    ) -> int:
        cursor = self._execute(
            """
            INSERT INTO guides
                (title, slug, content, excerpt, category, is_published, author_id)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (title, slug, content, excerpt, category, 1 if is_published else 0, author_id),
        )
        guide_id = cursor.lastrowid or 0
        logger.info(f"Created guide {guide_id} ({slug})")
        return guide_id

    def get(self, guide_id: int) -> Optional[Dict[str, Any]]:
        return self._row_to_dict(
            self._execute_fetchone(f"{_SELECT_GUIDE} WHERE g.id = ?", (guide_id,))
        )

    def get_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        return self._row_to_dict(
            self._execute_fetchone(f"{_SELECT_GUIDE} WHERE g.slug = ?", (slug,))
        )

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        if exclude_id is None:
            row = self._execute_fetchone("SELECT 1 FROM guides WHERE slug = ?", (slug,))
        else:
            row = self._execute_fetchone(
                "SELECT 1 FROM guides WHERE slug = ? AND id != ?", (slug, exclude_id)
            )
        return row is not None

    def list_guides(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        featured: bool = False,
        author_id: Optional[int] = None,
        include_unpublished: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        List guides, featured first then newest.

        Args:
            category: exact category, or None / "all"
            search: substring of title or excerpt
            featured: only featured guides
            author_id: only guides by this author
            include_unpublished: also return drafts
        """
        where: List[str] = []
        params: List[Any] = []
        if not include_unpublished:
            where.append("g.is_published = 1")
        if category and category != "all":
            where.append("g.category = ?")
            params.append(category)
        if search:
            pattern = self._like(search)
            where.append("(g.title LIKE ? ESCAPE '\\' OR g.excerpt LIKE ? ESCAPE '\\')")
            params.extend([pattern, pattern])
        if featured:
            where.append("g.is_featured = 1")
        if author_id is not None:
            where.append("g.author_id = ?")
            params.append(author_id)

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        rows = self._execute_fetchall(
            f"{_SELECT_GUIDE} {where_sql} ORDER BY g.is_featured DESC, g.created_at DESC, g.id DESC",
            tuple(params),
        )
        return self._rows_to_dicts(rows)

    def increment_views(self, guide_id: int) -> None:
        self._execute(
            "UPDATE guides SET view_count = view_count + 1 WHERE id = ?", (guide_id,)
        )

    def update(self, guide_id: int, **fields: Any) -> None:
        columns = dict(fields)
        for flag in ("is_published", "is_featured"):
            if flag in columns:
                columns[flag] = 1 if columns[flag] else 0
        sql, params = build_update("guides", columns, _COLUMNS)
        if sql is None:
            return
        self._execute(sql, tuple(params + [guide_id]))

    def delete(self, guide_id: int) -> bool:
        cursor = self._execute("DELETE FROM guides WHERE id = ?", (guide_id,))
        return cursor.rowcount > 0
