"""
Market repository for player-to-player trade listings.

Handles all trade-related database operations including:
- Creating, updating and deleting listings
- Listing search with status, type, rarity and currency filters
- View counting
- Listing comments
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.utils import build_update, parse_db_timestamp

logger = logging.getLogger(__name__)

LISTING_SORTS = {
    "newest": "l.created_at DESC, l.id DESC",
    "oldest": "l.created_at ASC, l.id ASC",
    "price-low": "l.price_amount ASC, l.id DESC",
    "price-high": "l.price_amount DESC, l.id DESC",
    "most-viewed": "l.view_count DESC, l.id DESC",
}

_SELECT_LISTING = """
    SELECT l.*,
           u.name AS seller_name,
           u.username AS seller_username,
           u.image AS seller_image,
           (SELECT COUNT(*) FROM trade_comments c WHERE c.listing_id = l.id)
               AS comments_count
    FROM trade_listings l
    JOIN users u ON u.id = l.seller_id
"""

_UPDATABLE = ("title", "description", "price_amount", "price_currency", "status")


class MarketRepository(BaseRepository):
    """Repository for trade listings and their comments."""

    json_columns = {"enchantments_json": ("enchantments", list)}
    bool_columns = ("is_gear",)

    def _row_to_dict(self, row):
        data = super()._row_to_dict(row)
        if data is None:
            return None
        data["seller"] = {
            "id": data["seller_id"],
            "name": data.pop("seller_name", None),
            "username": data.pop("seller_username", None),
            "image": data.pop("seller_image", None),
        }
        return data

    def create_listing(
        self,
        seller_id: int,
        title: str,
        item_name: str,
        item_type: str,
        item_rarity: str,
        price_amount: int,
        price_currency: str,
        description: Optional[str] = None,
        item_id: Optional[int] = None,
        item_image_url: Optional[str] = None,
        is_gear: bool = False,
        enhancement_level: int = 0,
        enchantments: Optional[List[Dict[str, Any]]] = None,
    ) -> int:
        cursor = self._execute(
            """
            INSERT INTO trade_listings (
                title, description, item_id, item_name, item_type, item_rarity,
                item_image_url, is_gear, enhancement_level, enchantments_json,
                price_amount, price_currency, seller_id
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                title,
                description,
                item_id,
                item_name,
                item_type,
                item_rarity,
                item_image_url,
                1 if is_gear else 0,
                enhancement_level,
                self._dumps(enchantments or []),
                price_amount,
                price_currency,
                seller_id,
            ),
        )
        listing_id = cursor.lastrowid or 0
        logger.info(f"Created listing {listing_id} by user {seller_id}")
        return listing_id

    def get_listing(self, listing_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone(f"{_SELECT_LISTING} WHERE l.id = ?", (listing_id,))
        return self._row_to_dict(row)

    def listing_exists(self, listing_id: int) -> bool:
        row = self._execute_fetchone(
            "SELECT 1 FROM trade_listings WHERE id = ?", (listing_id,)
        )
        return row is not None

    def list_listings(
        self,
        search: Optional[str] = None,
        item_type: Optional[str] = None,
        rarity: Optional[str] = None,
        currency: Optional[str] = None,
        status: str = "ACTIVE",
        sort_by: str = "newest",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Search listings.

        Args:
            search: substring of title, item name or description
            status: a listing status, or "all"
            sort_by: newest, oldest, price-low, price-high or most-viewed

        The item_type, rarity and currency filters ignore None and "all".
        """
        where: List[str] = []
        params: List[Any] = []
        if status and status != "all":
            where.append("l.status = ?")
            params.append(status)
        if search:
            pattern = self._like(search)
            where.append(
                "(l.title LIKE ? ESCAPE '\\' OR l.item_name LIKE ? ESCAPE '\\' "
                "OR l.description LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        for column, value in (
            ("l.item_type", item_type),
            ("l.item_rarity", rarity),
            ("l.price_currency", currency),
        ):
            if value and value != "all":
                where.append(f"{column} = ?")
                params.append(value)

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        order_sql = LISTING_SORTS.get(sort_by, LISTING_SORTS["newest"])

        rows = self._execute_fetchall(
            f"{_SELECT_LISTING} {where_sql} ORDER BY {order_sql} LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )
        total = self._count(
            f"SELECT COUNT(*) FROM trade_listings l {where_sql}", tuple(params)
        )
        return self._rows_to_dicts(rows), total

    def increment_views(self, listing_id: int) -> None:
        self._execute(
            "UPDATE trade_listings SET view_count = view_count + 1 WHERE id = ?",
            (listing_id,),
        )

    def update_listing(self, listing_id: int, **fields: Any) -> None:
        """Update title, description, price or status."""
        sql, params = build_update("trade_listings", fields, _UPDATABLE)
        if sql is None:
            return
        self._execute(sql, tuple(params + [listing_id]))

    def delete_listing(self, listing_id: int) -> bool:
        cursor = self._execute("DELETE FROM trade_listings WHERE id = ?", (listing_id,))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def add_comment(self, listing_id: int, author_id: int, content: str) -> Dict[str, Any]:
        cursor = self._execute(
            "INSERT INTO trade_comments (content, listing_id, author_id) VALUES (?, ?, ?)",
            (content, listing_id, author_id),
        )
        comment_id = cursor.lastrowid or 0
        comments = [c for c in self.list_comments(listing_id) if c["id"] == comment_id]
        return comments[0]

    def list_comments(self, listing_id: int) -> List[Dict[str, Any]]:
        """Comments on a listing, newest first."""
        rows = self._execute_fetchall(
            """
            SELECT c.id, c.content, c.listing_id, c.created_at,
                   u.id AS user_id, u.name AS user_name,
                   u.username AS user_username, u.image AS user_image
            FROM trade_comments c
            JOIN users u ON u.id = c.author_id
            WHERE c.listing_id = ?
            ORDER BY c.created_at DESC, c.id DESC
            """,
            (listing_id,),
        )
        return [
            {
                "id": row["id"],
                "content": row["content"],
                "listing_id": row["listing_id"],
                "created_at": parse_db_timestamp(row["created_at"]),
                "user": {
                    "id": row["user_id"],
                    "name": row["user_name"],
                    "username": row["user_username"],
                    "image": row["user_image"],
                },
            }
            for row in rows
        ]
