"""
User repository.

Handles accounts created through Discord sign-in, role changes and the
admin user listing.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from epitome.database.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

USER_SORTS = {
    "newest": "u.created_at DESC, u.id DESC",
    "oldest": "u.created_at ASC, u.id ASC",
    "most-builds": "builds_count DESC, u.created_at DESC",
}


class UserRepository(BaseRepository):
    """Repository for user accounts."""

    def get_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._row_to_dict(row)

    def get_by_discord_id(self, discord_id: str) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone(
            "SELECT * FROM users WHERE discord_id = ?", (discord_id,)
        )
        return self._row_to_dict(row)

    def create(
        self,
        username: str,
        discord_id: Optional[str] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
        image: Optional[str] = None,
        role: str = "USER",
    ) -> int:
        cursor = self._execute(
            """
            INSERT INTO users (discord_id, email, name, username, image, role)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (discord_id, email, name, username, image, role),
        )
        return cursor.lastrowid or 0

    def upsert_discord_user(
        self,
        discord_id: str,
        username: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create the user on first sign-in, or refresh their profile fields.

        The role is never touched here; new users start as USER.
        """
        with self.transaction() as conn:
            existing = conn.execute(
                "SELECT id FROM users WHERE discord_id = ?", (discord_id,)
            ).fetchone()
            if existing:
                conn.execute(
                    """
                    UPDATE users
                    SET username = ?, email = ?, name = ?, image = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (username, email, name, image, existing["id"]),
                )
                user_id = existing["id"]
            else:
                cursor = conn.execute(
                    """
                    INSERT INTO users (discord_id, email, name, username, image, role)
                    VALUES (?, ?, ?, ?, ?, 'USER')
                    """,
                    (discord_id, email, name, username, image),
                )
                user_id = cursor.lastrowid
                logger.info(f"Created user {user_id} for Discord account {discord_id}")

        user = self.get_by_id(user_id)
        assert user is not None
        return user

    def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        sort_by: str = "newest",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Admin listing with build counts.

        Args:
            search: substring of username, email or name
            role: exact role, or None / "all" for every role
            sort_by: newest, oldest or most-builds
        """
        where: List[str] = []
        params: List[Any] = []
        if search:
            pattern = self._like(search)
            where.append(
                "(u.username LIKE ? ESCAPE '\\' OR u.email LIKE ? ESCAPE '\\' "
                "OR u.name LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        if role and role != "all":
            where.append("u.role = ?")
            params.append(role)

        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        order_sql = USER_SORTS.get(sort_by, USER_SORTS["newest"])

        rows = self._execute_fetchall(
            f"""
            SELECT u.*,
                   (SELECT COUNT(*) FROM builds b WHERE b.user_id = u.id) AS builds_count
            FROM users u
            {where_sql}
            ORDER BY {order_sql}
            LIMIT ? OFFSET ?
            """,
            tuple(params + [limit, offset]),
        )
        total = self._count(f"SELECT COUNT(*) FROM users u {where_sql}", tuple(params))
        return self._rows_to_dicts(rows), total

    def role_stats(self) -> Dict[str, int]:
        """Totals shown above the admin user table."""
        row = self._execute_fetchone(
            """
            SELECT
                COUNT(*) AS total_users,
                SUM(CASE WHEN role = 'ADMIN' THEN 1 ELSE 0 END) AS admins,
                SUM(CASE WHEN role = 'MODERATOR' THEN 1 ELSE 0 END) AS moderators,
                SUM(CASE WHEN created_at >= datetime('now', '-7 days') THEN 1 ELSE 0 END)
                    AS new_this_week
            FROM users
            """
        )
        if row is None:
            return {"total_users": 0, "admins": 0, "moderators": 0, "new_this_week": 0}
        return {key: int(row[key] or 0) for key in row.keys()}

    def get_with_counts(self, user_id: int) -> Optional[Dict[str, Any]]:
        row = self._execute_fetchone(
            """
            SELECT u.*,
                   (SELECT COUNT(*) FROM builds WHERE user_id = u.id) AS builds_count,
                   (SELECT COUNT(*) FROM votes WHERE user_id = u.id) AS votes_count,
                   (SELECT COUNT(*) FROM guides WHERE author_id = u.id) AS guides_count
            FROM users u
            WHERE u.id = ?
            """,
            (user_id,),
        )
        return self._row_to_dict(row)

    def update_role(self, user_id: int, role: str) -> None:
        self._execute(
            "UPDATE users SET role = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (role, user_id),
        )
        logger.info(f"User {user_id} role set to {role}")

    def delete(self, user_id: int) -> bool:
        cursor = self._execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cursor.rowcount > 0
