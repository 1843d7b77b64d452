"""
Database utility functions.

Timestamp parsing for values read back from SQLite, and the UPDATE
statement builder used by repositories that accept partial updates.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple


def parse_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a timestamp from SQLite.

    Supports:
    - ISO format strings (e.g., "2024-01-15T12:34:56")
    - "YYYY-MM-DD HH:MM:SS" (SQLite CURRENT_TIMESTAMP format)

    SQLite's CURRENT_TIMESTAMP is UTC, so naive values are tagged as UTC.

    Returns:
        Parsed datetime, or None if value is empty or unparseable
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        try:
            parsed = datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_update(
    table: str,
    changes: Dict[str, Any],
    allowed: Iterable[str],
    touch_updated_at: bool = True,
) -> Tuple[Optional[str], List[Any]]:
    """
    Build an UPDATE ... SET statement for a partial update.

    Only keys listed in `allowed` become columns; column names never come
    from user input directly.

    Returns:
        (sql, params) with a trailing id placeholder, or (None, []) when
        there is nothing to update.
    """
    allowed = set(allowed)
    assignments: List[str] = []
    params: List[Any] = []
    for column, value in changes.items():
        if column not in allowed:
            continue
        assignments.append(f"{column} = ?")
        params.append(value)

    if not assignments:
        return None, []

    if touch_updated_at:
        assignments.append("updated_at = CURRENT_TIMESTAMP")
    sql = f"UPDATE {table} SET {', '.join(assignments)} WHERE id = ?"
    return sql, params
