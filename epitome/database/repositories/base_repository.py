"""
Base repository class for thread-safe database operations.

Provides common execution helpers used by all domain-specific repositories,
plus JSON column encoding and the LIKE-pattern and row conversion helpers
shared by list queries.
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union, cast

from epitome.database.utils import parse_db_timestamp

logger = logging.getLogger(__name__)

# Type alias for SQL parameters
SqlParams = Union[Tuple[()], Tuple[object, ...]]

TIMESTAMP_COLUMNS = ("created_at", "updated_at")


class BaseRepository:
    """
    Base class for all database repositories.

    Provides thread-safe execution helpers and transaction management.
    Each repository receives a shared connection and lock from the
    parent Database instance.
    """

    # JSON text columns: column name -> (output key, default when NULL)
    json_columns: Dict[str, Tuple[str, Any]] = {}
    # Columns stored as 0/1 and returned as bool
    bool_columns: Tuple[str, ...] = ()

    def __init__(self, conn: sqlite3.Connection, lock: threading.RLock):
        """
        Initialize the repository with shared connection and lock.

        Args:
            conn: SQLite connection (shared across all repositories)
            lock: Threading lock for thread-safe operations
        """
        self._conn = conn
        self._lock = lock

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Provide a transaction scope with thread safety.

        Usage:
            with repo.transaction() as conn:
                conn.execute(...)
                conn.execute(...)
            # Commits on success, rolls back on error
        """
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception as exc:
                self._conn.rollback()
                logger.error(f"Transaction failed: {exc}")
                raise

    def _execute(
        self, sql: str, params: SqlParams = (), commit: bool = True
    ) -> sqlite3.Cursor:
        """
        Thread-safe execute helper for single operations.

        Rolls back and re-raises if the statement fails, so a failed
        insert (e.g. a unique violation) leaves no open transaction.
        """
        with self._lock:
            try:
                cursor = self._conn.execute(sql, params)
            except sqlite3.Error:
                self._conn.rollback()
                raise
            if commit:
                self._conn.commit()
            return cursor

    def _execute_fetchone(
        self, sql: str, params: SqlParams = ()
    ) -> Optional[sqlite3.Row]:
        """Thread-safe fetchone helper."""
        with self._lock:
            cursor = self._conn.execute(sql, params)
            result = cursor.fetchone()
            return cast(Optional[sqlite3.Row], result)

    def _execute_fetchall(
        self, sql: str, params: SqlParams = ()
    ) -> List[sqlite3.Row]:
        """Thread-safe fetchall helper."""
        with self._lock:
            cursor = self._conn.execute(sql, params)
            return cursor.fetchall()

    def _count(self, sql: str, params: SqlParams = ()) -> int:
        row = self._execute_fetchone(sql, params)
        return int(row[0]) if row else 0

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _dumps(value: Any) -> Optional[str]:
        """Encode a value for a JSON text column; None stays NULL."""
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    @staticmethod
    def _loads(value: Optional[str], default: Any = None) -> Any:
        if value is None or value == "":
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed JSON column value: {value[:80]!r}")
            return default

    def _row_to_dict(self, row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        """
        Convert a row to a plain dict.

        JSON columns are decoded under their output key, boolean columns
        become bool, and timestamps become datetimes.
        """
        if row is None:
            return None
        data = dict(row)
        for column, (key, default) in self.json_columns.items():
            if column in data:
                raw = data.pop(column)
                data[key] = self._loads(raw, default() if callable(default) else default)
        for column in self.bool_columns:
            if column in data and data[column] is not None:
                data[column] = bool(data[column])
        for column in TIMESTAMP_COLUMNS:
            if column in data and isinstance(data[column], str):
                data[column] = parse_db_timestamp(data[column])
        return data

    def _rows_to_dicts(self, rows: Iterable[sqlite3.Row]) -> List[Dict[str, Any]]:
        return [cast(Dict[str, Any], self._row_to_dict(row)) for row in rows]

    @staticmethod
    def _like(text: str) -> str:
        """LIKE pattern for a case-insensitive substring search."""
        escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return f"%{escaped}%"
