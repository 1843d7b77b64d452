"""
SQLite-backed persistence layer for the Epitome database service.

Responsibilities:
- Users and roles
- Builds and votes
- Items, enchantments, mobs and class pages
- Guides
- Trade listings and comments
- Map markers
- Gear stat and mob type vocabularies
- Schema initialization + versioning

Thread Safety:
- Uses a threading.RLock for all database operations
- Safe to share across FastAPI's worker threads
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from epitome.database.repositories import (
    BuildRepository,
    ClassRepository,
    EnchantmentRepository,
    GuideRepository,
    ItemRepository,
    MapMarkerRepository,
    MarketRepository,
    MobRepository,
    TaxonomyRepository,
    UserRepository,
)
from epitome.database.schema import (
    ALLOWED_MIGRATION_COLUMNS,
    CREATE_SCHEMA_SQL,
    SCHEMA_VERSION,
)

logger = logging.getLogger(__name__)


class Database:
    """
    Manages all persistent application data through SQLite.

    A Database instance is associated with one database file and exposes
    one repository per entity family:

        db.users, db.builds, db.items, db.enchantments, db.mobs,
        db.classes, db.guides, db.market, db.map_markers, db.taxonomy
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Create a Database instance.

        If db_path is None, use the default location:
        ~/.epitome/epitome.db
        """
        if db_path is None:
            db_path = Path.home() / ".epitome" / "epitome.db"

        self.db_path = db_path

        self._lock = threading.RLock()

        db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")

        logger.info(f"Database initialized: {db_path}")

        self._initialize_schema()

        self.users = UserRepository(self.conn, self._lock)
        self.builds = BuildRepository(self.conn, self._lock)
        self.items = ItemRepository(self.conn, self._lock)
        self.enchantments = EnchantmentRepository(self.conn, self._lock)
        self.mobs = MobRepository(self.conn, self._lock)
        self.classes = ClassRepository(self.conn, self._lock)
        self.guides = GuideRepository(self.conn, self._lock)
        self.market = MarketRepository(self.conn, self._lock)
        self.map_markers = MapMarkerRepository(self.conn, self._lock)
        self.taxonomy = TaxonomyRepository(self.conn, self._lock)

    # ----------------------------------------------------------------------
    # Context manager for transactions
    # ----------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Provide a transaction scope with thread safety:

            with db.transaction() as conn:
                conn.execute(...)

        Commits on success, rolls back on error.
        """
        with self._lock:
            try:
                yield self.conn
                self.conn.commit()
            except Exception as exc:
                self.conn.rollback()
                logger.error(f"Transaction failed: {exc}")
                raise

    # ----------------------------------------------------------------------
    # Schema Management
    # ----------------------------------------------------------------------

    def _initialize_schema(self) -> None:
        """Create tables if they don't exist or run migrations."""
        current_version = self.get_schema_version()

        if current_version == 0:
            logger.info("No schema detected, creating schema.")
            self._create_schema()
            self._set_schema_version(SCHEMA_VERSION)
        elif current_version < SCHEMA_VERSION:
            logger.info(
                f"Migrating schema from v{current_version} to v{SCHEMA_VERSION}"
            )
            self._migrate_schema(current_version, SCHEMA_VERSION)
            self._set_schema_version(SCHEMA_VERSION)
        else:
            logger.debug(f"Schema v{current_version} is up-to-date.")

    def get_schema_version(self) -> int:
        """Return the schema version stored in the DB."""
        try:
            cursor = self.conn.execute(
                "SELECT version FROM schema_version ORDER BY id DESC LIMIT 1"
            )
            row = cursor.fetchone()
            return row[0] if row else 0
        except sqlite3.OperationalError:
            # No schema_version table yet
            return 0

    def _set_schema_version(self, version: int) -> None:
        self.conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (version,),
        )
        self.conn.commit()

    def _create_schema(self) -> None:
        logger.info("Creating database schema...")

        with self.transaction() as conn:
            conn.executescript(CREATE_SCHEMA_SQL)

    def _migrate_schema(self, old: int, new: int) -> None:
        """
        Migration path between schema versions.

        v1 -> v2:
            - Add `enhancement_bonuses_json` and `enhancement_materials_json`
              to `items` for gear enhancement tables.
        """
        logger.info(f"Starting schema migration v{old} -> v{new}")

        with self.transaction() as conn:
            if old < 2 <= new:
                logger.info(
                    "Applying v2 migration: adding enhancement columns to `items`."
                )
                for col, col_type in [
                    ("enhancement_bonuses_json", "TEXT"),
                    ("enhancement_materials_json", "TEXT"),
                ]:
                    if ALLOWED_MIGRATION_COLUMNS.get(col) != col_type:
                        logger.error(f"Invalid column in migration: {col}")
                        continue
                    try:
                        # Column names validated against whitelist in schema.py
                        conn.execute(f"ALTER TABLE items ADD COLUMN {col} {col_type};")
                    except sqlite3.OperationalError:
                        logger.debug(f"Column items.{col} already exists")

        logger.info("Schema migration complete.")

    # ----------------------------------------------------------------------
    # Maintenance
    # ----------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying SQLite connection."""
        try:
            self.conn.close()
        except sqlite3.Error as exc:
            logger.error(f"Error closing database connection: {exc}")
