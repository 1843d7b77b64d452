#!/usr/bin/env python3
"""
Seed the item catalogue with the starter gear set.

Items whose slug already exists are skipped, so the script can be re-run
after admins have edited the catalogue.

Usage:
    python scripts/seed_database.py [--db PATH]

Examples:
    python scripts/seed_database.py
    python scripts/seed_database.py --db ./dev.db
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from epitome.config import Config
from epitome.database import Database
from epitome.seed_data import seed_items

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Insert the starter item catalogue into the Epitome database"
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Database file (default: the configured database path)",
    )

    args = parser.parse_args()

    db_path = args.db or Config().database_path
    logger.info(f"Seeding items into {db_path}")

    db = Database(db_path)
    try:
        created, skipped = seed_items(db)
    finally:
        db.close()

    print(f"Created {created} item(s), skipped {skipped} existing")


if __name__ == "__main__":
    main()
