"""
Database Package.

This package provides SQLite-backed persistence for the Epitome service.

Public API:
- Database: Main database class, exposing one repository per entity
- SCHEMA_VERSION: Current schema version number

Example:
    from epitome.database import Database
    db = Database()
    db.items.get_by_slug("iron-sword")
"""
from epitome.database.base import Database
from epitome.database.schema import SCHEMA_VERSION

__all__ = [
    "Database",
    "SCHEMA_VERSION",
]
