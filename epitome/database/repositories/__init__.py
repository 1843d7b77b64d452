"""
Database repositories package.

Provides domain-specific repository classes for database operations.
Each repository handles one entity family and inherits from
BaseRepository for thread-safe execution.

Public API:
- BaseRepository: Base class for all repositories
- UserRepository: Accounts and roles
- BuildRepository: Builds and votes
- ItemRepository: Item catalogue with enhancement tables
- EnchantmentRepository: Enchantment definitions
- MobRepository: Bestiary
- ClassRepository: Class info pages
- GuideRepository: Community guides
- MarketRepository: Trade listings and comments
- MapMarkerRepository: Interactive map markers
- TaxonomyRepository: Gear stats and mob types
"""
from epitome.database.repositories.base_repository import BaseRepository
from epitome.database.repositories.build_repository import BuildRepository
from epitome.database.repositories.class_repository import ClassRepository
from epitome.database.repositories.enchantment_repository import EnchantmentRepository
from epitome.database.repositories.guide_repository import GuideRepository
from epitome.database.repositories.item_repository import ItemRepository
from epitome.database.repositories.map_marker_repository import MapMarkerRepository
from epitome.database.repositories.market_repository import MarketRepository
from epitome.database.repositories.mob_repository import MobRepository
from epitome.database.repositories.taxonomy_repository import TaxonomyRepository
from epitome.database.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BuildRepository",
    "ClassRepository",
    "EnchantmentRepository",
    "GuideRepository",
    "ItemRepository",
    "MapMarkerRepository",
    "MarketRepository",
    "MobRepository",
    "TaxonomyRepository",
    "UserRepository",
]
