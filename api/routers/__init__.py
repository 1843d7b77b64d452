"""API routers package."""

from api.routers.admin import router as admin_router
from api.routers.auth import router as auth_router
from api.routers.builds import router as builds_router
from api.routers.classes import router as classes_router
from api.routers.enchantments import router as enchantments_router
from api.routers.guides import router as guides_router
from api.routers.health import router as health_router
from api.routers.items import router as items_router
from api.routers.map_markers import router as map_markers_router
from api.routers.market import router as market_router
from api.routers.mobs import router as mobs_router
from api.routers.tools import router as tools_router

__all__ = [
    "admin_router",
    "auth_router",
    "builds_router",
    "classes_router",
    "enchantments_router",
    "guides_router",
    "health_router",
    "items_router",
    "map_markers_router",
    "market_router",
    "mobs_router",
    "tools_router",
]
