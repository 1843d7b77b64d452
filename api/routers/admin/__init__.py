"""
Admin back-office routers.

Every route below requires an admin: 401 when nobody is signed in, 403
when the signed-in user is not an admin.
"""

from fastapi import APIRouter, Depends

from api.dependencies import require_admin
from api.routers.admin.builds import router as builds_router
from api.routers.admin.classes import router as classes_router
from api.routers.admin.enchantments import router as enchantments_router
from api.routers.admin.items import router as items_router
from api.routers.admin.map_markers import router as map_markers_router
from api.routers.admin.mobs import router as mobs_router
from api.routers.admin.taxonomy import router as taxonomy_router
from api.routers.admin.users import router as users_router

router = APIRouter(dependencies=[Depends(require_admin)])
router.include_router(users_router)
router.include_router(builds_router)
router.include_router(items_router)
router.include_router(mobs_router)
router.include_router(enchantments_router)
router.include_router(classes_router)
router.include_router(map_markers_router)
router.include_router(taxonomy_router)

__all__ = ["router"]
