"""
api.routers.enchantments - Enchantment catalogue.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_app_context
from api.models import EnchantmentsListResponse, ItemTypeName

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter(prefix="/enchantments")


@router.get("", response_model=EnchantmentsListResponse)
async def list_enchantments(
    ctx: "IAppContext" = Depends(get_app_context),
    equipment_type: Optional[ItemTypeName] = Query(
        None, alias="type", description="Only enchantments allowed on this equipment type"
    ),
) -> EnchantmentsListResponse:
    enchantments = ctx.db.enchantments.list_for_type(
        equipment_type.value if equipment_type else None
    )
    return EnchantmentsListResponse(enchantments=enchantments)
