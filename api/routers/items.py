"""
api.routers.items - Item database endpoints.

Catalogue listing, item detail, stat ranges at a chosen enhancement
level, and the material cost of enhancing between two levels.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context
from api.models import (
    EnhancementCostResponse,
    ItemsListResponse,
    ItemStatsResponse,
    ItemTypeName,
    RarityName,
)
from epitome.enhancement import materials_for_range, parse_enhancement_materials
from epitome.game_data import MAX_ENHANCEMENT_LEVEL
from epitome.stat_calculator import EquippedItem, item_stat_ranges

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/items")


def _get_item_or_404(ctx: "IAppContext", slug: str) -> Dict[str, Any]:
    item = ctx.db.items.get_by_slug(slug)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


def stat_ranges_at(item: Dict[str, Any], level: int) -> Dict[str, Dict[str, int]]:
    equipped = EquippedItem.from_dict({**item, "enhancement_level": level, "enchantments": []})
    return {stat: rng.to_dict() for stat, rng in item_stat_ranges(equipped).items()}


@router.get("", response_model=ItemsListResponse)
async def list_items(
    ctx: "IAppContext" = Depends(get_app_context),
    item_type: Optional[ItemTypeName] = Query(None, alias="type"),
    rarity: Optional[RarityName] = Query(None),
    search: Optional[str] = Query(None, description="Search item names"),
    is_gear: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=500),
) -> ItemsListResponse:
    """
    List catalogue items.

    Ordered by rarity tier (highest first), then level (highest first).
    """
    items = ctx.db.items.list_public(
        search=search,
        item_type=item_type.value if item_type else None,
        rarity=rarity.value if rarity else None,
        is_gear=is_gear,
        limit=clamp_limit(limit, ctx),
    )
    return ItemsListResponse(items=items, total=len(items))


@router.get("/{slug}")
async def get_item(
    slug: str,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Item detail; gear items also carry their stat ranges at every enhancement level."""
    item = _get_item_or_404(ctx, slug)
    if item["is_gear"] and item["enhancement_bonuses"]:
        item["stats_by_level"] = {
            str(level): stat_ranges_at(item, level)
            for level in range(0, MAX_ENHANCEMENT_LEVEL + 1)
        }
    return item


@router.get("/{slug}/stats", response_model=ItemStatsResponse)
async def get_item_stats(
    slug: str,
    enhancement_level: int = Query(0, ge=0, le=MAX_ENHANCEMENT_LEVEL),
    ctx: "IAppContext" = Depends(get_app_context),
) -> ItemStatsResponse:
    """Stat ranges and display totals at one enhancement level."""
    item = _get_item_or_404(ctx, slug)
    ranges = stat_ranges_at(item, enhancement_level)
    return ItemStatsResponse(
        item_id=item["id"],
        enhancement_level=enhancement_level,
        stats=ranges,
        totals={stat: rng["max"] for stat, rng in ranges.items()},
    )


@router.get("/{slug}/enhancement-cost", response_model=EnhancementCostResponse)
async def get_enhancement_cost(
    slug: str,
    from_level: int = Query(0, ge=0, le=MAX_ENHANCEMENT_LEVEL),
    to_level: int = Query(MAX_ENHANCEMENT_LEVEL, ge=0, le=MAX_ENHANCEMENT_LEVEL),
    ctx: "IAppContext" = Depends(get_app_context),
) -> EnhancementCostResponse:
    """Summed materials to enhance from one level to another."""
    item = _get_item_or_404(ctx, slug)
    table = parse_enhancement_materials(item["enhancement_materials"])
    costs = materials_for_range(table, from_level, to_level)
    return EnhancementCostResponse(
        item_id=item["id"],
        from_level=from_level,
        to_level=to_level,
        materials=[cost.to_dict() for cost in costs],
    )
