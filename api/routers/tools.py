"""
api.routers.tools - Planner calculator and reference tables.

Everything here is stateless: nothing is read from or written to builds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_app_context
from api.models import (
    BuildStatsRequest,
    BuildStatsResponse,
    SkillEvolutionResponse,
    XpTableResponse,
)
from epitome.loadout import validate_equipment, validate_stat_allocation
from epitome.progression import (
    MAX_SKILL_POINTS,
    MAX_XP_LEVEL,
    SKILL_EVOLUTION_TIERS,
    XP_TABLE,
    get_xp_between_levels,
    skill_evolution_tier,
    skill_icon_path,
    stat_points_for_level,
)
from epitome.stat_calculator import calculate_build, class_stat_profile

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

router = APIRouter(prefix="/tools")


@router.post("/build-stats", response_model=BuildStatsResponse)
async def build_stats(
    body: BuildStatsRequest,
    ctx: "IAppContext" = Depends(get_app_context),
) -> BuildStatsResponse:
    """
    Compute derived stats for an unsaved loadout.

    Applies the same checks as saving a build, so the planner reports
    over-allocation and invalid enchantments before the user saves.
    """
    allocation = validate_stat_allocation(body.level, body.stats_allocation)
    equipment = validate_equipment(
        {slot: item.model_dump() if item else None for slot, item in body.equipment.items()},
        ctx.db.enchantments.get,
    )
    result = calculate_build(allocation, equipment)

    total = stat_points_for_level(body.level)
    spent = sum(allocation.values())
    class_stats = None
    if body.character_class is not None:
        class_stats = class_stat_profile(body.character_class.value, body.level, allocation)

    return BuildStatsResponse(
        equipment_stats=result["equipment_stats"],
        calculated_stats=result["calculated_stats"],
        stat_points_total=total,
        stat_points_spent=spent,
        stat_points_remaining=total - spent,
        class_stats=class_stats,
    )


@router.get("/xp-table", response_model=XpTableResponse)
async def xp_table(
    from_level: Optional[int] = Query(None, ge=0, le=MAX_XP_LEVEL),
    to_level: Optional[int] = Query(None, ge=1, le=MAX_XP_LEVEL),
) -> XpTableResponse:
    """XP per level; with both bounds also the XP needed between them."""
    xp_between = None
    if from_level is not None and to_level is not None:
        xp_between = get_xp_between_levels(from_level, to_level)
    return XpTableResponse(
        levels=[entry.to_dict() for entry in XP_TABLE],
        xp_between=xp_between,
    )


@router.get("/skill-evolution", response_model=SkillEvolutionResponse)
async def skill_evolution(
    points: int = Query(..., ge=0, le=MAX_SKILL_POINTS),
    icon: Optional[str] = Query(None, description="Base icon path to resolve"),
) -> SkillEvolutionResponse:
    tier = skill_evolution_tier(points)
    return SkillEvolutionResponse(
        points=points,
        tier=tier,
        label=SKILL_EVOLUTION_TIERS[tier][3],
        icon_path=skill_icon_path(icon, points) if icon else None,
    )
