"""
api.routers.builds - Build planner endpoints.

Builds are stored with their stat allocation and equipment; derived
equipment totals and character stats are recomputed on every read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context, get_current_user, require_user
from api.models import (
    BuildCreate,
    BuildsListResponse,
    BuildUpdate,
    CharacterClassName,
    SuccessResponse,
    VoteRequest,
    VoteResponse,
)
from epitome.loadout import (
    validate_equipment,
    validate_skill_allocation,
    validate_stat_allocation,
)
from epitome.stat_calculator import calculate_build

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/builds")


def with_derived_stats(build: Dict[str, Any]) -> Dict[str, Any]:
    """Attach equipment_stats and calculated_stats to a build dict."""
    build.update(calculate_build(build.get("stats_allocation") or {}, build.get("equipment") or {}))
    return build


def _dump_equipment(equipment: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if equipment is None:
        return None
    return {slot: item.model_dump() if item else None for slot, item in equipment.items()}


def _get_build_or_404(ctx: "IAppContext", build_id: int) -> Dict[str, Any]:
    build = ctx.db.builds.get(build_id)
    if build is None:
        raise HTTPException(status_code=404, detail="Build not found")
    return build


@router.get("", response_model=BuildsListResponse)
async def list_builds(
    ctx: "IAppContext" = Depends(get_app_context),
    character_class: Optional[CharacterClassName] = Query(None, alias="class"),
    tag: Optional[str] = Query(None, description="Only builds carrying this tag"),
    search: Optional[str] = Query(None, description="Search build titles"),
    sort: str = Query("newest", pattern="^(newest|oldest|popular|level)$"),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> BuildsListResponse:
    """List published builds."""
    limit = clamp_limit(limit, ctx)
    builds, total = ctx.db.builds.list_builds(
        character_class=character_class.value if character_class else None,
        tag=tag,
        search=search,
        sort=sort,
        published=True,
        limit=limit,
        offset=offset,
    )
    return BuildsListResponse(
        builds=builds,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(builds) < total,
    )


@router.post("", status_code=201)
async def create_build(
    body: BuildCreate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Save a new build owned by the signed-in user."""
    allocation = validate_stat_allocation(body.level, body.stats_allocation)
    skills = validate_skill_allocation(body.skill_points)
    equipment = validate_equipment(_dump_equipment(body.equipment), ctx.db.enchantments.get)

    build_id = ctx.db.builds.create(
        user_id=user["id"],
        title=body.title.strip(),
        character_class=body.character_class.value,
        level=body.level,
        description=body.description,
        guide=body.guide,
        tags=body.tags,
        stats_allocation=allocation,
        equipment=equipment,
        skill_points=skills,
        skill_path=body.skill_path,
        is_published=body.is_published,
    )
    return with_derived_stats(_get_build_or_404(ctx, build_id))


@router.get("/{build_id}")
async def get_build(
    build_id: int,
    user: Optional[Dict[str, Any]] = Depends(get_current_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """
    Build detail with derived stats.

    Unpublished builds are only visible to their owner.
    """
    build = _get_build_or_404(ctx, build_id)
    is_owner = user is not None and user["id"] == build["user_id"]
    if not build["is_published"] and not is_owner:
        raise HTTPException(status_code=404, detail="Build not found")
    build["user_vote"] = ctx.db.builds.get_user_vote(build_id, user["id"]) if user else None
    return with_derived_stats(build)


@router.put("/{build_id}")
async def update_build(
    build_id: int,
    body: BuildUpdate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Owner-only partial update. The allocation is re-checked against the new level."""
    build = _get_build_or_404(ctx, build_id)
    if build["user_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")

    changes = body.model_dump(exclude_unset=True)
    if "character_class" in changes and changes["character_class"] is not None:
        changes["character_class"] = changes["character_class"].value
    if "title" in changes and changes["title"] is not None:
        changes["title"] = changes["title"].strip()

    if "level" in changes or "stats_allocation" in changes:
        level = changes.get("level") or build["level"]
        allocation = changes.get("stats_allocation")
        if allocation is None:
            allocation = build["stats_allocation"]
        changes["stats_allocation"] = validate_stat_allocation(level, allocation)
    if "skill_points" in changes:
        changes["skill_points"] = validate_skill_allocation(changes["skill_points"])
    if "equipment" in changes:
        changes["equipment"] = validate_equipment(
            _dump_equipment(body.equipment), ctx.db.enchantments.get
        )

    ctx.db.builds.update(build_id, **changes)
    return with_derived_stats(_get_build_or_404(ctx, build_id))


@router.delete("/{build_id}", response_model=SuccessResponse)
async def delete_build(
    build_id: int,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    build = _get_build_or_404(ctx, build_id)
    if build["user_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    ctx.db.builds.delete(build_id)
    logger.info(f"User {user['id']} deleted build {build_id}")
    return SuccessResponse()


@router.get("/{build_id}/vote", response_model=VoteResponse)
async def get_vote(
    build_id: int,
    user: Optional[Dict[str, Any]] = Depends(get_current_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> VoteResponse:
    """Current counters and the caller's vote (None when anonymous)."""
    build = _get_build_or_404(ctx, build_id)
    return VoteResponse(
        upvotes=build["upvotes"],
        downvotes=build["downvotes"],
        user_vote=ctx.db.builds.get_user_vote(build_id, user["id"]) if user else None,
    )


@router.post("/{build_id}/vote", response_model=VoteResponse)
async def vote_build(
    build_id: int,
    body: VoteRequest,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> VoteResponse:
    """
    Vote on a build.

    Voting the same way twice removes the vote; voting the other way
    switches it.
    """
    _get_build_or_404(ctx, build_id)
    result = ctx.db.builds.vote(build_id, user["id"], body.vote_type.value)
    return VoteResponse(**result)
