"""
api.routers.guides - Community guides.

Content is raw markdown; clients render it. Slugs are derived from the
title and made unique with a numeric suffix.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_app_context, get_current_user, require_user
from api.models import GuideCategory, GuideCreate, GuidesListResponse, GuideUpdate, SuccessResponse
from epitome.auth import is_admin
from epitome.text_utils import default_excerpt, unique_slug

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/guides")


def _get_guide_or_404(ctx: "IAppContext", slug: str) -> Dict[str, Any]:
    guide = ctx.db.guides.get_by_slug(slug)
    if guide is None:
        raise HTTPException(status_code=404, detail="Guide not found")
    return guide


def _check_can_edit(ctx: "IAppContext", guide: Dict[str, Any], user: Dict[str, Any]) -> None:
    if guide["author_id"] != user["id"] and not is_admin(user, ctx.config.admin_discord_ids):
        raise HTTPException(status_code=403, detail="Forbidden")


@router.get("", response_model=GuidesListResponse)
async def list_guides(
    ctx: "IAppContext" = Depends(get_app_context),
    user: Optional[Dict[str, Any]] = Depends(get_current_user),
    category: Optional[GuideCategory] = Query(None),
    search: Optional[str] = Query(None, description="Search titles and excerpts"),
    featured: bool = Query(False),
    user_id: Optional[int] = Query(None, description="Only guides by this author"),
) -> GuidesListResponse:
    """
    List guides, featured first then newest.

    Drafts are included only when a user lists their own guides.
    """
    own_guides = user is not None and user_id is not None and user["id"] == user_id
    guides = ctx.db.guides.list_guides(
        category=category.value if category else None,
        search=search,
        featured=featured,
        author_id=user_id,
        include_unpublished=own_guides,
    )
    return GuidesListResponse(guides=guides, total=len(guides))


@router.post("", status_code=201)
async def create_guide(
    body: GuideCreate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    title = body.title.strip()
    slug = unique_slug(title, ctx.db.guides.slug_exists)
    if not slug:
        raise HTTPException(status_code=400, detail="Title must contain letters or digits")

    guide_id = ctx.db.guides.create(
        author_id=user["id"],
        title=title,
        slug=slug,
        content=body.content,
        category=body.category.value,
        excerpt=body.excerpt or default_excerpt(body.content),
        is_published=body.is_published,
    )
    logger.info(f"User {user['id']} created guide {guide_id} ({slug})")
    return ctx.db.guides.get(guide_id)


@router.get("/{slug}")
async def get_guide(
    slug: str,
    user: Optional[Dict[str, Any]] = Depends(get_current_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Guide detail. Counts a view; drafts are visible only to their author."""
    guide = _get_guide_or_404(ctx, slug)
    if not guide["is_published"] and (user is None or user["id"] != guide["author_id"]):
        raise HTTPException(status_code=404, detail="Guide not found")

    ctx.db.guides.increment_views(guide["id"])
    guide["view_count"] += 1
    return guide


@router.put("/{slug}")
async def update_guide(
    slug: str,
    body: GuideUpdate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Author or admin update. A changed title re-derives the slug."""
    guide = _get_guide_or_404(ctx, slug)
    _check_can_edit(ctx, guide, user)

    changes = body.model_dump(exclude_unset=True)
    if changes.get("category") is not None:
        changes["category"] = changes["category"].value
    if "title" in changes:
        title = changes["title"].strip()
        changes["title"] = title
        if title != guide["title"]:
            new_slug = unique_slug(
                title, lambda s: ctx.db.guides.slug_exists(s, exclude_id=guide["id"])
            )
            if not new_slug:
                raise HTTPException(status_code=400, detail="Title must contain letters or digits")
            changes["slug"] = new_slug

    ctx.db.guides.update(guide["id"], **changes)
    return ctx.db.guides.get(guide["id"])


@router.delete("/{slug}", response_model=SuccessResponse)
async def delete_guide(
    slug: str,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    guide = _get_guide_or_404(ctx, slug)
    _check_can_edit(ctx, guide, user)
    ctx.db.guides.delete(guide["id"])
    return SuccessResponse()
