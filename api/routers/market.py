"""
api.routers.market - Player-to-player trade listings and comments.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import clamp_limit, get_app_context, require_user
from api.models import (
    CommentCreate,
    CommentsListResponse,
    CurrencyName,
    ItemTypeName,
    ListingCreate,
    ListingsListResponse,
    ListingUpdate,
    RarityName,
    SuccessResponse,
)
from epitome.auth import is_moderator
from epitome.stat_calculator import EquippedItem, item_stat_ranges

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/market")


def _get_listing_or_404(ctx: "IAppContext", listing_id: int) -> Dict[str, Any]:
    listing = ctx.db.market.get_listing(listing_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")
    return listing


def listing_item_stats(ctx: "IAppContext", listing: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Stat ranges of the listed gear at its enhancement level, with its enchantments."""
    if not listing.get("item_id") or not listing.get("is_gear"):
        return None
    item = ctx.db.items.get(listing["item_id"])
    if item is None:
        return None
    equipped = EquippedItem.from_dict({
        **item,
        "enhancement_level": listing.get("enhancement_level", 0),
        "enchantments": listing.get("enchantments") or [],
    })
    return {stat: rng.to_dict() for stat, rng in item_stat_ranges(equipped).items()}


@router.get("", response_model=ListingsListResponse)
async def list_listings(
    ctx: "IAppContext" = Depends(get_app_context),
    search: Optional[str] = Query(None, description="Search titles and item names"),
    item_type: Optional[ItemTypeName] = Query(None),
    rarity: Optional[RarityName] = Query(None),
    currency: Optional[CurrencyName] = Query(None),
    status: str = Query("ACTIVE", pattern="^(ACTIVE|SOLD|CANCELLED|all)$"),
    sort_by: str = Query(
        "newest", pattern="^(newest|oldest|price-low|price-high|most-viewed)$"
    ),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ListingsListResponse:
    limit = clamp_limit(limit, ctx)
    listings, total = ctx.db.market.list_listings(
        search=search,
        item_type=item_type.value if item_type else None,
        rarity=rarity.value if rarity else None,
        currency=currency.value if currency else None,
        status=status,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    return ListingsListResponse(
        listings=listings,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(listings) < total,
    )


@router.post("", status_code=201)
async def create_listing(
    body: ListingCreate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    listing_id = ctx.db.market.create_listing(
        seller_id=user["id"],
        title=body.title.strip(),
        item_name=body.item_name,
        item_type=body.item_type.value,
        item_rarity=body.item_rarity.value,
        price_amount=body.price_amount,
        price_currency=body.price_currency.value,
        description=body.description,
        item_id=body.item_id,
        item_image_url=body.item_image_url,
        is_gear=body.is_gear,
        enhancement_level=body.enhancement_level,
        enchantments=[e.model_dump() for e in body.enchantments],
    )
    return _get_listing_or_404(ctx, listing_id)


@router.get("/{listing_id}")
async def get_listing(
    listing_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Listing detail with comments (newest first). Counts a view."""
    _get_listing_or_404(ctx, listing_id)
    ctx.db.market.increment_views(listing_id)
    listing = _get_listing_or_404(ctx, listing_id)
    listing["comments"] = ctx.db.market.list_comments(listing_id)
    listing["item_stats"] = listing_item_stats(ctx, listing)
    return listing


@router.put("/{listing_id}")
async def update_listing(
    listing_id: int,
    body: ListingUpdate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    """Seller-only update of title, description, price or status."""
    listing = _get_listing_or_404(ctx, listing_id)
    if listing["seller_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized")

    changes = body.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    ctx.db.market.update_listing(listing_id, **changes)
    return _get_listing_or_404(ctx, listing_id)


@router.delete("/{listing_id}", response_model=SuccessResponse)
async def delete_listing(
    listing_id: int,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    """The seller, a moderator or an admin may delete a listing."""
    listing = _get_listing_or_404(ctx, listing_id)
    if listing["seller_id"] != user["id"] and not is_moderator(
        user, ctx.config.admin_discord_ids
    ):
        raise HTTPException(status_code=403, detail="Not authorized")
    ctx.db.market.delete_listing(listing_id)
    logger.info(f"User {user['id']} deleted listing {listing_id}")
    return SuccessResponse()


@router.get("/{listing_id}/comments", response_model=CommentsListResponse)
async def list_comments(
    listing_id: int,
    ctx: "IAppContext" = Depends(get_app_context),
) -> CommentsListResponse:
    if not ctx.db.market.listing_exists(listing_id):
        raise HTTPException(status_code=404, detail="Listing not found")
    return CommentsListResponse(comments=ctx.db.market.list_comments(listing_id))


@router.post("/{listing_id}/comments", status_code=201)
async def add_comment(
    listing_id: int,
    body: CommentCreate,
    user: Dict[str, Any] = Depends(require_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> Dict[str, Any]:
    if not ctx.db.market.listing_exists(listing_id):
        raise HTTPException(status_code=404, detail="Listing not found")
    content = body.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment content is required")
    return ctx.db.market.add_comment(listing_id, user["id"], content)
