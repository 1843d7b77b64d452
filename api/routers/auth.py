"""
api.routers.auth - Discord sign-in and session endpoints.

Flow:
    GET /auth/discord/login     -> authorization URL + single-use state
    GET /auth/discord/callback  -> exchanges the code, signs the user in
    GET /auth/session           -> who am I
    POST /auth/logout           -> clears the session cookie

The session token is returned in the body and set as an HttpOnly cookie;
either can be used on later requests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import get_app_context, get_current_user
from api.models import LoginResponse, SessionResponse, SuccessResponse, TokenResponse
from epitome.auth import is_admin, is_moderator
from epitome.discord_oauth import DiscordOAuthError

if TYPE_CHECKING:
    from epitome.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth")


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to return to the signed-in user."""
    return {
        "id": user["id"],
        "name": user.get("name"),
        "username": user.get("username"),
        "email": user.get("email"),
        "image": user.get("image"),
        "discord_id": user.get("discord_id"),
        "role": user.get("role"),
    }


@router.get("/discord/login", response_model=LoginResponse)
async def discord_login(
    ctx: "IAppContext" = Depends(get_app_context),
) -> LoginResponse:
    if not ctx.config.discord_configured:
        raise HTTPException(status_code=503, detail="Discord sign-in is not configured")
    state = ctx.oauth_states.create()
    return LoginResponse(
        authorization_url=ctx.discord.authorization_url(state),
        state=state,
    )


@router.get("/discord/callback", response_model=TokenResponse)
async def discord_callback(
    response: Response,
    code: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    ctx: "IAppContext" = Depends(get_app_context),
) -> TokenResponse:
    """Complete the OAuth round trip and start a session."""
    if not ctx.oauth_states.consume(state):
        raise HTTPException(status_code=400, detail="Invalid or expired OAuth state")

    try:
        access_token = ctx.discord.exchange_code(code)
        profile = ctx.discord.fetch_profile(access_token)
    except DiscordOAuthError as e:
        logger.warning(f"Discord sign-in failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    user = ctx.db.users.upsert_discord_user(
        discord_id=profile.discord_id,
        username=profile.username,
        email=profile.email,
        name=profile.name,
        image=profile.image,
    )
    token = ctx.sessions.issue(user["id"])
    response.set_cookie(
        ctx.config.session_cookie_name,
        token,
        max_age=ctx.config.session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"User {user['id']} signed in via Discord")
    return TokenResponse(token=token, user=public_user(user))


@router.get("/session", response_model=SessionResponse)
async def get_session(
    user: Optional[Dict[str, Any]] = Depends(get_current_user),
    ctx: "IAppContext" = Depends(get_app_context),
) -> SessionResponse:
    if user is None:
        return SessionResponse(authenticated=False)
    admin_ids = ctx.config.admin_discord_ids
    return SessionResponse(
        authenticated=True,
        user=public_user(user),
        is_admin=is_admin(user, admin_ids),
        is_moderator=is_moderator(user, admin_ids),
    )


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    ctx: "IAppContext" = Depends(get_app_context),
) -> SuccessResponse:
    response.delete_cookie(ctx.config.session_cookie_name)
    return SuccessResponse()
