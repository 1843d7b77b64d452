"""
Discord OAuth2 sign-in.

Handles the authorization-code flow used by the web frontend:

1. Redirect the browser to `authorization_url(state)`
2. Discord redirects back with `code` and `state`
3. `exchange_code(code)` returns an access token
4. `fetch_profile(token)` returns the Discord user, mapped to our fields
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

AVATAR_URL = "https://cdn.discordapp.com/avatars/{discord_id}/{avatar}.png"


class DiscordOAuthError(Exception):
    """Raised when Discord rejects the code or the profile cannot be read."""
    pass


@dataclass
class DiscordProfile:
    """A Discord user as stored on our side."""

    discord_id: str
    username: str
    email: Optional[str] = None
    image: Optional[str] = None

    @property
    def name(self) -> str:
        return self.username

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DiscordProfile":
        discord_id = str(data.get("id") or "")
        if not discord_id:
            raise DiscordOAuthError("Discord profile has no id")
        avatar = data.get("avatar")
        return cls(
            discord_id=discord_id,
            username=data.get("username") or f"user-{discord_id}",
            email=data.get("email"),
            image=AVATAR_URL.format(discord_id=discord_id, avatar=avatar) if avatar else None,
        )


class DiscordOAuthClient:
    """
    OAuth client for Discord.

    Holds a requests.Session so tests can swap in a mock client.
    """

    AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
    TOKEN_URL = "https://discord.com/api/oauth2/token"
    USER_URL = "https://discord.com/api/users/@me"
    SCOPE = "identify email"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "Epitome/1.0"})

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.SCOPE,
            "state": state,
            "prompt": "none",
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token.

        Raises:
            DiscordOAuthError: if the request fails or no token is returned
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        try:
            response = self.session.post(self.TOKEN_URL, data=data, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Discord token exchange failed: {e}")
            raise DiscordOAuthError("Token exchange failed") from e

        token = payload.get("access_token")
        if not token:
            raise DiscordOAuthError("Discord did not return an access token")
        return token

    def fetch_profile(self, access_token: str) -> DiscordProfile:
        try:
            response = self.session.get(
                self.USER_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Discord profile request failed: {e}")
            raise DiscordOAuthError("Could not load Discord profile") from e
        return DiscordProfile.from_api(data)

    def close(self) -> None:
        self.session.close()
