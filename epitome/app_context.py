# epitome/app_context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from epitome.auth import OAuthStateStore, SessionManager
from epitome.config import Config
from epitome.database import Database
from epitome.discord_oauth import DiscordOAuthClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Aggregates the services used by the API.

    - config: settings, secrets and deployment values
    - db: SQLite persistence, one repository per entity
    - sessions: signed session tokens
    - oauth_states: CSRF states for the Discord sign-in round trip
    - discord: Discord OAuth client

    Call close() when the application exits to release resources.
    """
    config: Config
    db: Database
    sessions: SessionManager
    oauth_states: OAuthStateStore
    discord: DiscordOAuthClient

    def close(self) -> None:
        """Close the database connection and the Discord HTTP session."""
        logger.info("Closing AppContext resources...")

        if self.db:
            try:
                self.db.close()
                logger.debug("Database closed")
            except Exception as e:
                logger.error(f"Error closing database: {e}")

        if self.discord:
            try:
                self.discord.close()
                logger.debug("Discord client closed")
            except Exception as e:
                logger.error(f"Error closing Discord client: {e}")

        logger.info("AppContext resources closed")


def create_app_context(config: Optional[Config] = None) -> AppContext:
    config = config or Config()
    db = Database(config.database_path)

    if not config.discord_configured:
        logger.warning("Discord OAuth is not configured; sign-in is disabled")

    return AppContext(
        config=config,
        db=db,
        sessions=SessionManager(config.session_secret, config.session_ttl_seconds),
        oauth_states=OAuthStateStore(),
        discord=DiscordOAuthClient(
            config.discord_client_id,
            config.discord_client_secret,
            config.discord_redirect_uri,
        ),
    )
