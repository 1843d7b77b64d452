"""
Configuration management for the Epitome database service.
Handles server, database, auth and map settings and their persistence.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Environment variables that override values from the config file
ENV_SESSION_SECRET = "EPITOME_SESSION_SECRET"
ENV_DISCORD_CLIENT_ID = "EPITOME_DISCORD_CLIENT_ID"
ENV_DISCORD_CLIENT_SECRET = "EPITOME_DISCORD_CLIENT_SECRET"
ENV_ADMIN_DISCORD_IDS = "EPITOME_ADMIN_DISCORD_IDS"
ENV_DB_PATH = "EPITOME_DB_PATH"


def get_config_dir() -> Path:
    """
    Get the application config directory.

    Returns:
        Path to the config directory (~/.epitome/)
    """
    config_dir = Path.home() / ".epitome"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


class Config:
    """
    Application configuration with JSON persistence.

    The backing store is a JSON file on disk. Secrets and deployment
    values can be supplied through EPITOME_* environment variables, which
    take precedence over the file and are never written back to it.
    """

    # NOTE: This structure is treated as immutable. Always use
    # _default_config_deepcopy() when you need a fresh copy of defaults.
    DEFAULT_CONFIG: Dict[str, Any] = {
        "server": {
            "cors_origins": [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            ],
            "public_base_url": "http://localhost:8000",
        },
        "database": {
            # Empty = ~/.epitome/epitome.db
            "path": "",
        },
        "auth": {
            "session_secret": "",
            "session_ttl_seconds": 60 * 60 * 24 * 30,
            "cookie_name": "epitome_session",
            # Discord user ids that are always treated as admins
            "admin_discord_ids": [],
            "discord_client_id": "",
            "discord_client_secret": "",
            "discord_redirect_uri": "http://localhost:8000/api/v1/auth/discord/callback",
        },
        "map": {
            "width": 2048,
            "height": 2048,
        },
        "pagination": {
            "default_limit": 20,
            "max_limit": 100,
        },
    }

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Optional path to config JSON file. When omitted,
                         ~/.epitome/config.json is used.
        """
        self.config_file: Path = self._resolve_config_path(config_file)
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        self.data: Dict[str, Any] = self._load()
        logger.info(f"Config loaded from {self.config_file}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_config_path(config_file: Optional[Path]) -> Path:
        if config_file is not None:
            return config_file
        return Path.home() / ".epitome" / "config.json"

    def _load(self) -> Dict[str, Any]:
        """Load configuration from JSON file, merging with defaults."""
        if self.config_file.exists():
            try:
                with self.config_file.open("r", encoding="utf-8") as f:
                    raw = json.load(f)

                merged = self._merge_with_defaults(raw)
                logger.info("Configuration loaded successfully")
                return merged
            except (OSError, json.JSONDecodeError) as exc:
                logger.error(f"Failed to load config: {exc}. Using defaults.")
                return self._default_config_deepcopy()
        else:
            logger.info("No config file found, using defaults")
            return self._default_config_deepcopy()

    @classmethod
    def _default_config_deepcopy(cls) -> Dict[str, Any]:
        """
        Return a deep copy of DEFAULT_CONFIG to avoid state leakage
        between instances or tests.
        """
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    def _merge_with_defaults(self, user_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge user config with defaults to handle new keys.

        Nested sections are merged so new keys under e.g. "auth" appear
        without discarding user-provided values.
        """
        merged = self._default_config_deepcopy()

        for key, value in user_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value

        return merged

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        """Persist the current configuration to the config file."""
        try:
            with self.config_file.open("w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
            logger.info("Configuration saved")
        except OSError as exc:
            logger.error(f"Failed to save config: {exc}")

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    @property
    def cors_origins(self) -> List[str]:
        return list(self.data["server"].get("cors_origins", []))

    @cors_origins.setter
    def cors_origins(self, value: List[str]) -> None:
        self.data["server"]["cors_origins"] = list(value)
        self.save()

    @property
    def public_base_url(self) -> str:
        return self.data["server"].get("public_base_url", "").rstrip("/")

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    @property
    def database_path(self) -> Path:
        """
        SQLite database location.

        EPITOME_DB_PATH wins over the config file; an empty value falls
        back to ~/.epitome/epitome.db.
        """
        override = os.environ.get(ENV_DB_PATH)
        if override:
            return Path(override)
        configured = self.data["database"].get("path") or ""
        if configured:
            return Path(configured)
        return Path.home() / ".epitome" / "epitome.db"

    @database_path.setter
    def database_path(self, value: Path) -> None:
        self.data["database"]["path"] = str(value)
        self.save()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    @property
    def session_secret(self) -> str:
        return os.environ.get(ENV_SESSION_SECRET) or self.data["auth"].get("session_secret", "")

    @session_secret.setter
    def session_secret(self, value: str) -> None:
        self.data["auth"]["session_secret"] = value
        self.save()

    @property
    def session_ttl_seconds(self) -> int:
        """Session lifetime, clamped to between 5 minutes and 90 days."""
        value = int(self.data["auth"].get("session_ttl_seconds", 60 * 60 * 24 * 30))
        return max(300, min(value, 60 * 60 * 24 * 90))

    @property
    def session_cookie_name(self) -> str:
        return self.data["auth"].get("cookie_name", "epitome_session")

    @property
    def admin_discord_ids(self) -> List[str]:
        """
        Discord ids that always have admin access.

        EPITOME_ADMIN_DISCORD_IDS is a comma-separated list and replaces
        the configured list when set.
        """
        override = os.environ.get(ENV_ADMIN_DISCORD_IDS)
        if override is not None:
            return [part.strip() for part in override.split(",") if part.strip()]
        return [str(v) for v in self.data["auth"].get("admin_discord_ids", [])]

    @admin_discord_ids.setter
    def admin_discord_ids(self, value: List[str]) -> None:
        self.data["auth"]["admin_discord_ids"] = [str(v) for v in value]
        self.save()

    @property
    def discord_client_id(self) -> str:
        return os.environ.get(ENV_DISCORD_CLIENT_ID) or self.data["auth"].get("discord_client_id", "")

    @property
    def discord_client_secret(self) -> str:
        return os.environ.get(ENV_DISCORD_CLIENT_SECRET) or self.data["auth"].get("discord_client_secret", "")

    @property
    def discord_redirect_uri(self) -> str:
        return self.data["auth"].get("discord_redirect_uri", "")

    @property
    def discord_configured(self) -> bool:
        return bool(self.discord_client_id and self.discord_client_secret)

    # ------------------------------------------------------------------
    # Map
    # ------------------------------------------------------------------

    @property
    def map_size(self) -> tuple[int, int]:
        section = self.data.get("map", {})
        return int(section.get("width", 2048)), int(section.get("height", 2048))

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def max_page_size(self) -> int:
        """Largest page a list endpoint returns (GUARDRAIL: 1..500)."""
        value = int(self.data["pagination"].get("max_limit", 100))
        return max(1, min(value, 500))
