"""
api.tests.conftest - Pytest fixtures for API tests.

Each test gets a fresh SQLite database and a real AppContext; only the
Discord client is mocked.
"""

from __future__ import annotations

from typing import Any, Dict, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from epitome.app_context import AppContext
from epitome.auth import OAuthStateStore, SessionManager
from epitome.config import (
    ENV_ADMIN_DISCORD_IDS,
    ENV_DB_PATH,
    ENV_DISCORD_CLIENT_ID,
    ENV_DISCORD_CLIENT_SECRET,
    ENV_SESSION_SECRET,
    Config,
)
from epitome.database import Database


@pytest.fixture(scope="session")
def sessions() -> SessionManager:
    """Key derivation is slow, so one manager serves the whole run."""
    return SessionManager("test-session-secret", ttl_seconds=3600)


@pytest.fixture
def config(tmp_path, monkeypatch) -> Config:
    for var in (
        ENV_ADMIN_DISCORD_IDS,
        ENV_DB_PATH,
        ENV_DISCORD_CLIENT_ID,
        ENV_DISCORD_CLIENT_SECRET,
        ENV_SESSION_SECRET,
    ):
        monkeypatch.delenv(var, raising=False)

    cfg = Config(config_file=tmp_path / "config.json")
    cfg.data["database"]["path"] = str(tmp_path / "epitome.db")
    cfg.data["auth"]["discord_client_id"] = "client-id"
    cfg.data["auth"]["discord_client_secret"] = "client-secret"
    return cfg


@pytest.fixture
def database(config: Config) -> Generator[Database, None, None]:
    db = Database(config.database_path)
    yield db
    db.close()


@pytest.fixture
def mock_discord() -> MagicMock:
    """Discord OAuth client that never touches the network."""
    discord = MagicMock()
    discord.configured = True
    discord.authorization_url.side_effect = (
        lambda state: f"https://discord.com/api/oauth2/authorize?state={state}"
    )
    return discord


@pytest.fixture
def app_context(
    config: Config,
    database: Database,
    sessions: SessionManager,
    mock_discord: MagicMock,
) -> AppContext:
    return AppContext(
        config=config,
        db=database,
        sessions=sessions,
        oauth_states=OAuthStateStore(),
        discord=mock_discord,
    )


@pytest.fixture
def client(app_context: AppContext) -> Generator[TestClient, None, None]:
    """Test client bound to the per-test AppContext."""
    import api.main

    original_context = api.main._app_context
    api.main._app_context = app_context

    with TestClient(api.main.app) as test_client:
        yield test_client

    api.main._app_context = original_context


# ------------------------------------------------------------------
# Users
# ------------------------------------------------------------------


def _make_user(db: Database, username: str, role: str = "USER") -> Dict[str, Any]:
    user_id = db.users.create(
        username=username,
        discord_id=f"discord-{username}",
        email=f"{username}@example.com",
        name=username.capitalize(),
        role=role,
    )
    return db.users.get_by_id(user_id)


@pytest.fixture
def user(database: Database) -> Dict[str, Any]:
    return _make_user(database, "player")


@pytest.fixture
def other_user(database: Database) -> Dict[str, Any]:
    return _make_user(database, "rival")


@pytest.fixture
def moderator(database: Database) -> Dict[str, Any]:
    return _make_user(database, "mod", role="MODERATOR")


@pytest.fixture
def admin(database: Database) -> Dict[str, Any]:
    return _make_user(database, "boss", role="ADMIN")


def auth_for(sessions: SessionManager, account: Dict[str, Any]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {sessions.issue(account['id'])}"}


@pytest.fixture
def user_headers(sessions: SessionManager, user) -> Dict[str, str]:
    return auth_for(sessions, user)


@pytest.fixture
def other_headers(sessions: SessionManager, other_user) -> Dict[str, str]:
    return auth_for(sessions, other_user)


@pytest.fixture
def moderator_headers(sessions: SessionManager, moderator) -> Dict[str, str]:
    return auth_for(sessions, moderator)


@pytest.fixture
def admin_headers(sessions: SessionManager, admin) -> Dict[str, str]:
    return auth_for(sessions, admin)


# ------------------------------------------------------------------
# Catalogue data
# ------------------------------------------------------------------


@pytest.fixture
def sword(database: Database) -> Dict[str, Any]:
    """Gear with enhancement bonuses and materials for +1..+3."""
    item_id = database.items.create(
        name="Iron Sword",
        slug="iron-sword",
        type="WEAPON",
        rarity="COMMON",
        level=10,
        is_gear=True,
        stats={"attack": {"min": 16, "max": 22}},
        enhancement_bonuses={
            "1": {"attack": {"min": 2, "max": 3}},
            "2": {"attack": {"min": 2, "max": 3}},
            "3": {"attack": {"min": 3, "max": 4}, "critRate": {"min": 1, "max": 1}},
        },
        enhancement_materials={
            "1": [{"item_id": None, "item_name": "Iron Ore", "quantity": 2}],
            "2": [{"item_id": None, "item_name": "Iron Ore", "quantity": 3}],
            "3": [
                {"item_id": None, "item_name": "Iron Ore", "quantity": 5},
                {"item_id": None, "item_name": "Spirit Stone", "quantity": 1},
            ],
        },
    )
    return database.items.get(item_id)


@pytest.fixture
def potion(database: Database) -> Dict[str, Any]:
    item_id = database.items.create(
        name="Health Potion",
        slug="health-potion",
        type="CONSUMABLE",
        rarity="COMMON",
        level=1,
        is_gear=False,
        stats={},
    )
    return database.items.get(item_id)


@pytest.fixture
def fury(database: Database) -> Dict[str, Any]:
    """Attack enchantment allowed on weapons and gloves."""
    enchantment_id = database.enchantments.create(
        name="Fury",
        slug="fury",
        stat_key="attack",
        min_value=1,
        max_value=10,
        equipment_types=["WEAPON", "GLOVES"],
    )
    return database.enchantments.get(enchantment_id)
