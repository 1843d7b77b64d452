import faulthandler
import sys
import time
from pathlib import Path

import pytest

from epitome.config import (
    ENV_ADMIN_DISCORD_IDS,
    ENV_DB_PATH,
    ENV_DISCORD_CLIENT_ID,
    ENV_DISCORD_CLIENT_SECRET,
    ENV_SESSION_SECRET,
    Config,
)
from epitome.database import Database


@pytest.fixture
def clean_env(monkeypatch):
    """Remove EPITOME_* overrides so config values come from the file."""
    for var in (
        ENV_ADMIN_DISCORD_IDS,
        ENV_DB_PATH,
        ENV_DISCORD_CLIENT_ID,
        ENV_DISCORD_CLIENT_SECRET,
        ENV_SESSION_SECRET,
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def temp_config(tmp_path, clean_env):
    """
    Provide a fresh Config with validation.

    This fixture GUARANTEES a clean config or fails loudly.
    """
    config_path = tmp_path / f"config_{id(tmp_path)}_{time.time_ns()}.json"
    config = Config(config_file=config_path)

    assert config.session_secret == "", \
        f"FIXTURE CONTAMINATED! session_secret set, file={config.config_file}"
    assert config.admin_discord_ids == [], \
        f"FIXTURE CONTAMINATED! admins={config.admin_discord_ids}, file={config.config_file}"
    assert config.map_size == (2048, 2048), \
        f"FIXTURE CONTAMINATED! map={config.map_size}, file={config.config_file}"

    return config


@pytest.fixture
def temp_db(tmp_path):
    db_path = tmp_path / f"db_{id(tmp_path)}_{time.time_ns()}.db"
    db = Database(db_path=db_path)
    yield db
    db.close()


@pytest.fixture
def make_user(temp_db):
    """Factory creating users in temp_db; returns the stored row."""

    def _make(username: str, role: str = "USER"):
        user_id = temp_db.users.create(
            username=username,
            discord_id=f"discord-{username}",
            email=f"{username}@example.com",
            name=username.capitalize(),
            role=role,
        )
        return temp_db.users.get_by_id(user_id)

    return _make


def pytest_collection_modifyitems(config, items):
    """Assign tier markers based on test location."""
    for item in items:
        path = Path(str(item.fspath)).as_posix()

        if "/tests/unit/" in path:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


def pytest_sessionstart(session):  # pragma: no cover - test harness init
    """Enable faulthandler for the entire test run to aid diagnosing hangs."""
    try:
        faulthandler.enable(file=sys.stderr, all_threads=True)
    except (AttributeError, ValueError, OSError):
        pass
