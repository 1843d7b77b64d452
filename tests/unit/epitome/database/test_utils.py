"""
Tests for epitome/database/utils.py

Tests timestamp parsing and the partial UPDATE builder.
"""
from datetime import datetime, timezone

import pytest

from epitome.database.utils import build_update, parse_db_timestamp

pytestmark = pytest.mark.unit


class TestParseDbTimestamp:
    """Tests for parse_db_timestamp function."""

    def test_returns_none_for_none(self):
        assert parse_db_timestamp(None) is None

    def test_returns_none_for_empty_string(self):
        assert parse_db_timestamp("") is None

    def test_parses_iso_format(self):
        """Naive ISO timestamps are tagged as UTC."""
        result = parse_db_timestamp("2024-01-15T12:34:56")
        assert result == datetime(2024, 1, 15, 12, 34, 56, tzinfo=timezone.utc)

    def test_parses_sqlite_format(self):
        result = parse_db_timestamp("2024-01-15 12:34:56")
        assert result == datetime(2024, 1, 15, 12, 34, 56, tzinfo=timezone.utc)

    def test_keeps_explicit_offset(self):
        result = parse_db_timestamp("2024-01-15T12:34:56+02:00")
        assert result.utcoffset().total_seconds() == 7200

    def test_returns_none_for_invalid_format(self):
        assert parse_db_timestamp("not a timestamp") is None


class TestBuildUpdate:
    def test_only_allowed_columns(self):
        sql, params = build_update(
            "items", {"name": "Axe", "rarity": "RARE", "id": 99, "evil; DROP": 1}, ("name", "rarity")
        )
        assert sql == "UPDATE items SET name = ?, rarity = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?"
        assert params == ["Axe", "RARE"]

    def test_nothing_to_update(self):
        assert build_update("items", {"id": 1}, ("name",)) == (None, [])
        assert build_update("items", {}, ("name",)) == (None, [])

    def test_without_updated_at(self):
        sql, params = build_update("votes", {"value": 1}, ("value",), touch_updated_at=False)
        assert sql == "UPDATE votes SET value = ? WHERE id = ?"
        assert params == [1]
