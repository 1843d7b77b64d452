"""Epitome community database: game data, build planner, market and map."""

__version__ = "1.0.0"
