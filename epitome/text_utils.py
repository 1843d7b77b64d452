"""
Slug and excerpt helpers for guides, items and mobs.
"""
from __future__ import annotations

import re
from typing import Callable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

EXCERPT_LENGTH = 200


def slugify(text: str) -> str:
    """
    Lower-case the text and collapse every run of non-alphanumerics to "-".

    >>> slugify("Ninja: PvP Guide!")
    'ninja-pvp-guide'
    """
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def unique_slug(text: str, exists: Callable[[str], bool]) -> str:
    """
    Slugify text and append -1, -2, ... until `exists` reports it free.

    Args:
        text: source text, usually a title
        exists: returns True if a slug is already taken
    """
    base = slugify(text)
    slug = base
    counter = 1
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def default_excerpt(content: str) -> str:
    """First 200 characters of the content followed by an ellipsis."""
    return content[:EXCERPT_LENGTH] + "..."
