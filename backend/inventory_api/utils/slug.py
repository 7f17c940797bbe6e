"""URL slug helpers for category names."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_WHITESPACE = re.compile(r"\s+")


def generate_slug(name: str) -> str:
    """Derive a slug from a category name ("Home & Garden" -> "home-garden")."""
    slug = _NON_WORD.sub("", name.lower().strip())
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def normalize_slug(slug: str) -> str:
    """Normalize a caller-supplied slug: trimmed, lower-cased, spaces hyphenated."""
    return _WHITESPACE.sub("-", slug.strip().lower())
