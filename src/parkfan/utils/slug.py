"""
Slug generation for park groups, parks, attractions and restaurants.

Slugs are a pure function of the display name so that re-syncing the same
entity always yields the same URL fragment.
"""

import re
import unicodedata
from urllib.parse import quote

_DISALLOWED = re.compile(r"[^a-z0-9\u4e00-\u9fff-]")
_WHITESPACE = re.compile(r'\s+')
_HYPHEN_RUNS = re.compile(r'-+')


def _strip_combining_marks(text: str) -> str:
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.category(ch).startswith('M'))


def to_slug(name: str) -> str:
    """
    Build a URL-friendly slug from a display name.

    Diacritics are removed, periods dropped and whitespace turned into
    hyphens. Only a-z, 0-9, hyphens and CJK unified ideographs survive;
    the ideographs are percent-encoded as UTF-8.

    Args:
        name: Display name from the upstream API

    Returns:
        Slug string (may be empty if nothing survives filtering)

    Example:
        >>> to_slug("Walt Disney's Magic Kingdom® Park")
        'walt-disneys-magic-kingdom-park'
    """
    if not name:
        return ''

    slug = _strip_combining_marks(name).lower()
    slug = slug.replace('.', '')
    slug = _WHITESPACE.sub('-', slug)
    slug = _DISALLOWED.sub('', slug)
    slug = _HYPHEN_RUNS.sub('-', slug).strip('-')

    return quote(slug, safe='-')
