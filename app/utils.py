"""String helpers shared by the IMDb extractors."""

from __future__ import annotations

import re


WHITESPACE_RE = re.compile(r"\s+")
NON_SLUG_RE = re.compile(r"[^a-z0-9-]")
REPEATED_HYPHEN_RE = re.compile(r"-+")
IMAGE_TRANSFORM_RE = re.compile(r"\._V1_.*\.jpg")
IMDB_ID_RE = re.compile(r"tt\d+")
INTEREST_ID_RE = re.compile(r"/interest/([^/?#]+)")
LEADING_DIGITS_RE = re.compile(r"\d+")


def slugify(value: str) -> str:
    """Return a lowercase, hyphen separated slug.

    Characters outside ``[a-z0-9-]`` are dropped rather than transliterated so
    ``"Sci-Fi"`` becomes ``"sci-fi"`` and ``"Popular interests"`` becomes
    ``"popular-interests"``.
    """

    if not value:
        return ""
    slug = WHITESPACE_RE.sub("-", value.lower())
    slug = NON_SLUG_RE.sub("", slug)
    slug = REPEATED_HYPHEN_RE.sub("-", slug)
    return slug.strip("-")


def clean_image_url(url: str | None) -> str:
    """Strip the size/quality transform suffix from an IMDb asset URL."""

    if not url:
        return ""
    return IMAGE_TRANSFORM_RE.sub(".jpg", url)


def extract_imdb_id(href: str | None) -> str:
    """Return the first ``tt`` title identifier found in a link, or ``""``."""

    if not href:
        return ""
    match = IMDB_ID_RE.search(href)
    return match.group(0) if match else ""


def extract_interest_id(href: str | None) -> str:
    """Return the path segment following ``/interest/`` in a link, or ``""``."""

    if not href:
        return ""
    match = INTEREST_ID_RE.search(href)
    return match.group(1) if match else ""


def parse_count(value: str | None) -> int:
    """Parse a chip counter such as ``"1,234"``; anything unparseable is 0."""

    if not value:
        return 0
    match = LEADING_DIGITS_RE.match(value.strip().replace(",", ""))
    if not match:
        return 0
    return int(match.group(0))
