"""Selector-based extraction of IMDb pages into typed records.

Partial cards are dropped silently from the returned records; the number of
dropped cards is only reported through debug logging.
"""

from __future__ import annotations

import logging
from typing import Any

from ..catalog_ids import ALLOWED_CATEGORY_SLUGS, GENRE_SECTION_FIELDS
from ..models import (
    CategoryItem,
    CategoryListing,
    ContentCounts,
    GenreDetail,
    RankedTitleRef,
    TitleRef,
)
from ..utils import (
    clean_image_url,
    extract_imdb_id,
    extract_interest_id,
    parse_count,
    slugify,
)
from .dom import DocumentQuery, SoupQuery

logger = logging.getLogger(__name__)

SECTION_SELECTOR = "section.ipc-page-section"
SECTION_TITLE_SELECTOR = "h3.ipc-title__text"

# Category listing (/interest/all/)
CATEGORY_CARD_SELECTOR = "div.ipc-sub-grid-item"
CATEGORY_TITLE_SELECTOR = ".ipc-slate-card__title-text"
CATEGORY_LINK_SELECTOR = "a.ipc-lockup-overlay"
CATEGORY_IMAGE_SELECTOR = "img.ipc-image"

# Genre detail (/interest/<id>/)
GENRE_TITLE_SELECTOR = "div.ipc-title--category-title h3.ipc-title__text"
GENRE_TYPE_SELECTOR = "div.ipc-title--category-title div.ipc-title__description"
GENRE_COVER_SELECTOR = "div.ipc-media--dynamic img.ipc-image"
GENRE_DESCRIPTION_SELECTOR = (
    "div.ipc-overflowText--pageSection div.ipc-html-content-inner-div"
)
GENRE_COUNT_SELECTORS = {
    "all": 'a[data-testid="chip-see-all-titles"] span.ipc-chip__count',
    "movies": 'a[data-testid="chip-see-all-movies"] span.ipc-chip__count',
    "tv_shows": 'a[data-testid="chip-see-all-tv-series"] span.ipc-chip__count',
}
POSTER_CARD_SELECTOR = "div.ipc-poster-card"
POSTER_LINK_SELECTOR = "a.ipc-poster-card__title"
POSTER_TITLE_SELECTOR = 'span[data-testid="title"]'
POSTER_IMAGE_SELECTOR = ".ipc-poster__poster-image img"

# Charts (/chart/...)
CHART_ITEM_SELECTOR = "ul.ipc-metadata-list > li"
CHART_TITLE_SELECTOR = ".ipc-title__text"
CHART_LINK_SELECTOR = ".ipc-title-link-wrapper"
CHART_YEAR_SELECTOR = ".cli-title-metadata-item"
CHART_IMAGE_SELECTOR = ".ipc-image"

RATING_SELECTOR = ".ipc-rating-star--rating"

_default_query = SoupQuery()


def extract_categories(
    markup: str, query: DocumentQuery | None = None
) -> CategoryListing:
    """Return allow-listed categories keyed by slug.

    A repeated heading replaces the items collected for the earlier section;
    sections without a single complete card are left out.
    """

    q = query or _default_query
    root = q.parse(markup)
    result: CategoryListing = {}

    for section in q.find_all(root, SECTION_SELECTOR):
        category_slug = slugify(q.text(q.find_one(section, SECTION_TITLE_SELECTOR)))
        if category_slug not in ALLOWED_CATEGORY_SLUGS:
            continue

        items: list[CategoryItem] = []
        cards = q.find_all(section, CATEGORY_CARD_SELECTOR)
        for card in cards:
            item = _category_item(q, card)
            if item is not None:
                items.append(item)

        _log_dropped(category_slug, len(cards), len(items))
        if items:
            result[category_slug] = tuple(items)

    return result


def extract_genre_detail(
    markup: str, query: DocumentQuery | None = None
) -> GenreDetail:
    """Return header metadata and the four title sub-lists of a genre page."""

    q = query or _default_query
    root = q.parse(markup)

    counts = {
        field: parse_count(q.text(q.find_one(root, selector)))
        for field, selector in GENRE_COUNT_SELECTORS.items()
    }
    sections: dict[str, list[TitleRef]] = {
        field: [] for field in GENRE_SECTION_FIELDS.values()
    }

    for section in q.find_all(root, SECTION_SELECTOR):
        heading = q.text(q.find_one(section, SECTION_TITLE_SELECTOR))
        field = GENRE_SECTION_FIELDS.get(heading)
        if field is None:
            continue

        cards = q.find_all(section, POSTER_CARD_SELECTOR)
        refs = [
            ref for ref in (_poster_title(q, card) for card in cards) if ref is not None
        ]
        _log_dropped(heading, len(cards), len(refs))
        sections[field].extend(refs)

    return GenreDetail(
        genre_title=q.text(q.find_one(root, GENRE_TITLE_SELECTOR)),
        cover_image=clean_image_url(
            q.attr(q.find_one(root, GENRE_COVER_SELECTOR), "src")
        ),
        description=q.text(q.find_one(root, GENRE_DESCRIPTION_SELECTOR)),
        type=q.text(q.find_one(root, GENRE_TYPE_SELECTOR)),
        content_counts=ContentCounts(**counts),
        **{field: tuple(refs) for field, refs in sections.items()},
    )


def extract_ranked_list(
    markup: str, query: DocumentQuery | None = None
) -> tuple[RankedTitleRef, ...]:
    """Return chart entries ranked 1..N over the entries that were kept."""

    q = query or _default_query
    root = q.parse(markup)
    ranked: list[RankedTitleRef] = []

    items = q.find_all(root, CHART_ITEM_SELECTOR)
    for item in items:
        imdb_id = extract_imdb_id(q.attr(q.find_one(item, CHART_LINK_SELECTOR), "href"))
        image = clean_image_url(q.attr(q.find_one(item, CHART_IMAGE_SELECTOR), "src"))
        if not (imdb_id and image):
            continue
        ranked.append(
            RankedTitleRef(
                rank=len(ranked) + 1,
                imdb_id=imdb_id,
                title=q.text(q.find_one(item, CHART_TITLE_SELECTOR)),
                year=q.text(q.find_one(item, CHART_YEAR_SELECTOR)),
                rating=q.text(q.find_one(item, RATING_SELECTOR)),
                image=image,
            )
        )

    _log_dropped("chart", len(items), len(ranked))
    return tuple(ranked)


def _category_item(q: DocumentQuery, card: Any) -> CategoryItem | None:
    title = q.text(q.find_one(card, CATEGORY_TITLE_SELECTOR))
    interest_id = extract_interest_id(
        q.attr(q.find_one(card, CATEGORY_LINK_SELECTOR), "href")
    )
    image = clean_image_url(q.attr(q.find_one(card, CATEGORY_IMAGE_SELECTOR), "src"))
    if not (title and interest_id and image):
        return None
    return CategoryItem(title=title, slug=slugify(title), id=interest_id, image=image)


def _poster_title(q: DocumentQuery, card: Any) -> TitleRef | None:
    imdb_id = extract_imdb_id(q.attr(q.find_one(card, POSTER_LINK_SELECTOR), "href"))
    image = clean_image_url(q.attr(q.find_one(card, POSTER_IMAGE_SELECTOR), "src"))
    if not (imdb_id and image):
        return None
    return TitleRef(
        imdb_id=imdb_id,
        title=q.text(q.find_one(card, POSTER_TITLE_SELECTOR)),
        rating=q.text(q.find_one(card, RATING_SELECTOR)),
        image=image,
    )


def _log_dropped(label: str, seen: int, kept: int) -> None:
    if seen > kept:
        logger.debug("Dropped %s of %s incomplete cards in %s", seen - kept, seen, label)
