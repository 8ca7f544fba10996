"""Pydantic models describing scraped IMDb records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScrapedRecord(BaseModel):
    """Base for immutable records serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class CategoryItem(ScrapedRecord):
    """A single interest card on the category listing page."""

    title: str
    slug: str
    id: str
    image: str


CategoryListing = dict[str, tuple[CategoryItem, ...]]


class TitleRef(ScrapedRecord):
    """A title card found on a genre page."""

    imdb_id: str
    title: str = ""
    rating: str = ""
    image: str


class RankedTitleRef(TitleRef):
    """A title from a chart, ranked among the entries that were kept."""

    rank: int = Field(ge=1)
    year: str = ""


class ContentCounts(ScrapedRecord):
    """Number of titles an interest page advertises."""

    all: int = Field(default=0, ge=0)
    movies: int = Field(default=0, ge=0)
    tv_shows: int = Field(default=0, ge=0)


class GenreDetail(ScrapedRecord):
    """Header metadata and ranked sub-lists for a single interest page."""

    genre_title: str = ""
    cover_image: str = ""
    description: str = ""
    type: str = ""
    content_counts: ContentCounts = Field(default_factory=ContentCounts)
    popular_movies: tuple[TitleRef, ...] = ()
    top_rated_movies: tuple[TitleRef, ...] = ()
    popular_tv_shows: tuple[TitleRef, ...] = ()
    top_rated_tv_shows: tuple[TitleRef, ...] = ()
