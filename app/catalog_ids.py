"""Static IMDb identifier tables used by the request layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


GENRE_IDS: Mapping[str, str] = MappingProxyType(
    {
        "action": "in0000001",
        "adventure": "in0000012",
        "animation": "in0000026",
        "anime": "in0000027",
        "comedy": "in0000034",
        "crime": "in0000052",
        "documentary": "in0000060",
        "drama": "in0000076",
        "family": "in0000093",
        "fantasy": "in0000098",
        "horror": "in0000112",
        "music": "in0000130",
        "musical": "in0000133",
        "mystery": "in0000139",
        "romance": "in0000152",
        "sci-fi": "in0000162",
        "sport": "in0000174",
        "thriller": "in0000186",
        "western": "in0000191",
    }
)

TOP_LIST_URLS: Mapping[str, str] = MappingProxyType(
    {
        "top-popular-movies": "https://www.imdb.com/chart/moviemeter/?ref_=nv_mv_mpm&sort=rank%2Casc",
        "top-rated-movies": "https://www.imdb.com/chart/top/?ref_=nv_mv_250&sort=user_rating%2Cdesc",
        "top-rated-tv-shows": "https://www.imdb.com/chart/toptv/?ref_=nv_tvv_250&sort=user_rating%2Cdesc",
        "top-popular-tv-shows": "https://www.imdb.com/chart/tvmeter/?ref_=nv_tvv_mptv",
    }
)

# Section headings on /interest/all/ that are kept, after slugify().
ALLOWED_CATEGORY_SLUGS: frozenset[str] = frozenset(
    {"popular-interests", *GENRE_IDS}
)

# Exact, case-sensitive headings on an interest page mapped to GenreDetail fields.
GENRE_SECTION_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "Popular movies": "popular_movies",
        "Top rated movies": "top_rated_movies",
        "Popular TV shows": "popular_tv_shows",
        "Top rated TV shows": "top_rated_tv_shows",
    }
)


@dataclass(frozen=True)
class CatalogConfig:
    """Name to identifier tables handed to the request layer at startup."""

    genres: Mapping[str, str] = field(default_factory=lambda: GENRE_IDS)
    top_lists: Mapping[str, str] = field(default_factory=lambda: TOP_LIST_URLS)

    def genre_id(self, name: str) -> str | None:
        return self.genres.get(name)

    def top_list_url(self, name: str) -> str | None:
        return self.top_lists.get(name)
