"""Game catalog models for gameScout.

Typed views of the RAWG catalog API responses.  The upstream payloads are
large and loosely specified, so every model ignores unknown keys and makes
most fields optional - we only model what the service actually uses.

Query/page models (``CatalogSearchQuery``, ``CatalogPage``) are the
gateway's own request/response shapes and do not mirror RAWG's wire format;
the provider translates between them.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Small nested records
# ---------------------------------------------------------------------------
class Genre(BaseModel):
    """A catalog genre (e.g. Action, id 4)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    slug: str = ""
    games_count: int | None = None
    image_background: str | None = None


class NamedRef(BaseModel):
    """Generic ``{id, name, slug}`` reference (developers, publishers, tags)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    slug: str = ""


class Screenshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    image: str


class Trailer(BaseModel):
    """A game trailer; ``data`` maps resolution keys ("480", "max") to URLs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str = ""
    preview: str | None = None
    data: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# CatalogGame - one search result
# ---------------------------------------------------------------------------
class CatalogGame(BaseModel):
    """A game as returned by catalog search.

    ``background_image`` is the URL the recommendation enricher attaches to
    each suggestion; ``id`` is the canonical catalog identifier.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    slug: str = ""
    background_image: str | None = None
    rating: float | None = None
    rating_top: int | None = None
    ratings_count: int | None = None
    released: str | None = None
    metacritic: int | None = None
    playtime: int | None = None
    genres: list[Genre] = Field(default_factory=list)
    tags: list[NamedRef] = Field(default_factory=list)
    short_screenshots: list[Screenshot] = Field(default_factory=list)

    @property
    def genre_names(self) -> list[str]:
        return [g.name for g in self.genres]


class GameDetails(CatalogGame):
    """Full detail record for a single game."""

    description: str | None = None
    description_raw: str | None = None
    website: str | None = None
    reddit_url: str | None = None
    developers: list[NamedRef] = Field(default_factory=list)
    publishers: list[NamedRef] = Field(default_factory=list)
    esrb_rating: NamedRef | None = None


# ---------------------------------------------------------------------------
# Gateway request / response shapes
# ---------------------------------------------------------------------------
class CatalogSearchQuery(BaseModel):
    """Parameters for a catalog search.

    Every field is optional; an empty query lists the catalog in the
    upstream's default order.
    """

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    genre_ids: list[int] = Field(default_factory=list)
    platform_ids: list[int] = Field(default_factory=list)
    page: int | None = Field(default=None, ge=1)
    page_size: int | None = Field(default=None, ge=1)
    ordering: str | None = None
    date_range: tuple[date, date] | None = None
    # RAWG's search_precise / search_exact switches.
    precise: bool = False
    exact: bool = False

    @model_validator(mode="after")
    def _check_date_range(self) -> CatalogSearchQuery:
        if self.date_range is not None and self.date_range[0] > self.date_range[1]:
            raise ValueError("date_range start must not be after its end")
        return self


class CatalogPage(BaseModel):
    """One page of search results."""

    model_config = ConfigDict(frozen=True)

    items: list[CatalogGame] = Field(default_factory=list)
    total_count: int = 0
    has_more: bool = False
