"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- the directory document as fetched (`DirectoryResponse`)
- chapter entities served by the search layer (`Chapter`)

The wire names follow the public GDG directory JSON (`chapter_name`, `cityarea`,
`geo.lng`, `filters_`); Python attribute names are the readable ones.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LatLong(BaseModel):
    """A chapter position in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    long: float = Field(..., validation_alias=AliasChoices("lng", "long", "lon"))


class Chapter(BaseModel):
    """One developer-group chapter. Immutable once fetched."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., validation_alias=AliasChoices("chapter_name", "name"))
    region: str
    geo: LatLong
    city: str | None = Field(default=None, validation_alias=AliasChoices("cityarea", "city"))
    country: str | None = None
    website: str | None = None


class RegionFilter(BaseModel):
    """Region list published alongside the chapters."""

    regions: list[str] = Field(default_factory=list)


class DirectoryResponse(BaseModel):
    """The full directory document returned by one fetch."""

    model_config = ConfigDict(extra="ignore")

    filters: RegionFilter = Field(
        default_factory=RegionFilter, validation_alias=AliasChoices("filters_", "filters")
    )
    chapters: list[Chapter] = Field(default_factory=list, validation_alias=AliasChoices("data", "chapters"))
