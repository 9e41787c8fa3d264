"""Schemas for listing search and detail views."""
from __future__ import annotations

import enum
from datetime import date, datetime

from pydantic import Field, field_validator

from ..models.listing import MIN_YEAR, Category, Condition, FuelType, ListingStatus
from .common import MAX_DB_INT, CamelModel, PagedFilters, blank_to_none, parse_int, parse_price_bound

MIN_FILTER_YEAR = 0
MAX_FILTER_YEAR = 9999


class ListingSort(str, enum.Enum):
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    YEAR_NEW = "year-new"
    YEAR_OLD = "year-old"


class ListingFilters(PagedFilters):
    """Optional search parameters for the listing catalogue.

    Every field is lenient: blank or malformed values are treated as absent
    rather than rejected, so a stale query string never breaks the page.
    """

    search: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    min_year: int | None = None
    max_year: int | None = None
    brand: str | None = None
    category: str | None = None
    condition: str | None = None
    fuel_type: str | None = None
    location: str | None = None
    sort_by: ListingSort | None = None

    @field_validator("search", "brand", "category", "condition", "fuel_type", "location", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        value = blank_to_none(value)
        return value if value is None else str(value)

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _price(cls, value: object) -> float | None:
        return parse_price_bound(value)

    @field_validator("min_year", "max_year", mode="before")
    @classmethod
    def _year(cls, value: object) -> int | None:
        year = parse_int(value)
        if year is None or not MIN_FILTER_YEAR <= year <= MAX_FILTER_YEAR:
            return None
        return year

    @field_validator("sort_by", mode="before")
    @classmethod
    def _sort(cls, value: object) -> ListingSort | None:
        value = blank_to_none(value)
        if value is None:
            return None
        try:
            return ListingSort(value)
        except ValueError:
            return None


class ListingCard(CamelModel):
    id: str
    title: str
    brand: str
    model: str
    year: int
    price: int
    mileage: int
    engine_capacity: int
    condition: Condition
    fuel_type: FuelType
    category: Category
    location: str
    images: list[str] = Field(default_factory=list)
    is_featured: bool = False
    seller_id: str
    created_at: datetime


class ListingDetail(ListingCard):
    description: str
    status: ListingStatus
    views: int
    similar: list[ListingCard] = Field(default_factory=list)


class ListingFacets(CamelModel):
    brands: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    fuel_types: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)


class ListingStats(CamelModel):
    min_price: float
    max_price: float
    min_year: int
    max_year: int


class ListingSearchResponse(CamelModel):
    listings: list[ListingCard]
    total_count: int
    total_pages: int
    page: int
    limit: int
    facets: ListingFacets
    stats: ListingStats


class FeaturedListingsResponse(CamelModel):
    listings: list[ListingCard]


def _latest_model_year() -> int:
    return date.today().year + 1


class ListingCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=5000)
    brand: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    year: int = Field(ge=MIN_YEAR)
    price: int = Field(ge=0, le=MAX_DB_INT)
    mileage: int = Field(default=0, ge=0, le=MAX_DB_INT)
    engine_capacity: int = Field(default=0, ge=0, le=MAX_DB_INT)
    condition: Condition
    fuel_type: FuelType = FuelType.PETROL
    category: Category
    location: str = Field(min_length=1, max_length=200)
    images: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("year")
    @classmethod
    def _not_future(cls, value: int) -> int:
        if value > _latest_model_year():
            raise ValueError("year cannot be later than next year")
        return value


class ListingUpdateRequest(CamelModel):
    """Partial update; ``sold`` is reached through the mark-sold endpoint only."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    brand: str | None = Field(default=None, min_length=1, max_length=100)
    model: str | None = Field(default=None, min_length=1, max_length=100)
    year: int | None = Field(default=None, ge=MIN_YEAR)
    price: int | None = Field(default=None, ge=0, le=MAX_DB_INT)
    mileage: int | None = Field(default=None, ge=0, le=MAX_DB_INT)
    engine_capacity: int | None = Field(default=None, ge=0, le=MAX_DB_INT)
    condition: Condition | None = None
    fuel_type: FuelType | None = None
    category: Category | None = None
    location: str | None = Field(default=None, min_length=1, max_length=200)
    images: list[str] | None = Field(default=None, max_length=20)
    status: ListingStatus | None = None

    @field_validator("year")
    @classmethod
    def _not_future(cls, value: int | None) -> int | None:
        if value is not None and value > _latest_model_year():
            raise ValueError("year cannot be later than next year")
        return value

    @field_validator("status")
    @classmethod
    def _not_sold(cls, value: ListingStatus | None) -> ListingStatus | None:
        if value is ListingStatus.SOLD:
            raise ValueError("use the mark-sold endpoint to sell a listing")
        return value
