"""Shared schema configuration and validators."""
from __future__ import annotations

import math
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..core.config import get_settings

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Integer columns are 32-bit; OFFSET is a signed 64-bit value.
MAX_DB_INT = 2**31 - 1
MAX_OFFSET = 2**63 - 1


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def normalise_hhmm(value: object) -> object:
    """Accept ``H:MM`` as well as ``HH:MM`` and reject anything else."""

    if isinstance(value, str):
        value = value.strip()
        if len(value) == 4 and value[1] == ":":
            value = f"0{value}"
        if not HHMM_PATTERN.match(value):
            raise ValueError("time must use 24-hour HH:MM format")
    return value


def blank_to_none(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def parse_float(value: object) -> float | None:
    value = blank_to_none(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_int(value: object) -> int | None:
    value = blank_to_none(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value))
    except ValueError:
        return None


def parse_price_bound(value: object) -> float | None:
    """Lenient price bound clamped to what an integer column can compare against."""

    price = parse_float(value)
    if price is None:
        return None
    # Prices are non-negative, so -1 still excludes everything below zero.
    return min(max(price, -1.0), float(MAX_DB_INT))


class PagedFilters(CamelModel):
    """Page and page size shared by lenient list queries.

    A malformed page becomes 1 and a malformed limit the configured default.
    Pages whose offset would not fit a 64-bit integer are pulled back to the
    last representable page, which is empty in practice.
    """

    page: int = 1
    limit: int = Field(default_factory=lambda: get_settings().listings_page_size)

    @field_validator("page", mode="before")
    @classmethod
    def _page(cls, value: object) -> int:
        page = parse_int(value)
        return page if page is not None and page >= 1 else 1

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, value: object) -> int:
        settings = get_settings()
        limit = parse_int(value)
        if limit is None or limit <= 0:
            return settings.listings_page_size
        return min(limit, settings.listings_max_page_size)

    @model_validator(mode="after")
    def _cap_page(self) -> "PagedFilters":
        max_page = MAX_OFFSET // self.limit + 1
        if self.page > max_page:
            self.page = max_page
        return self
