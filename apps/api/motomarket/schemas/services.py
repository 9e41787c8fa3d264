"""Schemas for services and their weekly schedules."""
from __future__ import annotations

import logging
from datetime import datetime

from pydantic import Field, ValidationError, field_validator, model_validator

from ..models.service import ServiceType
from .common import MAX_DB_INT, CamelModel, PagedFilters, blank_to_none, normalise_hhmm, parse_price_bound

logger = logging.getLogger(__name__)

WEEKDAYS: tuple[str, ...] = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

MAX_SLOT_DURATION_MINUTES = 24 * 60


class DaySchedule(CamelModel):
    """Opening hours for a single weekday."""

    available: bool = False
    start_time: str = "09:00"
    end_time: str = "17:00"

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _hhmm(cls, value: object) -> object:
        return normalise_hhmm(value)

    @model_validator(mode="after")
    def _ordered(self) -> "DaySchedule":
        if self.available and self.start_time >= self.end_time:
            raise ValueError("startTime must be earlier than endTime")
        return self


class WeeklySchedule(CamelModel):
    """Per-weekday opening hours keyed by lowercase weekday name."""

    days: dict[str, DaySchedule] = Field(default_factory=dict)

    @field_validator("days", mode="before")
    @classmethod
    def _normalise_keys(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        normalised: dict[str, object] = {}
        for key, entry in value.items():
            day = str(key).strip().lower()
            if day not in WEEKDAYS:
                raise ValueError(f"unknown weekday: {key}")
            normalised[day] = entry
        return normalised

    @classmethod
    def from_storage(cls, raw: object) -> "WeeklySchedule":
        """Parse stored opening hours, treating unreadable days as closed.

        Writes go through the strict validators; rows written by older
        clients may still carry unknown keys or malformed times.
        """

        if not isinstance(raw, dict):
            return cls()
        days: dict[str, DaySchedule] = {}
        for key, entry in raw.items():
            day = str(key).strip().lower()
            if day not in WEEKDAYS:
                logger.warning("Ignoring opening hours for unknown weekday %r", key)
                continue
            try:
                days[day] = DaySchedule.model_validate(entry)
            except ValidationError:
                logger.warning("Ignoring invalid opening hours for %s: %r", day, entry)
        return cls(days=days)

    def for_day(self, weekday: str) -> DaySchedule | None:
        return self.days.get(weekday)

    def to_storage(self) -> dict[str, dict[str, object]]:
        return {day: schedule.model_dump(by_alias=True) for day, schedule in self.days.items()}


class ServiceDetail(CamelModel):
    id: str
    provider_id: str
    title: str
    description: str
    service_type: ServiceType
    price: int
    slot_duration: int
    is_active: bool
    availability: dict[str, DaySchedule] = Field(default_factory=dict)
    created_at: datetime


class ServiceFilters(PagedFilters):
    """Lenient query parameters for the public service directory."""

    search: str | None = None
    service_type: str | None = None
    min_price: float | None = None
    max_price: float | None = None

    @field_validator("search", "service_type", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        value = blank_to_none(value)
        return value if value is None else str(value)

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _price(cls, value: object) -> float | None:
        return parse_price_bound(value)


class ServiceListResponse(CamelModel):
    services: list[ServiceDetail]
    total_count: int
    total_pages: int
    page: int
    limit: int


class ServiceCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=2000)
    service_type: ServiceType = ServiceType.OTHER
    price: int = Field(ge=0, le=MAX_DB_INT)
    slot_duration: int = Field(default=60, gt=0, le=MAX_SLOT_DURATION_MINUTES)
    availability: WeeklySchedule = Field(default_factory=WeeklySchedule)

    @field_validator("availability", mode="before")
    @classmethod
    def _wrap_days(cls, value: object) -> object:
        if isinstance(value, dict) and "days" not in value:
            return {"days": value}
        return value


class ServiceUpdateRequest(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    service_type: ServiceType | None = None
    price: int | None = Field(default=None, ge=0, le=MAX_DB_INT)
    slot_duration: int | None = Field(default=None, gt=0, le=MAX_SLOT_DURATION_MINUTES)
    availability: WeeklySchedule | None = None
    is_active: bool | None = None

    @field_validator("availability", mode="before")
    @classmethod
    def _wrap_days(cls, value: object) -> object:
        if isinstance(value, dict) and "days" not in value:
            return {"days": value}
        return value
