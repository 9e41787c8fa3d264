"""Schemas for service bookings."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import Field, field_validator

from ..models.booking import BookingStatus
from .common import CamelModel, normalise_hhmm


class CreateBookingRequest(CamelModel):
    service_id: str = Field(min_length=1)
    booking_date: date = Field(alias="date")
    booking_time: str = Field(alias="time")
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("booking_time", mode="before")
    @classmethod
    def _time(cls, value: object) -> object:
        return normalise_hhmm(value)


class RescheduleBookingRequest(CamelModel):
    booking_date: date = Field(alias="date")
    booking_time: str = Field(alias="time")

    @field_validator("booking_time", mode="before")
    @classmethod
    def _time(cls, value: object) -> object:
        return normalise_hhmm(value)


class UpdateBookingStatusRequest(CamelModel):
    status: BookingStatus
    provider_notes: str | None = Field(default=None, max_length=500)


class BookingOut(CamelModel):
    id: str
    service_id: str
    user_id: str
    provider_id: str
    scheduled_date: date
    scheduled_time: str
    status: BookingStatus
    price: int
    notes: str | None = None
    provider_notes: str | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    created_at: datetime


class BookingListResponse(CamelModel):
    bookings: list[BookingOut]


class BookingStatsResponse(CamelModel):
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0
    declined: int = 0
    total: int = 0
