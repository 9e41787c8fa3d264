"""Tests for the 24 hour cancellation and reschedule window."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from motomarket.core.config import settings
from motomarket.models.booking import BookingStatus
from motomarket.services import bookings as bookings_service

NOW = datetime(2030, 3, 4, 10, 0, tzinfo=timezone.utc)


def booking_at(moment: datetime, status: BookingStatus = BookingStatus.CONFIRMED) -> SimpleNamespace:
    return SimpleNamespace(
        scheduled_date=moment.date(),
        scheduled_time=moment.strftime("%H:%M"),
        status=status,
    )


def test_cancellable_just_outside_window() -> None:
    booking = booking_at(NOW + timedelta(hours=24, minutes=1))

    assert bookings_service.can_be_cancelled(booking, NOW) is True


def test_not_cancellable_just_inside_window() -> None:
    booking = booking_at(NOW + timedelta(hours=23, minutes=59))

    assert bookings_service.can_be_cancelled(booking, NOW) is False


def test_not_cancellable_exactly_at_window() -> None:
    booking = booking_at(NOW + timedelta(hours=24))

    assert bookings_service.can_be_cancelled(booking, NOW) is False


@pytest.mark.parametrize(
    "status",
    [BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.DECLINED],
)
def test_closed_statuses_cannot_be_cancelled(status: BookingStatus) -> None:
    booking = booking_at(NOW + timedelta(days=5), status=status)

    assert bookings_service.can_be_cancelled(booking, NOW) is False


def test_pending_booking_can_be_rescheduled() -> None:
    booking = booking_at(NOW + timedelta(days=2), status=BookingStatus.PENDING)

    assert bookings_service.can_be_rescheduled(booking, NOW) is True
    assert bookings_service.can_be_rescheduled(booking_at(NOW + timedelta(hours=2)), NOW) is False


def test_completed_booking_cannot_be_rescheduled() -> None:
    booking = booking_at(NOW + timedelta(days=2), status=BookingStatus.COMPLETED)

    assert bookings_service.can_be_rescheduled(booking, NOW) is False


def test_unparsable_schedule_fails_closed() -> None:
    booking = SimpleNamespace(scheduled_date=date(2031, 1, 1), scheduled_time="noon", status=BookingStatus.PENDING)

    assert bookings_service.can_be_cancelled(booking, NOW) is False
    assert bookings_service.can_be_rescheduled(booking, NOW) is False


def test_naive_now_is_read_in_business_timezone() -> None:
    booking = booking_at(NOW + timedelta(days=3))

    assert bookings_service.can_be_cancelled(booking, NOW.replace(tzinfo=None)) is True


@pytest.fixture
def berlin(monkeypatch):
    monkeypatch.setattr(settings, "business_timezone", "Europe/Berlin")


def test_window_counts_real_hours_across_spring_forward(berlin) -> None:
    # Clocks go forward on 2030-03-31, so 24.5 wall-clock hours are 23.5 real ones.
    now = datetime(2030, 3, 30, 10, 0)
    booking = SimpleNamespace(
        scheduled_date=date(2030, 3, 31), scheduled_time="10:30", status=BookingStatus.CONFIRMED
    )

    assert bookings_service.can_be_cancelled(booking, now) is False
    assert bookings_service.can_be_rescheduled(booking, now) is False


def test_window_counts_real_hours_across_fall_back(berlin) -> None:
    # Clocks go back on 2030-10-27, so 23.5 wall-clock hours are 24.5 real ones.
    now = datetime(2030, 10, 26, 10, 0)
    booking = SimpleNamespace(
        scheduled_date=date(2030, 10, 27), scheduled_time="09:30", status=BookingStatus.CONFIRMED
    )

    assert bookings_service.can_be_cancelled(booking, now) is True
