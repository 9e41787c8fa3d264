"""Bookable time slot calculation for services.

A service publishes opening hours per weekday. For a target date the engine
walks from opening time in ``slot_duration`` steps while the start is still
before closing time, then drops every start already held by a pending or
confirmed booking. The result is advisory; the booking insert is what
guarantees a slot is not taken twice.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..repositories import bookings as bookings_repo
from ..repositories import services as services_repo
from ..schemas.services import WEEKDAYS, DaySchedule, WeeklySchedule

MINUTES_PER_DAY = 24 * 60


def weekday_name(day: date) -> str:
    """Lowercase English weekday name for ``day``."""

    return WEEKDAYS[day.weekday()]


def parse_hhmm(value: str) -> int:
    """Convert ``"HH:MM"`` to minutes after midnight."""

    hours_str, sep, minutes_str = value.strip().partition(":")
    if not sep or not hours_str.isdigit() or not minutes_str.isdigit() or len(minutes_str) != 2:
        raise ValueError(f"invalid time: {value!r}")
    hours, minutes = int(hours_str), int(minutes_str)
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid time: {value!r}")
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """Convert minutes after midnight to ``"HH:MM"``."""

    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def effective_slot_duration(slot_duration: int | None) -> int:
    """Stored duration, or the configured default when unset or not positive."""

    if slot_duration is None or slot_duration <= 0:
        return settings.default_slot_duration_minutes
    return slot_duration


def generate_day_slots(day_schedule: DaySchedule | None, slot_duration: int) -> list[str]:
    """All slot starts for one day, ascending. Empty when the day is closed."""

    if slot_duration <= 0:
        raise ValueError(f"slot_duration must be positive, got {slot_duration}")
    if day_schedule is None or not day_schedule.available:
        return []

    start = parse_hhmm(day_schedule.start_time)
    end = parse_hhmm(day_schedule.end_time)

    slots: list[str] = []
    current = start
    while current < end:
        slots.append(format_hhmm(current))
        current += slot_duration
    return slots


def compute_available_slots(
    schedule: WeeklySchedule,
    slot_duration: int,
    day: date,
    booked_times: Iterable[str],
    *,
    not_before: int | None = None,
) -> list[str]:
    """Slots for ``day`` that are not booked.

    ``not_before`` (minutes after midnight) hides starts that have already
    passed when ``day`` is today.
    """

    taken: set[str] = set()
    for value in booked_times:
        try:
            taken.add(format_hhmm(parse_hhmm(value)))
        except ValueError:
            continue

    slots = generate_day_slots(schedule.for_day(weekday_name(day)), slot_duration)
    return [
        slot
        for slot in slots
        if slot not in taken and (not_before is None or parse_hhmm(slot) >= not_before)
    ]


def business_now(now: datetime | None = None) -> datetime:
    """Current time in the marketplace's business timezone."""

    tz = ZoneInfo(settings.business_timezone)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


async def list_available_slots(
    service_id: str,
    day: date,
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> list[str]:
    """Return the bookable ``HH:MM`` slots of a service on ``day``."""

    service = await services_repo.get_by_id(session, service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")

    local_now = business_now(now)
    today = local_now.date()
    if day < today:
        return []

    booked = await bookings_repo.list_booked_times(session, service_id=service_id, day=day)
    not_before = local_now.hour * 60 + local_now.minute + 1 if day == today else None

    return compute_available_slots(
        WeeklySchedule.from_storage(service.availability),
        effective_slot_duration(service.slot_duration),
        day,
        booked,
        not_before=not_before,
    )
