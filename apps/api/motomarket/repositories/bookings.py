"""Booking persistence helpers."""
from __future__ import annotations

from datetime import date
from uuid import uuid4

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.booking import SLOT_HOLDING_STATUSES, Booking, BookingStatus


async def list_booked_times(
    session: AsyncSession,
    *,
    service_id: str,
    day: date,
) -> list[str]:
    """Return ``HH:MM`` start times held by pending or confirmed bookings on ``day``."""

    stmt: Select[tuple[str]] = (
        select(Booking.scheduled_time)
        .where(
            Booking.service_id == service_id,
            Booking.scheduled_date == day,
            Booking.status.in_(SLOT_HOLDING_STATUSES),
        )
        .order_by(Booking.scheduled_time.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_booking(
    session: AsyncSession,
    *,
    service_id: str,
    user_id: str,
    provider_id: str,
    scheduled_date: date,
    scheduled_time: str,
    price: int,
    notes: str | None = None,
) -> Booking:
    """Insert a pending booking.

    The flush raises ``IntegrityError`` when another pending or confirmed
    booking already holds the same service, date and time.
    """

    booking = Booking(
        id=str(uuid4()),
        service_id=service_id,
        user_id=user_id,
        provider_id=provider_id,
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
        price=price,
        notes=notes,
        status=BookingStatus.PENDING,
    )
    session.add(booking)
    await session.flush()
    return booking


async def get_by_id(session: AsyncSession, booking_id: str) -> Booking | None:
    """Return a booking by identifier."""

    return await session.get(Booking, booking_id)


async def list_for_user(session: AsyncSession, user_id: str) -> list[Booking]:
    stmt = select(Booking).where(Booking.user_id == user_id).order_by(Booking.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_for_provider(session: AsyncSession, provider_id: str) -> list[Booking]:
    stmt = select(Booking).where(Booking.provider_id == provider_id).order_by(Booking.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_by_status(session: AsyncSession, provider_id: str) -> dict[BookingStatus, int]:
    """Return booking counts grouped by status for a provider."""

    stmt = (
        select(Booking.status, func.count(Booking.id))
        .where(Booking.provider_id == provider_id)
        .group_by(Booking.status)
    )
    result = await session.execute(stmt)
    return {status: int(count) for status, count in result.all()}
