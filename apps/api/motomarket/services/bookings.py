"""Business logic for service bookings."""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import CurrentUser
from ..core.config import settings
from ..models.booking import Booking, BookingStatus
from ..models.service import Service
from ..models.user import UserRole
from ..repositories import bookings as bookings_repo
from ..repositories import services as services_repo
from ..schemas import bookings as schemas
from ..schemas.services import WeeklySchedule
from .slots import business_now, effective_slot_duration, generate_day_slots, parse_hhmm, weekday_name

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is no longer available. Please choose another time."

_NOT_CANCELLABLE = {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.DECLINED}
_RESCHEDULABLE = {BookingStatus.PENDING, BookingStatus.CONFIRMED}

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.DECLINED, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
}


def scheduled_datetime(scheduled_date: date | None, scheduled_time: str | None) -> datetime | None:
    """Combine a booking's date and ``HH:MM`` time in the business timezone.

    Returns None when either part is missing or malformed.
    """

    if scheduled_date is None or not scheduled_time:
        return None
    try:
        minutes = parse_hhmm(scheduled_time)
    except ValueError:
        return None
    local = datetime.combine(scheduled_date, time(hour=minutes // 60, minute=minutes % 60))
    return business_now(local)


def _hours_ahead(booking: Booking, now: datetime | None) -> float | None:
    scheduled = scheduled_datetime(booking.scheduled_date, booking.scheduled_time)
    if scheduled is None:
        return None
    # Same-zone subtraction is wall-clock time; convert so DST shifts count.
    elapsed = scheduled.astimezone(timezone.utc) - business_now(now).astimezone(timezone.utc)
    return elapsed.total_seconds() / 3600


def can_be_cancelled(booking: Booking, now: datetime | None = None) -> bool:
    """True when the booking is still open and more than the change window away."""

    if booking.status in _NOT_CANCELLABLE:
        return False
    hours = _hours_ahead(booking, now)
    return hours is not None and hours > settings.booking_change_window_hours


def can_be_rescheduled(booking: Booking, now: datetime | None = None) -> bool:
    """True for pending/confirmed bookings more than the change window away."""

    if booking.status not in _RESCHEDULABLE:
        return False
    hours = _hours_ahead(booking, now)
    return hours is not None and hours > settings.booking_change_window_hours


def _ensure_bookable(service: Service, day: date, slot_time: str, now: datetime | None) -> None:
    """Reject past times and times that are not a generated slot of that day."""

    starts_at = scheduled_datetime(day, slot_time)
    if starts_at is None or starts_at.astimezone(timezone.utc) <= business_now(now).astimezone(timezone.utc):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Selected time is in the past")

    schedule = WeeklySchedule.from_storage(service.availability)
    slots = generate_day_slots(
        schedule.for_day(weekday_name(day)),
        effective_slot_duration(service.slot_duration),
    )
    if slot_time not in slots:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Selected time is outside the service's opening hours",
        )


async def _load_active_service(session: AsyncSession, service_id: str) -> Service:
    service = await services_repo.get_by_id(session, service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service


async def _load_booking(session: AsyncSession, booking_id: str) -> Booking:
    booking = await bookings_repo.get_by_id(session, booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


async def create_booking(
    payload: schemas.CreateBookingRequest,
    user: CurrentUser,
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> schemas.BookingOut:
    """Book a slot for the current user.

    Contention is settled by the partial unique index on active bookings, so
    two concurrent requests for the same slot cannot both succeed.
    """

    try:
        async with session.begin():
            service = await _load_active_service(session, payload.service_id)
            _ensure_bookable(service, payload.booking_date, payload.booking_time, now)

            booking = await bookings_repo.create_booking(
                session,
                service_id=service.id,
                user_id=user.id,
                provider_id=service.provider_id,
                scheduled_date=payload.booking_date,
                scheduled_time=payload.booking_time,
                price=service.price,
                notes=payload.notes,
            )
    except IntegrityError as exc:
        logger.warning(
            "Slot contention for service %s on %s at %s",
            payload.service_id,
            payload.booking_date,
            payload.booking_time,
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SLOT_TAKEN_MESSAGE) from exc

    logger.info("Booking %s created for service %s by user %s", booking.id, service.id, user.id)
    return schemas.BookingOut.model_validate(booking)


async def cancel_booking(
    booking_id: str,
    user: CurrentUser,
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> schemas.BookingOut:
    """Cancel a booking on behalf of its customer or provider."""

    async with session.begin():
        booking = await _load_booking(session, booking_id)
        if user.id not in (booking.user_id, booking.provider_id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to cancel this booking")

        if not can_be_cancelled(booking, now):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    "Booking can no longer be cancelled. Cancellations must be made more than "
                    f"{settings.booking_change_window_hours} hours in advance."
                ),
            )

        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = datetime.now(timezone.utc)
        booking.cancelled_by = user.id
        session.add(booking)

    logger.info("Booking %s cancelled by user %s", booking.id, user.id)
    return schemas.BookingOut.model_validate(booking)


async def reschedule_booking(
    booking_id: str,
    payload: schemas.RescheduleBookingRequest,
    user: CurrentUser,
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> schemas.BookingOut:
    """Move a booking to another free slot of the same service."""

    try:
        async with session.begin():
            booking = await _load_booking(session, booking_id)
            if booking.user_id != user.id:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to reschedule this booking"
                )
            if not can_be_rescheduled(booking, now):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=(
                        "Booking can no longer be rescheduled. Changes must be made more than "
                        f"{settings.booking_change_window_hours} hours in advance."
                    ),
                )

            service = await _load_active_service(session, booking.service_id)
            _ensure_bookable(service, payload.booking_date, payload.booking_time, now)

            booking.scheduled_date = payload.booking_date
            booking.scheduled_time = payload.booking_time
            booking.status = BookingStatus.PENDING
            booking.confirmed_at = None
            session.add(booking)
            await session.flush()
    except IntegrityError as exc:
        logger.warning("Slot contention while rescheduling booking %s", booking_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SLOT_TAKEN_MESSAGE) from exc

    logger.info(
        "Booking %s rescheduled to %s %s", booking.id, booking.scheduled_date, booking.scheduled_time
    )
    return schemas.BookingOut.model_validate(booking)


async def update_booking_status(
    booking_id: str,
    payload: schemas.UpdateBookingStatusRequest,
    user: CurrentUser,
    session: AsyncSession,
) -> schemas.BookingOut:
    """Apply a provider decision (confirm, decline, complete, cancel)."""

    async with session.begin():
        booking = await _load_booking(session, booking_id)
        if booking.provider_id != user.id and user.role != UserRole.ADMIN:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to update this booking")

        target = payload.status
        if target not in ALLOWED_TRANSITIONS.get(booking.status, frozenset()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot change booking status from {booking.status.value} to {target.value}",
            )

        stamp = datetime.now(timezone.utc)
        booking.status = target
        if payload.provider_notes is not None:
            booking.provider_notes = payload.provider_notes
        if target is BookingStatus.CONFIRMED:
            booking.confirmed_at = stamp
        elif target is BookingStatus.COMPLETED:
            booking.completed_at = stamp
        elif target is BookingStatus.CANCELLED:
            booking.cancelled_at = stamp
            booking.cancelled_by = user.id
        session.add(booking)

    logger.info("Booking %s moved to %s by provider %s", booking.id, target.value, user.id)
    return schemas.BookingOut.model_validate(booking)


async def get_booking(booking_id: str, user: CurrentUser, session: AsyncSession) -> schemas.BookingOut:
    """Return a booking visible to its customer, its provider or an admin."""

    booking = await _load_booking(session, booking_id)
    if user.id not in (booking.user_id, booking.provider_id) and user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this booking")
    return schemas.BookingOut.model_validate(booking)


async def list_user_bookings(user: CurrentUser, session: AsyncSession) -> schemas.BookingListResponse:
    bookings = await bookings_repo.list_for_user(session, user.id)
    return schemas.BookingListResponse(bookings=[schemas.BookingOut.model_validate(b) for b in bookings])


async def list_provider_bookings(user: CurrentUser, session: AsyncSession) -> schemas.BookingListResponse:
    bookings = await bookings_repo.list_for_provider(session, user.id)
    return schemas.BookingListResponse(bookings=[schemas.BookingOut.model_validate(b) for b in bookings])


async def provider_booking_stats(user: CurrentUser, session: AsyncSession) -> schemas.BookingStatsResponse:
    """Booking counts per status for the current provider."""

    counts = await bookings_repo.count_by_status(session, user.id)
    stats = {booking_status.value: counts.get(booking_status, 0) for booking_status in BookingStatus}
    return schemas.BookingStatsResponse(**stats, total=sum(counts.values()))
