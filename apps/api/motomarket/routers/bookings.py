"""Booking endpoints for customers and providers."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import CurrentUser, get_current_user, require_provider
from ..db.session import get_session
from ..schemas import bookings as bookings_schema
from ..services import bookings as bookings_service

router = APIRouter()


@router.post("", response_model=bookings_schema.BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: bookings_schema.CreateBookingRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingOut:
    """Book a service slot."""

    return await bookings_service.create_booking(payload, user, session)


@router.get("", response_model=bookings_schema.BookingListResponse)
async def list_my_bookings(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingListResponse:
    """Return the current user's bookings, newest first."""

    return await bookings_service.list_user_bookings(user, session)


@router.get("/provider", response_model=bookings_schema.BookingListResponse)
async def list_provider_bookings(
    user: CurrentUser = Depends(require_provider),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingListResponse:
    """Return bookings received by the current provider."""

    return await bookings_service.list_provider_bookings(user, session)


@router.get("/provider/stats", response_model=bookings_schema.BookingStatsResponse)
async def provider_stats(
    user: CurrentUser = Depends(require_provider),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingStatsResponse:
    """Return booking counts per status for the current provider."""

    return await bookings_service.provider_booking_stats(user, session)


@router.get("/{booking_id}", response_model=bookings_schema.BookingOut)
async def get_booking(
    booking_id: str,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingOut:
    """Return a single booking."""

    return await bookings_service.get_booking(booking_id, user, session)


@router.put("/{booking_id}/cancel", response_model=bookings_schema.BookingOut)
async def cancel_booking(
    booking_id: str,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingOut:
    """Cancel a booking more than 24 hours ahead."""

    return await bookings_service.cancel_booking(booking_id, user, session)


@router.put("/{booking_id}/reschedule", response_model=bookings_schema.BookingOut)
async def reschedule_booking(
    booking_id: str,
    payload: bookings_schema.RescheduleBookingRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingOut:
    """Move a booking to another slot."""

    return await bookings_service.reschedule_booking(booking_id, payload, user, session)


@router.put("/{booking_id}/status", response_model=bookings_schema.BookingOut)
async def update_status(
    booking_id: str,
    payload: bookings_schema.UpdateBookingStatusRequest,
    user: CurrentUser = Depends(require_provider),
    session: AsyncSession = Depends(get_session),
) -> bookings_schema.BookingOut:
    """Confirm, decline, complete or cancel a booking as its provider."""

    return await bookings_service.update_booking_status(booking_id, payload, user, session)
