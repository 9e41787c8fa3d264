"""Service-level tests for booking workflows."""
from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from motomarket.core.auth import CurrentUser
from motomarket.models import Booking, BookingStatus, Service, ServiceType, UserRole
from motomarket.repositories import bookings as bookings_repo
from motomarket.repositories import services as services_repo
from motomarket.schemas import bookings as schemas
from motomarket.services import bookings as bookings_service

NOW = datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc)
MONDAY = date(2030, 1, 7)

CUSTOMER = CurrentUser(id="user-1", role=UserRole.USER)
PROVIDER = CurrentUser(id="provider-1", role=UserRole.PROVIDER)
STRANGER = CurrentUser(id="user-9", role=UserRole.USER)


class DummySession:
    """Minimal session stub supporting async transaction context."""

    def __init__(self) -> None:
        self.added: list[object] = []
        self.begin_called = False
        self.flush = AsyncMock()

    def add(self, obj: object) -> None:
        self.added.append(obj)

    def begin(self):  # noqa: D401 - mimic SQLAlchemy's async begin
        session = self

        class _Tx:
            async def __aenter__(self_inner):
                session.begin_called = True
                return session

            async def __aexit__(self_inner, exc_type, exc, tb):
                return False

        return _Tx()


def make_service(**overrides) -> Service:
    data = {
        "id": "service-1",
        "provider_id": "provider-1",
        "title": "Inspection",
        "service_type": ServiceType.INSPECTION,
        "price": 80,
        "availability": {"monday": {"available": True, "startTime": "09:00", "endTime": "12:00"}},
        "slot_duration": 60,
        "is_active": True,
    }
    data.update(overrides)
    return Service(**data)


def make_booking(**overrides) -> Booking:
    data = {
        "id": "booking-1",
        "service_id": "service-1",
        "user_id": "user-1",
        "provider_id": "provider-1",
        "scheduled_date": MONDAY,
        "scheduled_time": "10:00",
        "status": BookingStatus.PENDING,
        "price": 80,
        "created_at": NOW,
    }
    data.update(overrides)
    return Booking(**data)


def create_request(slot: str = "10:00", day: date = MONDAY) -> schemas.CreateBookingRequest:
    return schemas.CreateBookingRequest.model_validate({"serviceId": "service-1", "date": day.isoformat(), "time": slot})


@pytest.mark.asyncio
async def test_create_booking_inserts_pending_booking(monkeypatch) -> None:
    session = DummySession()
    monkeypatch.setattr(services_repo, "get_by_id", AsyncMock(return_value=make_service()))
    insert = AsyncMock(return_value=make_booking())
    monkeypatch.setattr(bookings_repo, "create_booking", insert)

    response = await bookings_service.create_booking(create_request(), CUSTOMER, session, now=NOW)

    assert session.begin_called is True
    assert response.status is BookingStatus.PENDING
    kwargs = insert.await_args.kwargs
    assert kwargs["provider_id"] == "provider-1"
    assert kwargs["user_id"] == "user-1"
    assert kwargs["scheduled_time"] == "10:00"
    assert kwargs["price"] == 80


@pytest.mark.asyncio
async def test_create_booking_maps_slot_contention_to_conflict(monkeypatch) -> None:
    monkeypatch.setattr(services_repo, "get_by_id", AsyncMock(return_value=make_service()))
    monkeypatch.setattr(
        bookings_repo,
        "create_booking",
        AsyncMock(side_effect=IntegrityError("INSERT INTO bookings", {}, Exception("unique"))),
    )

    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.create_booking(create_request(), CUSTOMER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 409
    assert excinfo.value.detail == bookings_service.SLOT_TAKEN_MESSAGE


@pytest.mark.asyncio
async def test_create_booking_unknown_service(monkeypatch) -> None:
    monkeypatch.setattr(services_repo, "get_by_id", AsyncMock(return_value=None))

    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.create_booking(create_request(), CUSTOMER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("slot", "day"),
    [
        ("13:00", MONDAY),
        ("10:30", MONDAY),
        ("10:00", date(2030, 1, 8)),
        ("10:00", date(2029, 12, 31)),
    ],
)
async def test_create_booking_rejects_unbookable_times(monkeypatch, slot, day) -> None:
    monkeypatch.setattr(services_repo, "get_by_id", AsyncMock(return_value=make_service()))
    insert = AsyncMock()
    monkeypatch.setattr(bookings_repo, "create_booking", insert)

    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.create_booking(create_request(slot, day), CUSTOMER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 400
    insert.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_booking_by_customer(monkeypatch) -> None:
    session = DummySession()
    booking = make_booking(status=BookingStatus.CONFIRMED)
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=booking))

    response = await bookings_service.cancel_booking("booking-1", CUSTOMER, session, now=NOW)

    assert response.status is BookingStatus.CANCELLED
    assert response.cancelled_by == "user-1"
    assert booking.cancelled_at is not None
    assert session.added == [booking]


@pytest.mark.asyncio
async def test_cancel_booking_rejects_strangers(monkeypatch) -> None:
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=make_booking()))

    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.cancel_booking("booking-1", STRANGER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_cancel_booking_inside_window(monkeypatch) -> None:
    booking = make_booking(scheduled_date=date(2030, 1, 2), scheduled_time="09:00")
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=booking))

    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.cancel_booking("booking-1", CUSTOMER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 400
    assert booking.status is BookingStatus.PENDING


@pytest.mark.asyncio
async def test_cancel_missing_booking(monkeypatch) -> None:
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=None))

    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.cancel_booking("missing", CUSTOMER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_reschedule_resets_to_pending(monkeypatch) -> None:
    session = DummySession()
    booking = make_booking(status=BookingStatus.CONFIRMED, confirmed_at=NOW)
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=booking))
    monkeypatch.setattr(services_repo, "get_by_id", AsyncMock(return_value=make_service()))

    payload = schemas.RescheduleBookingRequest.model_validate({"date": "2030-01-14", "time": "9:00"})
    response = await bookings_service.reschedule_booking("booking-1", payload, CUSTOMER, session, now=NOW)

    assert response.status is BookingStatus.PENDING
    assert response.scheduled_date == date(2030, 1, 14)
    assert response.scheduled_time == "09:00"
    assert booking.confirmed_at is None
    session.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_reschedule_only_by_customer(monkeypatch) -> None:
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=make_booking()))

    payload = schemas.RescheduleBookingRequest.model_validate({"date": "2030-01-14", "time": "09:00"})
    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.reschedule_booking("booking-1", payload, PROVIDER, DummySession(), now=NOW)

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_reschedule_into_taken_slot_conflicts(monkeypatch) -> None:
    session = DummySession()
    session.flush = AsyncMock(side_effect=IntegrityError("UPDATE bookings", {}, Exception("unique")))
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=make_booking()))
    monkeypatch.setattr(services_repo, "get_by_id", AsyncMock(return_value=make_service()))

    payload = schemas.RescheduleBookingRequest.model_validate({"date": "2030-01-14", "time": "11:00"})
    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.reschedule_booking("booking-1", payload, CUSTOMER, session, now=NOW)

    assert excinfo.value.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.DECLINED),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    ],
)
async def test_provider_status_transitions(monkeypatch, current, target) -> None:
    booking = make_booking(status=current)
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=booking))

    payload = schemas.UpdateBookingStatusRequest(status=target, provider_notes="See you then")
    response = await bookings_service.update_booking_status("booking-1", payload, PROVIDER, DummySession())

    assert response.status is target
    assert response.provider_notes == "See you then"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.PENDING, BookingStatus.COMPLETED),
        (BookingStatus.COMPLETED, BookingStatus.CANCELLED),
        (BookingStatus.DECLINED, BookingStatus.CONFIRMED),
    ],
)
async def test_provider_status_rejects_invalid_transitions(monkeypatch, current, target) -> None:
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=make_booking(status=current)))

    payload = schemas.UpdateBookingStatusRequest(status=target)
    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.update_booking_status("booking-1", payload, PROVIDER, DummySession())

    assert excinfo.value.status_code == 400


@pytest.mark.asyncio
async def test_status_update_by_other_provider_is_forbidden(monkeypatch) -> None:
    monkeypatch.setattr(bookings_repo, "get_by_id", AsyncMock(return_value=make_booking()))
    other = CurrentUser(id="provider-2", role=UserRole.PROVIDER)

    payload = schemas.UpdateBookingStatusRequest(status=BookingStatus.CONFIRMED)
    with pytest.raises(HTTPException) as excinfo:
        await bookings_service.update_booking_status("booking-1", payload, other, DummySession())

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_provider_stats_fill_missing_statuses(monkeypatch) -> None:
    monkeypatch.setattr(
        bookings_repo,
        "count_by_status",
        AsyncMock(return_value={BookingStatus.PENDING: 2, BookingStatus.COMPLETED: 1}),
    )

    stats = await bookings_service.provider_booking_stats(PROVIDER, AsyncMock())

    assert stats.pending == 2
    assert stats.completed == 1
    assert stats.confirmed == 0
    assert stats.total == 3
