"""Shared fixtures: an in-memory SQLite database and model factories."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from motomarket.models import (
    Category,
    Condition,
    FuelType,
    Listing,
    ListingStatus,
    Service,
    ServiceType,
    User,
    UserRole,
)
from motomarket.models.base import Base

BASE_CREATED_AT = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

OPEN_WEEKDAYS = {
    day: {"available": True, "startTime": "09:00", "endTime": "12:00"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_factory():
    def build(user_id: str = "user-1", role: UserRole = UserRole.USER) -> User:
        return User(id=user_id, username=user_id, email=f"{user_id}@example.com", role=role)

    return build


@pytest.fixture
def listing_factory():
    sequence = count(1)

    def build(**overrides) -> Listing:
        n = next(sequence)
        data = {
            "id": f"listing-{n:03d}",
            "seller_id": "seller-1",
            "title": f"Motorcycle {n}",
            "description": "A well kept motorcycle.",
            "brand": "Honda",
            "model": "CB500F",
            "year": 2020,
            "price": 5000,
            "mileage": 10000,
            "engine_capacity": 500,
            "condition": Condition.GOOD,
            "fuel_type": FuelType.PETROL,
            "category": Category.SPORT,
            "location": "Berlin",
            "status": ListingStatus.ACTIVE,
            "is_featured": False,
            "views": 0,
            "images": [],
            "created_at": BASE_CREATED_AT + timedelta(minutes=n),
        }
        data.update(overrides)
        return Listing(**data)

    return build


@pytest.fixture
def service_factory():
    def build(**overrides) -> Service:
        data = {
            "id": "service-1",
            "provider_id": "provider-1",
            "title": "Inspection",
            "description": "Full pre-purchase inspection.",
            "service_type": ServiceType.INSPECTION,
            "price": 80,
            "availability": dict(OPEN_WEEKDAYS),
            "slot_duration": 60,
            "is_active": True,
        }
        data.update(overrides)
        return Service(**data)

    return build
