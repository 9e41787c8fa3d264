"""Create database schema and seed sample marketplace data for development."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from motomarket.db.session import SessionLocal, engine
from motomarket.models.base import Base
from motomarket.models.listing import Category, Condition, FuelType, Listing, ListingStatus
from motomarket.models.service import Service, ServiceType
from motomarket.models.user import User, UserRole

WEEKDAY_HOURS = {"available": True, "startTime": "09:00", "endTime": "17:00"}
SATURDAY_HOURS = {"available": True, "startTime": "10:00", "endTime": "14:00"}
CLOSED = {"available": False}

USERS = [
	{"id": "user-rider", "username": "rider", "email": "rider@example.com", "role": UserRole.USER},
	{"id": "user-seller", "username": "seller", "email": "seller@example.com", "role": UserRole.USER},
	{"id": "user-workshop", "username": "workshop", "email": "workshop@example.com", "role": UserRole.PROVIDER},
]

LISTINGS = [
	{
		"id": "listing-r6",
		"seller_id": "user-seller",
		"title": "Yamaha YZF-R6 track ready",
		"description": "Well maintained supersport with fresh tyres and full service history.",
		"brand": "Yamaha",
		"model": "YZF-R6",
		"year": 2019,
		"price": 9500,
		"mileage": 12000,
		"engine_capacity": 599,
		"condition": Condition.EXCELLENT,
		"fuel_type": FuelType.PETROL,
		"category": Category.SPORT,
		"location": "Berlin",
		"is_featured": True,
		"age_days": 2,
	},
	{
		"id": "listing-cb500",
		"seller_id": "user-seller",
		"title": "Honda CB500X adventure commuter",
		"description": "Comfortable all-rounder with panniers and heated grips.",
		"brand": "Honda",
		"model": "CB500X",
		"year": 2021,
		"price": 6200,
		"mileage": 8000,
		"engine_capacity": 471,
		"condition": Condition.LIKE_NEW,
		"fuel_type": FuelType.PETROL,
		"category": Category.TOURING,
		"location": "Hamburg",
		"is_featured": False,
		"age_days": 5,
	},
	{
		"id": "listing-zero",
		"seller_id": "user-seller",
		"title": "Zero SR/F electric streetfighter",
		"description": "Quiet and quick electric naked bike, fast charger included.",
		"brand": "Zero",
		"model": "SR/F",
		"year": 2022,
		"price": 15800,
		"mileage": 3000,
		"engine_capacity": 0,
		"condition": Condition.LIKE_NEW,
		"fuel_type": FuelType.ELECTRIC,
		"category": Category.ELECTRIC,
		"location": "Berlin",
		"is_featured": True,
		"age_days": 1,
	},
	{
		"id": "listing-bonneville",
		"seller_id": "user-seller",
		"title": "Triumph Bonneville T100 classic",
		"description": "Sold to a happy customer, kept here for history.",
		"brand": "Triumph",
		"model": "Bonneville T100",
		"year": 2016,
		"price": 7400,
		"mileage": 21000,
		"engine_capacity": 900,
		"condition": Condition.GOOD,
		"fuel_type": FuelType.PETROL,
		"category": Category.VINTAGE,
		"location": "Munich",
		"status": ListingStatus.SOLD,
		"is_featured": False,
		"age_days": 30,
	},
]

SERVICES = [
	{
		"id": "service-inspection",
		"provider_id": "user-workshop",
		"title": "Pre-purchase inspection",
		"description": "Full mechanical and electrical check before you buy a used motorcycle.",
		"service_type": ServiceType.INSPECTION,
		"price": 89,
		"slot_duration": 60,
		"availability": {
			"monday": WEEKDAY_HOURS,
			"tuesday": WEEKDAY_HOURS,
			"wednesday": WEEKDAY_HOURS,
			"thursday": WEEKDAY_HOURS,
			"friday": WEEKDAY_HOURS,
			"saturday": SATURDAY_HOURS,
			"sunday": CLOSED,
		},
	},
	{
		"id": "service-oil-change",
		"provider_id": "user-workshop",
		"title": "Oil and filter change",
		"description": "Quick oil and filter service using manufacturer-approved oil.",
		"service_type": ServiceType.MAINTENANCE,
		"price": 49,
		"slot_duration": 30,
		"availability": {
			"monday": WEEKDAY_HOURS,
			"wednesday": WEEKDAY_HOURS,
			"friday": WEEKDAY_HOURS,
		},
	},
]


async def create_schema() -> None:
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def _upsert(session, model, data: dict) -> None:
	"""Insert a row or overwrite the seeded columns of an existing one."""

	obj = await session.get(model, data["id"])
	if obj is None:
		session.add(model(**data))
		return
	for key, value in data.items():
		setattr(obj, key, value)
	session.add(obj)


async def seed_marketplace() -> None:
	"""Insert or update demo users, listings, and services."""

	now = datetime.now(timezone.utc)
	async with SessionLocal() as session:
		async with session.begin():
			for user_data in USERS:
				await _upsert(session, User, dict(user_data))
			await session.flush()

			for listing_data in LISTINGS:
				data = dict(listing_data)
				data["created_at"] = now - timedelta(days=data.pop("age_days"))
				await _upsert(session, Listing, data)

			for service_data in SERVICES:
				await _upsert(session, Service, dict(service_data))


async def main() -> None:
	await create_schema()
	await seed_marketplace()
	print("Database schema ensured and demo data seeded.")


if __name__ == "__main__":
	asyncio.run(main())
