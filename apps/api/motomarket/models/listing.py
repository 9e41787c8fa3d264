"""Motorcycle listing model."""
from __future__ import annotations

from datetime import datetime, timezone
import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, JSONType, enum_type

if TYPE_CHECKING:
    from .user import User


class ListingStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    DRAFT = "draft"
    INACTIVE = "inactive"


class Condition(str, enum.Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class FuelType(str, enum.Enum):
    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    OTHER = "Other"


class Category(str, enum.Enum):
    SPORT = "Sport"
    CRUISER = "Cruiser"
    TOURING = "Touring"
    OFF_ROAD = "Off-road"
    SCOOTER = "Scooter"
    ELECTRIC = "Electric"
    VINTAGE = "Vintage"
    OTHER = "Other"


MIN_YEAR = 1900


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Listing(Base):
    """A motorcycle offered for sale."""

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_listings_price_non_negative"),
        CheckConstraint("mileage >= 0", name="ck_listings_mileage_non_negative"),
        CheckConstraint("engine_capacity >= 0", name="ck_listings_engine_capacity_non_negative"),
        CheckConstraint(f"year >= {MIN_YEAR}", name="ck_listings_year_lower_bound"),
        Index("ix_listings_status_created_at", "status", "created_at"),
        Index("ix_listings_status_price", "status", "price"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    seller_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    brand: Mapped[str] = mapped_column(String, nullable=False)
    model: Mapped[str] = mapped_column(String, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    mileage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    engine_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    condition: Mapped[Condition] = mapped_column(enum_type(Condition, "listing_condition"), nullable=False)
    fuel_type: Mapped[FuelType] = mapped_column(
        enum_type(FuelType, "listing_fuel_type"), default=FuelType.PETROL, nullable=False
    )
    category: Mapped[Category] = mapped_column(enum_type(Category, "listing_category"), nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[ListingStatus] = mapped_column(
        enum_type(ListingStatus, "listing_status"), default=ListingStatus.ACTIVE, nullable=False
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    images: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    seller: Mapped["User"] = relationship("User", back_populates="listings")
