"""Bookable workshop service model."""
from __future__ import annotations

from datetime import datetime, timezone
import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, JSONType, enum_type

if TYPE_CHECKING:
    from .booking import Booking
    from .user import User


class ServiceType(str, enum.Enum):
    MAINTENANCE = "Maintenance"
    REPAIR = "Repair"
    CUSTOMIZATION = "Customization"
    INSPECTION = "Inspection"
    DETAILING = "Detailing"
    OTHER = "Other"


class Service(Base):
    """Service offered by a provider with a weekly opening schedule.

    ``availability`` maps lowercase weekday names to
    ``{"available": bool, "startTime": "HH:MM", "endTime": "HH:MM"}``.
    """

    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
        CheckConstraint("slot_duration > 0", name="ck_services_slot_duration_positive"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    provider_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    service_type: Mapped[ServiceType] = mapped_column(
        enum_type(ServiceType, "service_type"), default=ServiceType.OTHER, nullable=False
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    availability: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    slot_duration: Mapped[int] = mapped_column(Integer, default=60, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    provider: Mapped["User"] = relationship("User", back_populates="services")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="service")
