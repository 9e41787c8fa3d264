"""User model."""
from __future__ import annotations

from datetime import datetime, timezone
import enum

from sqlalchemy import DateTime, String
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from .booking import Booking
    from .listing import Listing
    from .service import Service

from .base import Base, enum_type


class UserRole(str, enum.Enum):
    USER = "user"
    PROVIDER = "provider"
    ADMIN = "admin"


class User(Base):
    """Marketplace account as supplied by the session layer."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    username: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String)
    role: Mapped[UserRole] = mapped_column(enum_type(UserRole, "user_role"), default=UserRole.USER, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    listings: Mapped[list["Listing"]] = relationship("Listing", back_populates="seller")
    services: Mapped[list["Service"]] = relationship("Service", back_populates="provider")
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking", back_populates="user", foreign_keys="Booking.user_id"
    )
