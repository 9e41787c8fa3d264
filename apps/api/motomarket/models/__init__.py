"""Expose ORM models."""
from .booking import Booking, BookingStatus
from .listing import Category, Condition, FuelType, Listing, ListingStatus
from .service import Service, ServiceType
from .user import User, UserRole

__all__ = [
    "Booking",
    "BookingStatus",
    "Category",
    "Condition",
    "FuelType",
    "Listing",
    "ListingStatus",
    "Service",
    "ServiceType",
    "User",
    "UserRole",
]
