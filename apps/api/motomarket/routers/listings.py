"""Listing catalogue endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import CurrentUser, get_current_user
from ..db.session import get_session
from ..schemas import listings as listings_schema
from ..services import listings as listings_service

router = APIRouter()


def listing_filters(
    search: str | None = None,
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    min_year: str | None = Query(default=None, alias="minYear"),
    max_year: str | None = Query(default=None, alias="maxYear"),
    brand: str | None = None,
    category: str | None = None,
    condition: str | None = None,
    fuel_type: str | None = Query(default=None, alias="fuelType"),
    location: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    page: str | None = None,
    limit: str | None = None,
) -> listings_schema.ListingFilters:
    """Collect raw query parameters; malformed values are dropped by the model."""

    raw = {
        "search": search,
        "min_price": min_price,
        "max_price": max_price,
        "min_year": min_year,
        "max_year": max_year,
        "brand": brand,
        "category": category,
        "condition": condition,
        "fuel_type": fuel_type,
        "location": location,
        "sort_by": sort_by,
        "page": page,
        "limit": limit,
    }
    return listings_schema.ListingFilters.model_validate({k: v for k, v in raw.items() if v is not None})


@router.get("", response_model=listings_schema.ListingSearchResponse)
async def search_listings(
    filters: listings_schema.ListingFilters = Depends(listing_filters),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingSearchResponse:
    """Search available motorcycles."""

    return await listings_service.search_listings(filters, session)


@router.get("/featured", response_model=listings_schema.FeaturedListingsResponse)
async def featured_listings(
    session: AsyncSession = Depends(get_session),
) -> listings_schema.FeaturedListingsResponse:
    """Return featured motorcycles for the homepage."""

    return await listings_service.list_featured(session)


@router.get("/{listing_id}", response_model=listings_schema.ListingDetail)
async def get_listing(
    listing_id: str,
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingDetail:
    """Return a single listing with similar suggestions."""

    return await listings_service.get_listing_detail(listing_id, session)


@router.post("", response_model=listings_schema.ListingDetail, status_code=status.HTTP_201_CREATED)
async def create_listing(
    payload: listings_schema.ListingCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingDetail:
    """List a motorcycle for sale."""

    return await listings_service.create_listing(payload, user, session)


@router.put("/{listing_id}", response_model=listings_schema.ListingDetail)
async def update_listing(
    listing_id: str,
    payload: listings_schema.ListingUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingDetail:
    """Edit one of the current user's listings."""

    return await listings_service.update_listing(listing_id, payload, user, session)


@router.patch("/{listing_id}/mark-sold", response_model=listings_schema.ListingDetail)
async def mark_listing_sold(
    listing_id: str,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> listings_schema.ListingDetail:
    """Mark one of the current user's listings as sold."""

    return await listings_service.mark_listing_sold(listing_id, user, session)
