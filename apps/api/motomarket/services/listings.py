"""Business logic for the listing catalogue."""
from __future__ import annotations

import logging
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import CurrentUser
from ..core.config import settings
from ..models.listing import Listing, ListingStatus
from ..models.user import UserRole
from ..repositories import listings as listings_repo
from ..schemas import listings as schemas
from .pagination import total_pages

logger = logging.getLogger(__name__)

DEFAULT_MIN_PRICE = 0
DEFAULT_MAX_PRICE = 1_000_000
DEFAULT_MIN_YEAR = 2000


def default_stats() -> schemas.ListingStats:
    """Range-slider bounds used when there is nothing to aggregate."""

    return schemas.ListingStats(
        min_price=DEFAULT_MIN_PRICE,
        max_price=DEFAULT_MAX_PRICE,
        min_year=DEFAULT_MIN_YEAR,
        max_year=date.today().year,
    )


async def search_listings(
    filters: schemas.ListingFilters,
    session: AsyncSession,
) -> schemas.ListingSearchResponse:
    """Search active listings and attach filter metadata.

    Facets and stats describe the whole active pool rather than the current
    result set, so the filter UI keeps offering every option.
    """

    rows, total_count = await listings_repo.search_listings(session, filters=filters)
    facets = await listings_repo.listing_facets(session)
    stats_row = await listings_repo.listing_stats(session)

    stats = default_stats()
    if stats_row is not None:
        stats = schemas.ListingStats(
            min_price=stats_row.min_price,
            max_price=stats_row.max_price,
            min_year=stats_row.min_year,
            max_year=stats_row.max_year,
        )

    return schemas.ListingSearchResponse(
        listings=[schemas.ListingCard.model_validate(row) for row in rows],
        total_count=total_count,
        total_pages=total_pages(total_count, filters.limit),
        page=filters.page,
        limit=filters.limit,
        facets=schemas.ListingFacets(
            brands=facets.brands,
            categories=facets.categories,
            conditions=facets.conditions,
            fuel_types=facets.fuel_types,
            locations=facets.locations,
        ),
        stats=stats,
    )


async def list_featured(session: AsyncSession) -> schemas.FeaturedListingsResponse:
    rows = await listings_repo.list_featured(session, limit=settings.featured_listings_limit)
    return schemas.FeaturedListingsResponse(listings=[schemas.ListingCard.model_validate(row) for row in rows])


async def get_listing_detail(listing_id: str, session: AsyncSession) -> schemas.ListingDetail:
    """Return a listing with similar suggestions and count the view."""

    async with session.begin():
        listing = await listings_repo.get_listing(session, listing_id)
        if listing is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")

        await listings_repo.increment_views(session, listing)
        similar = await listings_repo.list_similar(session, listing, limit=settings.similar_listings_limit)

        detail = schemas.ListingDetail.model_validate(listing)
        detail.similar = [schemas.ListingCard.model_validate(row) for row in similar]

    return detail


async def _load_owned_listing(session: AsyncSession, listing_id: str, user: CurrentUser) -> Listing:
    listing = await listings_repo.get_listing(session, listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    if listing.seller_id != user.id and user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to edit this listing")
    return listing


def _as_detail(listing: Listing) -> schemas.ListingDetail:
    return schemas.ListingDetail.model_validate(listing)


async def create_listing(
    payload: schemas.ListingCreateRequest,
    user: CurrentUser,
    session: AsyncSession,
) -> schemas.ListingDetail:
    """List a motorcycle for sale on behalf of the current user."""

    async with session.begin():
        listing = await listings_repo.create_listing(
            session,
            seller_id=user.id,
            status=ListingStatus.ACTIVE,
            **payload.model_dump(),
        )

    logger.info("Listing %s created by seller %s", listing.id, user.id)
    return _as_detail(listing)


async def update_listing(
    listing_id: str,
    payload: schemas.ListingUpdateRequest,
    user: CurrentUser,
    session: AsyncSession,
) -> schemas.ListingDetail:
    """Apply the fields present in ``payload``; sold listings are final."""

    async with session.begin():
        listing = await _load_owned_listing(session, listing_id, user)
        if listing.status is ListingStatus.SOLD:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Sold listings cannot be edited")
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(listing, field, value)
        session.add(listing)

    logger.info("Listing %s updated by %s", listing.id, user.id)
    return _as_detail(listing)


async def mark_listing_sold(listing_id: str, user: CurrentUser, session: AsyncSession) -> schemas.ListingDetail:
    """Take a listing off the market; repeating the call is harmless."""

    async with session.begin():
        listing = await _load_owned_listing(session, listing_id, user)
        listing.status = ListingStatus.SOLD
        listing.is_featured = False
        session.add(listing)

    logger.info("Listing %s marked as sold by %s", listing.id, user.id)
    return _as_detail(listing)
