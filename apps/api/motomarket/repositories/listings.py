"""Query construction and data access for motorcycle listings."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
from uuid import uuid4

from sqlalchemy import ColumnElement, Select, UnaryExpression, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from ..models.listing import Listing, ListingStatus
from ..schemas.listings import ListingFilters, ListingSort
from ..services.pagination import PageRequest, apply_page
from .conditions import column_equals, price_bounds

SEARCH_COLUMNS = (Listing.title, Listing.description, Listing.brand, Listing.model)

_SORT_COLUMNS: dict[ListingSort, UnaryExpression] = {
    ListingSort.PRICE_LOW: Listing.price.asc(),
    ListingSort.PRICE_HIGH: Listing.price.desc(),
    ListingSort.YEAR_NEW: Listing.year.desc(),
    ListingSort.YEAR_OLD: Listing.year.asc(),
}

# Always appended so equal sort keys page deterministically.
_TIE_BREAKERS: tuple[UnaryExpression, ...] = (Listing.created_at.desc(), Listing.id.desc())


@dataclass(slots=True)
class ListingStatsRow:
    """Min/max price and year across the searchable pool."""

    min_price: float
    max_price: float
    min_year: int
    max_year: int


@dataclass(slots=True)
class FacetValues:
    """Distinct filter values present among searchable listings."""

    brands: list[str]
    categories: list[str]
    conditions: list[str]
    fuel_types: list[str]
    locations: list[str]


def active_condition() -> ColumnElement[bool]:
    return Listing.status == ListingStatus.ACTIVE


def build_listing_conditions(filters: ListingFilters) -> list[ColumnElement[bool]]:
    """Translate filters into AND-combined SQL conditions.

    Only active listings are ever eligible. Absent filters add nothing; the
    price and year bounds are inclusive and not checked against each other.
    """

    conditions: list[ColumnElement[bool]] = [active_condition()]

    if filters.search:
        term = filters.search
        conditions.append(or_(*(column.icontains(term, autoescape=True) for column in SEARCH_COLUMNS)))

    conditions.extend(price_bounds(Listing.price, filters.min_price, filters.max_price))
    if filters.min_year is not None:
        conditions.append(Listing.year >= filters.min_year)
    if filters.max_year is not None:
        conditions.append(Listing.year <= filters.max_year)

    equality_filters = (
        (Listing.brand, filters.brand),
        (Listing.category, filters.category),
        (Listing.condition, filters.condition),
        (Listing.fuel_type, filters.fuel_type),
        (Listing.location, filters.location),
    )
    for column, value in equality_filters:
        if value is not None:
            conditions.append(column_equals(column, value))

    return conditions


def listing_order_by(sort_by: ListingSort | None) -> tuple[UnaryExpression, ...]:
    """Return ORDER BY clauses; newest first unless a known sort key is given."""

    primary = _SORT_COLUMNS.get(sort_by) if sort_by is not None else None
    if primary is None:
        return _TIE_BREAKERS
    return (primary, *_TIE_BREAKERS)


def build_search_statement(filters: ListingFilters) -> Select[tuple[Listing]]:
    """Return the paged SELECT for the supplied filters."""

    stmt = (
        select(Listing)
        .where(*build_listing_conditions(filters))
        .order_by(*listing_order_by(filters.sort_by))
    )
    return apply_page(stmt, PageRequest(page=filters.page, limit=filters.limit))


def build_count_statement(filters: ListingFilters) -> Select[tuple[int]]:
    return select(func.count(Listing.id)).where(*build_listing_conditions(filters))


async def search_listings(
    session: AsyncSession,
    *,
    filters: ListingFilters,
) -> tuple[list[Listing], int]:
    """Return one page of matching listings and the total match count."""

    rows: Sequence[Listing] = (await session.execute(build_search_statement(filters))).scalars().all()
    total = (await session.execute(build_count_statement(filters))).scalar_one()
    return list(rows), int(total)


async def listing_facets(session: AsyncSession) -> FacetValues:
    """Distinct values over every active listing, ignoring any selected filters."""

    async def distinct_values(column) -> list[str]:
        stmt = select(column).where(active_condition()).distinct().order_by(column.asc())
        values = (await session.execute(stmt)).scalars().all()
        return [_plain(value) for value in values if value is not None]

    return FacetValues(
        brands=await distinct_values(Listing.brand),
        categories=await distinct_values(Listing.category),
        conditions=await distinct_values(Listing.condition),
        fuel_types=await distinct_values(Listing.fuel_type),
        locations=await distinct_values(Listing.location),
    )


async def listing_stats(session: AsyncSession) -> ListingStatsRow | None:
    """Aggregate price and year bounds over every active listing; None when empty."""

    stmt = select(
        func.min(Listing.price),
        func.max(Listing.price),
        func.min(Listing.year),
        func.max(Listing.year),
    ).where(active_condition())
    min_price, max_price, min_year, max_year = (await session.execute(stmt)).one()
    if min_price is None:
        return None
    return ListingStatsRow(
        min_price=float(min_price),
        max_price=float(max_price),
        min_year=int(min_year),
        max_year=int(max_year),
    )


async def get_listing(session: AsyncSession, listing_id: str) -> Listing | None:
    """Return a listing by identifier regardless of status."""

    return await session.get(Listing, listing_id)


async def list_featured(session: AsyncSession, *, limit: int) -> list[Listing]:
    stmt = (
        select(Listing)
        .where(active_condition(), Listing.is_featured.is_(True))
        .order_by(*_TIE_BREAKERS)
        .limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())


async def list_similar(session: AsyncSession, listing: Listing, *, limit: int) -> list[Listing]:
    """Active listings sharing the category or brand, excluding the listing itself."""

    stmt = (
        select(Listing)
        .where(
            active_condition(),
            Listing.id != listing.id,
            or_(Listing.category == listing.category, Listing.brand == listing.brand),
        )
        .order_by(*_TIE_BREAKERS)
        .limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())


async def increment_views(session: AsyncSession, listing: Listing) -> int:
    """Bump the view counter in SQL and return the stored count."""

    stmt = (
        update(Listing)
        .where(Listing.id == listing.id)
        .values(views=Listing.views + 1, updated_at=Listing.updated_at)
        .returning(Listing.views)
        .execution_options(synchronize_session=False)
    )
    views = (await session.execute(stmt)).scalar_one()
    set_committed_value(listing, "views", views)
    return views


def _plain(value: object) -> str:
    return str(getattr(value, "value", value))


async def create_listing(session: AsyncSession, **values) -> Listing:
    """Insert a listing and flush so defaults are populated."""

    listing = Listing(id=str(uuid4()), **values)
    session.add(listing)
    await session.flush()
    return listing
