"""Service repository helpers."""
from __future__ import annotations

from typing import Sequence
from uuid import uuid4

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.service import Service
from ..schemas.services import ServiceFilters
from ..services.pagination import PageRequest, apply_page
from .conditions import column_equals, price_bounds


async def get_by_id(session: AsyncSession, service_id: str) -> Service | None:
    """Return a service by identifier."""

    return await session.get(Service, service_id)


def build_service_conditions(filters: ServiceFilters) -> list[ColumnElement[bool]]:
    """Active services only; search covers title and description."""

    conditions: list[ColumnElement[bool]] = [Service.is_active.is_(True)]
    if filters.search:
        conditions.append(
            or_(
                Service.title.icontains(filters.search, autoescape=True),
                Service.description.icontains(filters.search, autoescape=True),
            )
        )
    if filters.service_type is not None:
        conditions.append(column_equals(Service.service_type, filters.service_type))
    conditions.extend(price_bounds(Service.price, filters.min_price, filters.max_price))
    return conditions


async def search_services(session: AsyncSession, *, filters: ServiceFilters) -> tuple[list[Service], int]:
    """Return one page of active services, newest first, and the total count."""

    conditions = build_service_conditions(filters)
    stmt: Select[tuple[Service]] = (
        select(Service).where(*conditions).order_by(Service.created_at.desc(), Service.id.desc())
    )
    stmt = apply_page(stmt, PageRequest(page=filters.page, limit=filters.limit))
    rows: Sequence[Service] = (await session.execute(stmt)).scalars().all()
    total = (await session.execute(select(func.count(Service.id)).where(*conditions))).scalar_one()
    return list(rows), int(total)


async def create_service(session: AsyncSession, **values) -> Service:
    """Insert a service and flush so defaults are populated."""

    service = Service(id=str(uuid4()), **values)
    session.add(service)
    await session.flush()
    return service
