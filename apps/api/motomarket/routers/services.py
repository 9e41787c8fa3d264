"""Service directory, provider management and slot availability endpoints."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import CurrentUser, require_provider
from ..db.session import get_session
from ..schemas import services as services_schema
from ..services import catalog as catalog_service
from ..services import slots as slots_service

router = APIRouter()


def service_filters(
    search: str | None = None,
    service_type: str | None = Query(default=None, alias="serviceType"),
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    page: str | None = None,
    limit: str | None = None,
) -> services_schema.ServiceFilters:
    """Collect raw query parameters; malformed values are dropped by the model."""

    raw = {
        "search": search,
        "service_type": service_type,
        "min_price": min_price,
        "max_price": max_price,
        "page": page,
        "limit": limit,
    }
    return services_schema.ServiceFilters.model_validate({k: v for k, v in raw.items() if v is not None})


@router.get("", response_model=services_schema.ServiceListResponse)
async def list_services(
    filters: services_schema.ServiceFilters = Depends(service_filters),
    session: AsyncSession = Depends(get_session),
) -> services_schema.ServiceListResponse:
    """Browse active services."""

    return await catalog_service.list_services(filters, session)


@router.post("", response_model=services_schema.ServiceDetail, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: services_schema.ServiceCreateRequest,
    user: CurrentUser = Depends(require_provider),
    session: AsyncSession = Depends(get_session),
) -> services_schema.ServiceDetail:
    """Publish a new service for the current provider."""

    return await catalog_service.create_service(payload, user, session)


@router.get("/{service_id}", response_model=services_schema.ServiceDetail)
async def get_service(
    service_id: str,
    session: AsyncSession = Depends(get_session),
) -> services_schema.ServiceDetail:
    """Return a service and its opening hours."""

    return await catalog_service.get_service(service_id, session)


@router.put("/{service_id}", response_model=services_schema.ServiceDetail)
async def update_service(
    service_id: str,
    payload: services_schema.ServiceUpdateRequest,
    user: CurrentUser = Depends(require_provider),
    session: AsyncSession = Depends(get_session),
) -> services_schema.ServiceDetail:
    """Edit a service owned by the current provider."""

    return await catalog_service.update_service(service_id, payload, user, session)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: str,
    user: CurrentUser = Depends(require_provider),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Withdraw a service from the directory."""

    await catalog_service.delete_service(service_id, user, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{service_id}/slots", response_model=list[str])
async def list_slots(
    service_id: str,
    target_date: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> list[str]:
    """Return bookable HH:MM slots for the given date."""

    return await slots_service.list_available_slots(service_id, target_date, session)
