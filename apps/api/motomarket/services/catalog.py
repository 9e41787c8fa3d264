"""Provider services: public directory and provider-side management."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import CurrentUser
from ..models.service import Service
from ..models.user import UserRole
from ..repositories import services as services_repo
from ..schemas import services as schemas
from .pagination import total_pages

logger = logging.getLogger(__name__)


def to_detail(service: Service) -> schemas.ServiceDetail:
    """Build the response model with a normalised weekly schedule."""

    schedule = schemas.WeeklySchedule.from_storage(service.availability)
    return schemas.ServiceDetail(
        id=service.id,
        provider_id=service.provider_id,
        title=service.title,
        description=service.description,
        service_type=service.service_type,
        price=service.price,
        slot_duration=service.slot_duration,
        is_active=service.is_active,
        availability=schedule.days,
        created_at=service.created_at,
    )


async def get_service(service_id: str, session: AsyncSession) -> schemas.ServiceDetail:
    """Return an active service with its normalised weekly schedule."""

    service = await services_repo.get_by_id(session, service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return to_detail(service)


async def list_services(filters: schemas.ServiceFilters, session: AsyncSession) -> schemas.ServiceListResponse:
    rows, total_count = await services_repo.search_services(session, filters=filters)
    return schemas.ServiceListResponse(
        services=[to_detail(row) for row in rows],
        total_count=total_count,
        total_pages=total_pages(total_count, filters.limit),
        page=filters.page,
        limit=filters.limit,
    )


async def _load_owned_service(session: AsyncSession, service_id: str, user: CurrentUser) -> Service:
    service = await services_repo.get_by_id(session, service_id)
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    if service.provider_id != user.id and user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to manage this service")
    return service


async def create_service(
    payload: schemas.ServiceCreateRequest,
    user: CurrentUser,
    session: AsyncSession,
) -> schemas.ServiceDetail:
    """Publish a service owned by the current provider."""

    async with session.begin():
        service = await services_repo.create_service(
            session,
            provider_id=user.id,
            title=payload.title,
            description=payload.description,
            service_type=payload.service_type,
            price=payload.price,
            slot_duration=payload.slot_duration,
            availability=payload.availability.to_storage(),
            is_active=True,
        )

    logger.info("Service %s created by provider %s", service.id, user.id)
    return to_detail(service)


async def update_service(
    service_id: str,
    payload: schemas.ServiceUpdateRequest,
    user: CurrentUser,
    session: AsyncSession,
) -> schemas.ServiceDetail:
    """Apply the fields present in ``payload``; existing bookings are untouched."""

    changes = payload.model_dump(exclude_unset=True)
    async with session.begin():
        service = await _load_owned_service(session, service_id, user)
        if "availability" in changes:
            schedule = payload.availability or schemas.WeeklySchedule()
            changes["availability"] = schedule.to_storage()
        for field, value in changes.items():
            if value is None and field != "availability":
                continue
            setattr(service, field, value)
        session.add(service)

    logger.info("Service %s updated by %s", service.id, user.id)
    return to_detail(service)


async def delete_service(service_id: str, user: CurrentUser, session: AsyncSession) -> None:
    """Withdraw a service from the directory, keeping its booking history."""

    async with session.begin():
        service = await _load_owned_service(session, service_id, user)
        service.is_active = False
        session.add(service)

    logger.info("Service %s withdrawn by %s", service_id, user.id)
