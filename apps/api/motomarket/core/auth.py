"""Current-user resolution.

The session layer in front of the API authenticates the visitor and forwards
the user id in the ``X-User-Id`` header. Handlers receive the resolved user
as an explicit dependency and pass it down to services.
"""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..models.user import UserRole
from ..repositories import users as users_repo


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Identity of the authenticated caller."""

    id: str
    role: UserRole

    @property
    def is_provider(self) -> bool:
        return self.role in (UserRole.PROVIDER, UserRole.ADMIN)


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    session: AsyncSession = Depends(get_session),
) -> CurrentUser:
    """Resolve the authenticated user or reply 401."""

    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    user = await users_repo.get_by_id(session, x_user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    current = CurrentUser(id=user.id, role=user.role)
    # End the read so services can open their own transaction on this session.
    await session.rollback()
    return current


async def require_provider(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only service providers and admins."""

    if not user.is_provider:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Service provider access required")
    return user
