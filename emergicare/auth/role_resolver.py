# emergicare/auth/role_resolver.py
"""Resolve an authenticated identity to its profile and role."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from emergicare.common.exceptions import NotFound
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import Profile, UserRole


async def get_profile(session: AsyncSession, identity: UUID) -> Profile:
    """Return the caller's profile, or raise NotFound if signup is incomplete."""
    result = await session.execute(select(Profile).where(Profile.id == identity))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFound(GlobalMessages.PROFILE_REQUIRED)
    return profile


async def resolve_role(session: AsyncSession, identity: UUID) -> UserRole:
    profile = await get_profile(session, identity)
    return profile.role


async def resolve_role_or_none(session: AsyncSession, identity: UUID) -> Optional[UserRole]:
    """Same as resolve_role, but 'no profile' becomes 'no role'."""
    try:
        return await resolve_role(session, identity)
    except NotFound:
        return None
