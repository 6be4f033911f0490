# emergicare/modules/profiles/profiles_service.py

from types import SimpleNamespace
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from emergicare.auth import policies
from emergicare.common.exceptions import ConflictError
from emergicare.common.logging import get_logger
from emergicare.common.realtime.change_feed import change_feed
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import Profile
from emergicare.modules.profiles.schemas import CreateProfileRequest

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("full_name", "phone")


async def create_profile(identity: UUID, request: CreateProfileRequest, db: AsyncSession) -> Profile:
    """
    Self-registration: the profile id is always the caller's identity.
    """
    proposed = SimpleNamespace(id=identity, role=request.role)
    policies.authorize("profiles", "create", identity, None, None, proposed)

    if await db.get(Profile, identity) is not None:
        raise ConflictError(GlobalMessages.PROFILE_EXISTS)

    profile = Profile(
        id=identity,
        role=request.role,
        full_name=request.full_name,
        phone=request.phone,
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)

    logger.info("profile_created", caller_id=str(identity), role=profile.role.value)
    change_feed.publish("profiles", "insert")
    return profile


async def update_profile(current_profile: Profile, profile_data: dict, db: AsyncSession) -> Profile:
    """
    Update the caller's own profile. Only name and phone are writable;
    fields left out of ``profile_data`` are untouched.
    """
    policies.authorize("profiles", "update", current_profile.id, current_profile.role,
                       current_profile, current_profile)

    changed = False
    for key in UPDATABLE_FIELDS:
        if key not in profile_data:
            continue
        value = profile_data[key]
        if key == "full_name":
            if value is None or not value.strip():
                continue
            value = value.strip()
        setattr(current_profile, key, value)
        changed = True
    if not changed:
        return current_profile

    db.add(current_profile)
    await db.commit()
    await db.refresh(current_profile)

    logger.info("profile_updated", caller_id=str(current_profile.id))
    change_feed.publish("profiles", "update")
    return current_profile
