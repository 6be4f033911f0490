# emergicare/modules/profiles/profiles_controller.py

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from emergicare.modules.profiles import profiles_service, schemas
from emergicare.common.database.database import get_db_session
from emergicare.models.models import Profile
from emergicare.auth.dependencies import get_current_identity, get_current_profile

router = APIRouter(prefix="/profiles", tags=["Profiles"])

@router.post("", response_model=schemas.ProfileResponse, status_code=201)
async def create_profile(
    request: schemas.CreateProfileRequest,
    identity: UUID = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session)
):
    """
    Complete signup by creating the caller's profile with their role.
    """
    return await profiles_service.create_profile(identity, request, db)

@router.get("/me", response_model=schemas.ProfileResponse)
async def get_profile(
    current_profile: Profile = Depends(get_current_profile)
):
    """
    Retrieve the profile for the currently authenticated user.
    """
    return current_profile

@router.put("/me", response_model=schemas.ProfileResponse)
async def update_profile(
    profile_data: schemas.UpdateProfileRequest,
    current_profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db_session)
):
    """
    Update the profile of the currently authenticated user.

    Only the provided fields will be updated.
    """
    return await profiles_service.update_profile(
        current_profile, profile_data.model_dump(exclude_unset=True), db
    )
