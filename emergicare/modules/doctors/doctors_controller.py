# emergicare/modules/doctors/doctors_controller.py
"""Doctors controller with API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from emergicare.common.database.database import get_db_session
from emergicare.auth.dependencies import get_current_profile
from emergicare.models.models import Profile

from . import doctors_service as service
from .schemas import DoctorListResponse, DoctorResponse, DoctorUpsertRequest

router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("", response_model=DoctorListResponse)
async def get_doctors(
    available: Optional[bool] = Query(None, description="Only doctors with this availability"),
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Doctor directory, available doctors first."""
    doctors = await service.list_doctors(db, current_profile, available)
    return DoctorListResponse(
        doctors=[service.build_doctor_response(d) for d in doctors],
        total=len(doctors),
    )


@router.get("/me", response_model=DoctorResponse)
async def get_my_doctor_profile(
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    doctor = await service.get_own_doctor(db, current_profile)
    return service.build_doctor_response(doctor)


@router.put("/me", response_model=DoctorResponse)
async def save_my_doctor_profile(
    request: DoctorUpsertRequest,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """
    Create the caller's doctor profile on first save, update it afterwards.
    Requires the doctor role.
    """
    doctor = await service.upsert_doctor(db, current_profile, request)
    return service.build_doctor_response(doctor)
