# emergicare/modules/doctors/doctors_service.py
"""Doctors service: directory listing and doctor profile upsert."""

from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from emergicare.auth import policies
from emergicare.common.exceptions import ConflictError, NotFound
from emergicare.common.logging import get_logger
from emergicare.common.realtime.change_feed import change_feed
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import Doctor, Profile
from .schemas import DoctorResponse, DoctorUpsertRequest

logger = get_logger(__name__)

DOCTOR_FIELDS = ("specialization", "license_number", "is_available", "years_of_experience", "bio")


def build_doctor_response(doctor: Doctor) -> DoctorResponse:
    return DoctorResponse(
        id=doctor.id,
        full_name=doctor.profile.full_name if doctor.profile else None,
        specialization=doctor.specialization,
        license_number=doctor.license_number,
        is_available=doctor.is_available,
        years_of_experience=doctor.years_of_experience,
        bio=doctor.bio,
        created_at=doctor.created_at,
        updated_at=doctor.updated_at,
    )


async def list_doctors(
    session: AsyncSession,
    caller: Profile,
    available: Optional[bool] = None
) -> List[Doctor]:
    """All doctors, available ones first, then by name."""
    query = (
        select(Doctor)
        .join(Profile, Doctor.id == Profile.id)
        .options(selectinload(Doctor.profile))
        .execution_options(populate_existing=True)
    )
    if available is not None:
        query = query.where(Doctor.is_available == available)
    query = query.order_by(desc(Doctor.is_available), Profile.full_name)

    result = await session.execute(query)
    return [
        doctor for doctor in result.scalars().all()
        if policies.is_permitted("doctors", "read", caller.id, caller.role, doctor)
    ]


async def _load_doctor(session: AsyncSession, doctor_id) -> Optional[Doctor]:
    result = await session.execute(
        select(Doctor)
        .where(Doctor.id == doctor_id)
        .options(selectinload(Doctor.profile))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_own_doctor(session: AsyncSession, caller: Profile) -> Doctor:
    doctor = await _load_doctor(session, caller.id)
    if doctor is None:
        raise NotFound(GlobalMessages.NOT_FOUND)
    return doctor


async def _license_taken(session: AsyncSession, license_number: str, owner_id) -> bool:
    result = await session.execute(
        select(Doctor.id).where(Doctor.license_number == license_number, Doctor.id != owner_id)
    )
    return result.first() is not None


async def upsert_doctor(
    session: AsyncSession,
    caller: Profile,
    request: DoctorUpsertRequest
) -> Doctor:
    """
    Save the caller's doctor details: create the row if absent, else update.
    Profile name/phone in the same request are saved alongside.
    """
    caller_id = caller.id
    fields = request.model_dump(include=set(DOCTOR_FIELDS))

    doctor = await _load_doctor(session, caller_id)
    proposed = Doctor(id=caller_id, **fields)
    if doctor is None:
        policies.authorize("doctors", "create", caller_id, caller.role, None, proposed,
                           message=GlobalMessages.DOCTORS_ONLY)
    else:
        policies.authorize("doctors", "update", caller_id, caller.role, doctor, proposed)

    if await _license_taken(session, request.license_number, caller_id):
        raise ConflictError(GlobalMessages.LICENSE_TAKEN)

    if request.full_name is not None and request.full_name.strip():
        caller.full_name = request.full_name.strip()
    if "phone" in request.model_fields_set:
        caller.phone = request.phone

    created = doctor is None
    if created:
        session.add(proposed)
    else:
        for key, value in fields.items():
            setattr(doctor, key, value)

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info("doctor_license_conflict", caller_id=str(caller_id))
        raise ConflictError(GlobalMessages.LICENSE_TAKEN)

    logger.info("doctor_saved", caller_id=str(caller_id), was_created=created,
                is_available=request.is_available)
    change_feed.publish("doctors", "insert" if created else "update")
    return await _load_doctor(session, caller_id)
