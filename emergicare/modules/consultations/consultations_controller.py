# emergicare/modules/consultations/consultations_controller.py
"""Consultations controller with API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from emergicare.common.database.database import get_db_session
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.auth.dependencies import get_current_profile
from emergicare.models.models import Profile

from . import consultations_service as service
from .schemas import (
    ConsultationResponse, ConsultationListResponse, ConsultationActionResponse,
    ConsultationCreateRequest, ConsultationPatientUpdateRequest, ConsultationNotesRequest,
)

router = APIRouter(prefix="/consultations", tags=["Consultations"])


def _action_response(consultation, message: str) -> ConsultationActionResponse:
    return ConsultationActionResponse(
        success=True,
        message=message,
        consultation=service.build_consultation_response(consultation),
    )


@router.get("", response_model=ConsultationListResponse)
async def get_consultations(
    status: Optional[str] = Query(None, description="Filter by status: all, active, pending, assigned, in_progress, completed, cancelled"),
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """
    Patients get their own requests; doctors get their assigned
    consultations plus every pending request.
    """
    consultations = await service.list_consultations(db, current_profile, status)
    return ConsultationListResponse(
        consultations=[service.build_consultation_response(c) for c in consultations],
        total=len(consultations),
    )


@router.get("/{consultation_id}", response_model=ConsultationResponse)
async def get_consultation(
    consultation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Get a single consultation by ID."""
    consultation = await service.get_consultation(db, current_profile, consultation_id)
    return service.build_consultation_response(consultation)


@router.post("", response_model=ConsultationActionResponse, status_code=201)
async def create_consultation(
    request: ConsultationCreateRequest,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Submit a new emergency consultation request."""
    consultation = await service.create_consultation(
        db, current_profile, request.symptoms, request.urgency_level
    )
    return _action_response(consultation, GlobalMessages.CONSULTATION_REQUESTED)


@router.post("/{consultation_id}/claim", response_model=ConsultationActionResponse)
async def claim_consultation(
    consultation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Accept a pending consultation. Only the first doctor to claim wins."""
    consultation = await service.claim_consultation(db, current_profile, consultation_id)
    return _action_response(consultation, GlobalMessages.CONSULTATION_CLAIMED)


@router.post("/{consultation_id}/start", response_model=ConsultationActionResponse)
async def start_consultation(
    consultation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    consultation = await service.start_consultation(db, current_profile, consultation_id)
    return _action_response(consultation, GlobalMessages.CONSULTATION_STARTED)


@router.post("/{consultation_id}/complete", response_model=ConsultationActionResponse)
async def complete_consultation(
    consultation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    consultation = await service.complete_consultation(db, current_profile, consultation_id)
    return _action_response(consultation, GlobalMessages.CONSULTATION_COMPLETED)


@router.post("/{consultation_id}/cancel", response_model=ConsultationActionResponse)
async def cancel_consultation(
    consultation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Cancel a consultation that has not been claimed yet."""
    consultation = await service.cancel_consultation(db, current_profile, consultation_id)
    return _action_response(consultation, GlobalMessages.CONSULTATION_CANCELLED)


@router.patch("/{consultation_id}", response_model=ConsultationActionResponse)
async def update_consultation(
    consultation_id: UUID,
    request: ConsultationPatientUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Update the patient-editable fields of an open consultation."""
    consultation = await service.update_patient_fields(
        db, current_profile, consultation_id, request.model_dump(exclude_unset=True)
    )
    return _action_response(consultation, GlobalMessages.CONSULTATION_UPDATED)


@router.put("/{consultation_id}/notes", response_model=ConsultationActionResponse)
async def update_notes(
    consultation_id: UUID,
    request: ConsultationNotesRequest,
    db: AsyncSession = Depends(get_db_session),
    current_profile: Profile = Depends(get_current_profile)
):
    """Save the assigned doctor's notes."""
    consultation = await service.update_doctor_notes(db, current_profile, consultation_id, request.notes)
    return _action_response(consultation, GlobalMessages.NOTES_UPDATED)
