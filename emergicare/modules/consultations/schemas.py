# emergicare/modules/consultations/schemas.py
"""Consultations module Pydantic schemas."""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID

from emergicare.models.models import ConsultationStatus, UrgencyLevel


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class ConsultationCreateRequest(BaseModel):
    """Patient request for an emergency consultation."""
    model_config = ConfigDict(extra="ignore")

    symptoms: str = Field(..., max_length=5000)
    urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM


class ConsultationPatientUpdateRequest(BaseModel):
    """Fields a patient may change on their own open consultation."""
    model_config = ConfigDict(extra="forbid")

    scheduled_at: Optional[datetime] = None


class ConsultationNotesRequest(BaseModel):
    """Doctor's notes for an assigned consultation."""
    notes: Optional[str] = Field(None, max_length=10000)


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class ConsultationResponse(BaseModel):
    """Full consultation details."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    patient_id: UUID
    patient_name: Optional[str] = None
    doctor_id: Optional[UUID] = None
    doctor_name: Optional[str] = None
    status: ConsultationStatus
    urgency_level: UrgencyLevel
    symptoms: str
    notes: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ConsultationListResponse(BaseModel):
    """List of consultations visible to the caller, newest first."""
    consultations: List[ConsultationResponse]
    total: int


class ConsultationActionResponse(BaseModel):
    """Generic response for consultation actions."""
    success: bool
    message: str
    consultation: Optional[ConsultationResponse] = None
