# emergicare/modules/doctors/schemas.py
"""Doctors module Pydantic schemas."""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID


class DoctorUpsertRequest(BaseModel):
    """
    Save the caller's doctor profile. Creates the doctor row on first save.
    ``full_name`` and ``phone`` update the underlying account profile.
    """
    specialization: str = Field(..., min_length=1, max_length=100)
    license_number: str = Field(..., min_length=1, max_length=100)
    is_available: bool = False
    years_of_experience: int = Field(default=0, ge=0, le=80)
    bio: Optional[str] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)


class DoctorResponse(BaseModel):
    """Public doctor directory entry."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: Optional[str] = None
    specialization: str
    license_number: str
    is_available: bool
    years_of_experience: int
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DoctorListResponse(BaseModel):
    doctors: List[DoctorResponse]
    total: int
