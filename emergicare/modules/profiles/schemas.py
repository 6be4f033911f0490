# emergicare/modules/profiles/schemas.py

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID
from datetime import datetime

from emergicare.models.models import UserRole


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    role: UserRole
    full_name: str
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CreateProfileRequest(BaseModel):
    """Completes signup after the identity provider created the account."""
    role: UserRole
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("full_name")
    def name_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("full_name must not be blank")
        return value


class UpdateProfileRequest(BaseModel):
    """Role is fixed at signup and cannot be changed."""
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
