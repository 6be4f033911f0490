# emergicare/models/models.py

import uuid
import enum

from sqlalchemy import (
    Boolean, CheckConstraint, Column, ForeignKey, Index, Integer,
    String, Text, DateTime, Uuid,
    Enum as SAEnum,
    func,
)
from sqlalchemy.orm import declarative_base, relationship, backref

Base = declarative_base()


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(str, enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class ConsultationStatus(str, enum.Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class UrgencyLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ============================================================================
# ACCOUNT MODELS
# ============================================================================

class Profile(Base):
    """One row per account; id is the identity provider's subject id."""
    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, nullable=False)
    role = Column(
        SAEnum(UserRole, name="user_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    full_name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_profiles_role", "role"),
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, role={self.role.value})>"


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True, nullable=False)
    specialization = Column(String(100), nullable=False)
    license_number = Column(String(100), unique=True, nullable=False)
    is_available = Column(Boolean, default=False, nullable=False)
    years_of_experience = Column(Integer, default=0, nullable=False)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationship
    profile = relationship("Profile", backref=backref("doctor", uselist=False, cascade="all, delete-orphan"))

    __table_args__ = (
        CheckConstraint("years_of_experience >= 0", name="ck_doctors_experience_non_negative"),
        Index("idx_doctors_is_available", "is_available"),
    )

    def __repr__(self):
        return f"<Doctor(id={self.id}, specialization={self.specialization})>"


# ============================================================================
# CONSULTATION MODELS
# ============================================================================

class Consultation(Base):
    __tablename__ = "consultations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    doctor_id = Column(Uuid(as_uuid=True), ForeignKey("doctors.id", ondelete="SET NULL"), nullable=True)
    status = Column(
        SAEnum(ConsultationStatus, name="consultation_status", native_enum=False, values_callable=_enum_values),
        default=ConsultationStatus.PENDING,
        nullable=False,
    )
    urgency_level = Column(
        SAEnum(UrgencyLevel, name="urgency_level", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    symptoms = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Profile", foreign_keys=[patient_id], backref=backref("consultations", lazy="dynamic"))
    doctor = relationship("Doctor", foreign_keys=[doctor_id], backref=backref("consultations", lazy="dynamic"))

    __table_args__ = (
        CheckConstraint("length(trim(symptoms)) > 0", name="ck_consultations_symptoms_not_blank"),
        CheckConstraint(
            "(doctor_id IS NOT NULL) = (status IN ('assigned', 'in_progress', 'completed'))",
            name="ck_consultations_doctor_matches_status",
        ),
        CheckConstraint(
            "(started_at IS NOT NULL) = (status IN ('in_progress', 'completed'))",
            name="ck_consultations_started_matches_status",
        ),
        CheckConstraint(
            "(completed_at IS NOT NULL) = (status = 'completed')",
            name="ck_consultations_completed_matches_status",
        ),
        Index("idx_consultations_patient_id", "patient_id"),
        Index("idx_consultations_doctor_id", "doctor_id"),
        Index("idx_consultations_status", "status"),
        Index("idx_consultations_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Consultation(id={self.id}, status={self.status.value})>"
