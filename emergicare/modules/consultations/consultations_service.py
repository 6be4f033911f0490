# emergicare/modules/consultations/consultations_service.py
"""Consultations service for business logic."""

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from emergicare.auth import policies
from emergicare.common.exceptions import (
    AuthorizationError, ConflictError, InvalidTransition, NotFound, ProfileRequired, ValidationError,
)
from emergicare.common.logging import get_logger
from emergicare.common.realtime.change_feed import change_feed
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import (
    Consultation, ConsultationStatus, Doctor, Profile, UrgencyLevel, UserRole,
)

from . import lifecycle
from .schemas import ConsultationResponse

logger = get_logger(__name__)

PATIENT_FIELDS = frozenset({"scheduled_at"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _snapshot(row: Consultation, **changes) -> SimpleNamespace:
    """Copy of the policy-relevant columns with ``changes`` applied."""
    data = {
        "id": row.id,
        "patient_id": row.patient_id,
        "doctor_id": row.doctor_id,
        "status": row.status,
    }
    data.update(changes)
    return SimpleNamespace(**data)


def build_consultation_response(consultation: Consultation) -> ConsultationResponse:
    """Build consultation response with patient and doctor names."""
    patient_name = consultation.patient.full_name if consultation.patient else None
    doctor_name = None
    if consultation.doctor is not None and consultation.doctor.profile is not None:
        doctor_name = f"Dr. {consultation.doctor.profile.full_name}"

    return ConsultationResponse(
        id=consultation.id,
        patient_id=consultation.patient_id,
        patient_name=patient_name,
        doctor_id=consultation.doctor_id,
        doctor_name=doctor_name,
        status=consultation.status,
        urgency_level=consultation.urgency_level,
        symptoms=consultation.symptoms,
        notes=consultation.notes,
        scheduled_at=consultation.scheduled_at,
        started_at=consultation.started_at,
        completed_at=consultation.completed_at,
        created_at=consultation.created_at,
        updated_at=consultation.updated_at,
    )


def _with_names(query):
    return query.options(
        selectinload(Consultation.patient),
        selectinload(Consultation.doctor).selectinload(Doctor.profile),
    )


async def _load(session: AsyncSession, consultation_id: UUID) -> Optional[Consultation]:
    """Fetch the authoritative row, discarding anything cached in the session."""
    result = await session.execute(
        _with_names(select(Consultation).where(Consultation.id == consultation_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _load_visible(session: AsyncSession, caller: Profile, consultation_id: UUID) -> Consultation:
    consultation = await _load(session, consultation_id)
    if consultation is None:
        raise NotFound(GlobalMessages.NOT_FOUND)
    policies.authorize("consultations", "read", caller.id, caller.role, consultation)
    return consultation


async def _conditional_update(session: AsyncSession, consultation_id: UUID, conditions, values: Dict[str, Any]) -> bool:
    """
    Single-statement compare-and-set. Returns False when the row no longer
    matches ``conditions``, in which case nothing was written.
    """
    stmt = (
        update(Consultation)
        .where(Consultation.id == consultation_id, *conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount == 1


async def _finish_write(session: AsyncSession, consultation_id: UUID, event: str) -> Consultation:
    change_feed.publish("consultations", event)
    return await _load(session, consultation_id)


# ============================================================================
# QUERIES
# ============================================================================

async def list_consultations(
    session: AsyncSession,
    caller: Profile,
    status: Optional[str] = None
) -> List[Consultation]:
    """
    Patients see their own requests. Doctors see what is assigned to them
    plus the whole pending queue. Newest first.
    """
    query = select(Consultation)
    if caller.role == UserRole.DOCTOR:
        query = query.where(or_(
            Consultation.doctor_id == caller.id,
            Consultation.status == ConsultationStatus.PENDING,
        ))
    else:
        query = query.where(Consultation.patient_id == caller.id)

    if status and status != "all":
        if status == "active":
            query = query.where(Consultation.status.in_(list(lifecycle.ACTIVE_STATUSES)))
        else:
            try:
                query = query.where(Consultation.status == ConsultationStatus(status))
            except ValueError:
                raise ValidationError(f"Unknown consultation status: {status}")

    query = query.order_by(desc(Consultation.created_at), desc(Consultation.id))
    result = await session.execute(_with_names(query))
    return list(result.scalars().all())


async def get_consultation(session: AsyncSession, caller: Profile, consultation_id: UUID) -> Consultation:
    return await _load_visible(session, caller, consultation_id)


# ============================================================================
# WRITES
# ============================================================================

async def create_consultation(
    session: AsyncSession,
    caller: Profile,
    symptoms: str,
    urgency_level: Any
) -> Consultation:
    """Insert a pending, unassigned consultation for the calling patient."""
    symptoms = (symptoms or "").strip()
    if not symptoms:
        raise ValidationError(GlobalMessages.SYMPTOMS_REQUIRED)
    try:
        urgency = UrgencyLevel(urgency_level)
    except ValueError:
        raise ValidationError(f"Unknown urgency level: {urgency_level}")

    proposed = SimpleNamespace(patient_id=caller.id, doctor_id=None, status=ConsultationStatus.PENDING)
    policies.authorize("consultations", "create", caller.id, caller.role, None, proposed,
                       message=GlobalMessages.PATIENTS_ONLY)

    consultation = Consultation(
        patient_id=caller.id,
        doctor_id=None,
        status=ConsultationStatus.PENDING,
        urgency_level=urgency,
        symptoms=symptoms,
    )
    session.add(consultation)
    await session.commit()

    logger.info("consultation_created", consultation_id=str(consultation.id),
                caller_id=str(caller.id), urgency=urgency.value)
    return await _finish_write(session, consultation.id, "insert")


async def claim_consultation(session: AsyncSession, caller: Profile, consultation_id: UUID) -> Consultation:
    """
    Take ownership of a pending consultation. The write is a compare-and-set
    on (doctor_id IS NULL, status = pending), so of several doctors racing
    for the same row exactly one wins and the rest get ConflictError.
    """
    if caller.role != UserRole.DOCTOR:
        raise AuthorizationError(GlobalMessages.DOCTORS_ONLY)
    if await session.get(Doctor, caller.id) is None:
        raise ProfileRequired(GlobalMessages.DOCTOR_PROFILE_REQUIRED)

    current = await _load(session, consultation_id)
    if current is None:
        raise NotFound(GlobalMessages.NOT_FOUND)
    if current.status != ConsultationStatus.PENDING or current.doctor_id is not None:
        logger.info("claim_conflict", consultation_id=str(consultation_id), caller_id=str(caller.id))
        raise ConflictError(GlobalMessages.ALREADY_CLAIMED)

    values = lifecycle.transition_values("claim", _now(), doctor_id=caller.id)
    policies.authorize("consultations", "update_as_doctor", caller.id, caller.role,
                       current, _snapshot(current, **values))

    claimed = await _conditional_update(
        session, consultation_id,
        [Consultation.doctor_id.is_(None), Consultation.status == ConsultationStatus.PENDING],
        values,
    )
    if not claimed:
        logger.info("claim_conflict", consultation_id=str(consultation_id), caller_id=str(caller.id))
        raise ConflictError(GlobalMessages.ALREADY_CLAIMED)

    logger.info("consultation_claimed", consultation_id=str(consultation_id), caller_id=str(caller.id))
    return await _finish_write(session, consultation_id, "update")


async def _advance_as_doctor(session: AsyncSession, caller: Profile, consultation_id: UUID, action: str) -> Consultation:
    current = await _load_visible(session, caller, consultation_id)
    transition = lifecycle.require_transition(action, current.status)

    values = lifecycle.transition_values(action, _now())
    policies.authorize("consultations", "update_as_doctor", caller.id, caller.role,
                       current, _snapshot(current, **values))

    advanced = await _conditional_update(
        session, consultation_id,
        [Consultation.status == transition.source, Consultation.doctor_id == caller.id],
        values,
    )
    if not advanced:
        raise ConflictError(GlobalMessages.STATE_CHANGED)

    logger.info(f"consultation_{transition.target.value}", consultation_id=str(consultation_id),
                caller_id=str(caller.id))
    return await _finish_write(session, consultation_id, "update")


async def start_consultation(session: AsyncSession, caller: Profile, consultation_id: UUID) -> Consultation:
    return await _advance_as_doctor(session, caller, consultation_id, "start")


async def complete_consultation(session: AsyncSession, caller: Profile, consultation_id: UUID) -> Consultation:
    return await _advance_as_doctor(session, caller, consultation_id, "complete")


async def cancel_consultation(session: AsyncSession, caller: Profile, consultation_id: UUID) -> Consultation:
    """Patient withdraws a request that no doctor has claimed yet."""
    current = await _load_visible(session, caller, consultation_id)
    policies.authorize("consultations", "update_as_patient", caller.id, caller.role, current)
    transition = lifecycle.require_transition("cancel", current.status)

    cancelled = await _conditional_update(
        session, consultation_id,
        [Consultation.status == transition.source, Consultation.doctor_id.is_(None)],
        lifecycle.transition_values("cancel", _now()),
    )
    if not cancelled:
        raise ConflictError(GlobalMessages.STATE_CHANGED)

    logger.info("consultation_cancelled", consultation_id=str(consultation_id), caller_id=str(caller.id))
    return await _finish_write(session, consultation_id, "update")


async def update_patient_fields(
    session: AsyncSession,
    caller: Profile,
    consultation_id: UUID,
    changes: Dict[str, Any]
) -> Consultation:
    """Patient edits to an open consultation. Status and doctor are never settable here."""
    forbidden = set(changes) - PATIENT_FIELDS
    if forbidden:
        raise ValidationError(f"Fields cannot be changed: {', '.join(sorted(forbidden))}")

    current = await _load_visible(session, caller, consultation_id)
    policies.authorize("consultations", "update_as_patient", caller.id, caller.role,
                       current, _snapshot(current))
    if lifecycle.is_terminal(current.status):
        raise InvalidTransition(GlobalMessages.CONSULTATION_CLOSED)
    if not changes:
        return current

    updated = await _conditional_update(
        session, consultation_id,
        [Consultation.patient_id == caller.id, Consultation.status.in_(list(lifecycle.ACTIVE_STATUSES))],
        changes,
    )
    if not updated:
        raise ConflictError(GlobalMessages.STATE_CHANGED)

    logger.info("consultation_patient_update", consultation_id=str(consultation_id),
                caller_id=str(caller.id), fields=sorted(changes))
    return await _finish_write(session, consultation_id, "update")


async def update_doctor_notes(
    session: AsyncSession,
    caller: Profile,
    consultation_id: UUID,
    notes: Optional[str]
) -> Consultation:
    """Assigned doctor writes consultation notes."""
    current = await _load_visible(session, caller, consultation_id)
    if current.doctor_id != caller.id:
        raise AuthorizationError(GlobalMessages.NOT_FOUND)
    policies.authorize("consultations", "update_as_doctor", caller.id, caller.role,
                       current, _snapshot(current))

    updated = await _conditional_update(
        session, consultation_id,
        [Consultation.doctor_id == caller.id],
        {"notes": notes},
    )
    if not updated:
        raise ConflictError(GlobalMessages.STATE_CHANGED)

    logger.info("consultation_notes_updated", consultation_id=str(consultation_id), caller_id=str(caller.id))
    return await _finish_write(session, consultation_id, "update")
