"""
Service-level tests for the consultation lifecycle, including the
claim race between two doctors using separate sessions.
"""
import asyncio
import uuid

import pytest

from emergicare.common.database.database import async_session
from emergicare.common.exceptions import (
    AuthorizationError, ConflictError, InvalidTransition, NotFound, ProfileRequired, ValidationError,
)
from emergicare.common.realtime.change_feed import change_feed
from emergicare.models.models import Consultation, ConsultationStatus, UrgencyLevel, UserRole
from emergicare.modules.consultations import consultations_service as service
from emergicare.modules.consultations import lifecycle
from tests.conftest import create_profile, fetch_consultation, insert_consultation


async def claim(caller, consultation_id):
    async with async_session() as session:
        return await service.claim_consultation(session, caller, consultation_id)


async def test_create_trims_symptoms_and_starts_pending(patient):
    async with async_session() as session:
        created = await service.create_consultation(session, patient, "  fever, chills \n", "high")

    assert created.status == ConsultationStatus.PENDING
    assert created.doctor_id is None
    assert created.symptoms == "fever, chills"
    assert created.urgency_level == UrgencyLevel.HIGH
    assert created.patient.full_name == "Amara Okafor"


@pytest.mark.parametrize("symptoms", ["", "   ", None])
async def test_create_rejects_blank_symptoms(patient, symptoms):
    async with async_session() as session:
        with pytest.raises(ValidationError):
            await service.create_consultation(session, patient, symptoms, "low")


async def test_create_rejects_unknown_urgency(patient):
    async with async_session() as session:
        with pytest.raises(ValidationError):
            await service.create_consultation(session, patient, "headache", "apocalyptic")


async def test_doctor_cannot_create(doctor):
    async with async_session() as session:
        with pytest.raises(AuthorizationError):
            await service.create_consultation(session, doctor, "headache", "low")


async def test_concurrent_claims_have_exactly_one_winner(patient, doctor, other_doctor):
    consultation_id = await insert_consultation(patient.id)

    results = await asyncio.gather(
        claim(doctor, consultation_id),
        claim(other_doctor, consultation_id),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], ConflictError)

    stored = await fetch_consultation(consultation_id)
    assert stored.status == ConsultationStatus.ASSIGNED
    assert stored.doctor_id == winners[0].doctor_id
    assert stored.doctor_id in (doctor.id, other_doctor.id)


async def test_second_claim_loses(patient, doctor, other_doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)

    with pytest.raises(ConflictError):
        await claim(other_doctor, consultation_id)
    with pytest.raises(ConflictError):
        await claim(doctor, consultation_id)

    stored = await fetch_consultation(consultation_id)
    assert stored.doctor_id == doctor.id


async def test_claim_with_stale_read_loses_at_the_write(patient, doctor, other_doctor, monkeypatch):
    consultation_id = await insert_consultation(patient.id)
    stale = await fetch_consultation(consultation_id)
    await claim(doctor, consultation_id)

    # The second doctor's read happened before the first claim landed
    real_load = service._load
    served = []

    async def load_stale_first(session, wanted_id):
        if not served:
            served.append(wanted_id)
            return stale
        return await real_load(session, wanted_id)

    monkeypatch.setattr(service, "_load", load_stale_first)

    with pytest.raises(ConflictError):
        await claim(other_doctor, consultation_id)

    assert served == [consultation_id]
    stored = await fetch_consultation(consultation_id)
    assert stored.status == ConsultationStatus.ASSIGNED
    assert stored.doctor_id == doctor.id


async def test_conditional_update_refuses_stale_precondition(patient, doctor, other_doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)

    async with async_session() as session:
        written = await service._conditional_update(
            session, consultation_id,
            [Consultation.doctor_id.is_(None), Consultation.status == ConsultationStatus.PENDING],
            lifecycle.transition_values("claim", service._now(), doctor_id=other_doctor.id),
        )

    assert written is False
    assert (await fetch_consultation(consultation_id)).doctor_id == doctor.id


async def test_claim_publishes_change_notice(patient, doctor):
    consultation_id = await insert_consultation(patient.id)

    async with change_feed.subscribe(["consultations"]) as subscription:
        claimed = await claim(doctor, consultation_id)
        notice = await subscription.get(timeout=1)

    assert claimed.status == ConsultationStatus.ASSIGNED
    assert notice.to_dict() == {"table": "consultations", "event": "update"}


async def test_claim_requires_doctor_details(patient):
    bare_doctor = await create_profile(UserRole.DOCTOR, "No Details")
    consultation_id = await insert_consultation(patient.id)
    with pytest.raises(ProfileRequired):
        await claim(bare_doctor, consultation_id)


async def test_patient_cannot_claim(patient, other_patient):
    consultation_id = await insert_consultation(other_patient.id)
    with pytest.raises(AuthorizationError):
        await claim(patient, consultation_id)


async def test_claim_missing_consultation(doctor):
    with pytest.raises(NotFound):
        await claim(doctor, uuid.uuid4())


async def test_claim_cancelled_consultation_conflicts(patient, doctor):
    consultation_id = await insert_consultation(patient.id, status=ConsultationStatus.CANCELLED)
    with pytest.raises(ConflictError):
        await claim(doctor, consultation_id)


async def test_full_lifecycle_keeps_invariants(patient, doctor):
    consultation_id = await insert_consultation(patient.id)

    claimed = await claim(doctor, consultation_id)
    assert lifecycle.invariant_violations(claimed) == []

    async with async_session() as session:
        started = await service.start_consultation(session, doctor, consultation_id)
    assert started.status == ConsultationStatus.IN_PROGRESS
    assert started.started_at is not None
    assert lifecycle.invariant_violations(started) == []

    async with async_session() as session:
        completed = await service.complete_consultation(session, doctor, consultation_id)
    assert completed.status == ConsultationStatus.COMPLETED
    assert completed.completed_at is not None
    assert completed.doctor_id == doctor.id
    assert lifecycle.invariant_violations(completed) == []

    async with async_session() as session:
        with pytest.raises(InvalidTransition):
            await service.complete_consultation(session, doctor, consultation_id)


async def test_start_requires_assignment(patient, doctor):
    consultation_id = await insert_consultation(patient.id)
    async with async_session() as session:
        with pytest.raises(InvalidTransition):
            await service.start_consultation(session, doctor, consultation_id)


async def test_complete_cannot_skip_start(patient, doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)
    async with async_session() as session:
        with pytest.raises(InvalidTransition):
            await service.complete_consultation(session, doctor, consultation_id)


async def test_other_doctor_cannot_start(patient, doctor, other_doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)
    async with async_session() as session:
        with pytest.raises(AuthorizationError):
            await service.start_consultation(session, other_doctor, consultation_id)


async def test_patient_cannot_start_own_consultation(patient, doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)
    async with async_session() as session:
        with pytest.raises(AuthorizationError):
            await service.start_consultation(session, patient, consultation_id)


async def test_cancel_pending(patient):
    consultation_id = await insert_consultation(patient.id)
    async with async_session() as session:
        cancelled = await service.cancel_consultation(session, patient, consultation_id)
    assert cancelled.status == ConsultationStatus.CANCELLED
    assert cancelled.doctor_id is None


async def test_cancel_after_claim_is_invalid(patient, doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)
    async with async_session() as session:
        with pytest.raises(InvalidTransition):
            await service.cancel_consultation(session, patient, consultation_id)


async def test_other_patient_cannot_cancel(patient, other_patient):
    consultation_id = await insert_consultation(patient.id)
    async with async_session() as session:
        with pytest.raises(AuthorizationError):
            await service.cancel_consultation(session, other_patient, consultation_id)


async def test_patient_cannot_change_status_or_doctor(patient, doctor):
    consultation_id = await insert_consultation(patient.id)
    async with async_session() as session:
        with pytest.raises(ValidationError):
            await service.update_patient_fields(
                session, patient, consultation_id,
                {"status": ConsultationStatus.COMPLETED, "doctor_id": doctor.id},
            )
    stored = await fetch_consultation(consultation_id)
    assert stored.status == ConsultationStatus.PENDING
    assert stored.doctor_id is None


async def test_closed_consultation_is_read_only_for_patient(patient):
    from datetime import datetime, timezone

    consultation_id = await insert_consultation(patient.id, status=ConsultationStatus.CANCELLED)
    async with async_session() as session:
        with pytest.raises(InvalidTransition):
            await service.update_patient_fields(
                session, patient, consultation_id,
                {"scheduled_at": datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)},
            )


async def test_notes_only_by_assigned_doctor(patient, doctor, other_doctor):
    consultation_id = await insert_consultation(patient.id)
    await claim(doctor, consultation_id)

    async with async_session() as session:
        updated = await service.update_doctor_notes(session, doctor, consultation_id, "Hydrate, paracetamol.")
    assert updated.notes == "Hydrate, paracetamol."

    async with async_session() as session:
        with pytest.raises(AuthorizationError):
            await service.update_doctor_notes(session, other_doctor, consultation_id, "overwrite")
    async with async_session() as session:
        with pytest.raises(AuthorizationError):
            await service.update_doctor_notes(session, patient, consultation_id, "overwrite")


async def test_list_scopes_by_role(patient, other_patient, doctor, other_doctor):
    pending_id = await insert_consultation(patient.id)
    foreign_id = await insert_consultation(other_patient.id, symptoms="rash")
    taken_id = await insert_consultation(other_patient.id, symptoms="cough")
    await claim(other_doctor, taken_id)

    async with async_session() as session:
        mine = await service.list_consultations(session, patient)
        doctors_view = await service.list_consultations(session, doctor)
        claimer_view = await service.list_consultations(session, other_doctor, "assigned")

    assert [c.id for c in mine] == [pending_id]
    assert {c.id for c in doctors_view} == {pending_id, foreign_id}
    assert [c.id for c in claimer_view] == [taken_id]


async def test_list_rejects_unknown_status(patient):
    async with async_session() as session:
        with pytest.raises(ValidationError):
            await service.list_consultations(session, patient, "archived")
