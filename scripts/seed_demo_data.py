# scripts/seed_demo_data.py
"""
Demo seed script for EmergiCare.
Creates one patient and two doctors with consultations in every status.

Profile ids are fixed so they can be matched to test accounts in the
identity provider (the token `sub` claim must equal the profile id).

Run: python -m scripts.seed_demo_data
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from emergicare.common.database.database import async_session
from emergicare.common.logging import get_logger, setup_logging
from emergicare.models.models import (
    Consultation, ConsultationStatus, Doctor, Profile, UrgencyLevel, UserRole,
)

logger = get_logger(__name__)

PATIENT_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
CARDIOLOGIST_ID = uuid.UUID("00000000-0000-4000-8000-000000000002")
GP_ID = uuid.UUID("00000000-0000-4000-8000-000000000003")


async def clear_demo_data(db: AsyncSession) -> None:
    ids = [PATIENT_ID, CARDIOLOGIST_ID, GP_ID]
    await db.execute(delete(Consultation).where(Consultation.patient_id.in_(ids)))
    await db.execute(delete(Doctor).where(Doctor.id.in_(ids)))
    await db.execute(delete(Profile).where(Profile.id.in_(ids)))
    await db.flush()


async def seed_accounts(db: AsyncSession) -> None:
    db.add_all([
        Profile(id=PATIENT_ID, role=UserRole.PATIENT, full_name="Amara Okafor", phone="+2348010000001"),
        Profile(id=CARDIOLOGIST_ID, role=UserRole.DOCTOR, full_name="Tunde Bello", phone="+2348010000002"),
        Profile(id=GP_ID, role=UserRole.DOCTOR, full_name="Grace Mensah"),
    ])
    await db.flush()

    db.add_all([
        Doctor(
            id=CARDIOLOGIST_ID,
            specialization="Cardiology",
            license_number="MDCN-CARD-0001",
            is_available=True,
            years_of_experience=12,
            bio="Night-shift cardiologist, chest pain and arrhythmia.",
        ),
        Doctor(
            id=GP_ID,
            specialization="General Practice",
            license_number="MDCN-GP-0002",
            is_available=False,
            years_of_experience=4,
        ),
    ])
    await db.flush()


async def seed_consultations(db: AsyncSession) -> None:
    now = datetime.now(timezone.utc)
    db.add_all([
        Consultation(
            patient_id=PATIENT_ID,
            status=ConsultationStatus.PENDING,
            urgency_level=UrgencyLevel.HIGH,
            symptoms="fever, chills",
            created_at=now - timedelta(minutes=5),
        ),
        Consultation(
            patient_id=PATIENT_ID,
            doctor_id=CARDIOLOGIST_ID,
            status=ConsultationStatus.IN_PROGRESS,
            urgency_level=UrgencyLevel.CRITICAL,
            symptoms="Sharp chest pain radiating to the left arm",
            started_at=now - timedelta(minutes=20),
            created_at=now - timedelta(minutes=30),
        ),
        Consultation(
            patient_id=PATIENT_ID,
            doctor_id=CARDIOLOGIST_ID,
            status=ConsultationStatus.COMPLETED,
            urgency_level=UrgencyLevel.MEDIUM,
            symptoms="Palpitations after coffee",
            notes="Advised to cut caffeine; follow up with GP.",
            started_at=now - timedelta(days=2, hours=1),
            completed_at=now - timedelta(days=2),
            created_at=now - timedelta(days=2, hours=2),
        ),
        Consultation(
            patient_id=PATIENT_ID,
            status=ConsultationStatus.CANCELLED,
            urgency_level=UrgencyLevel.LOW,
            symptoms="Mild headache",
            created_at=now - timedelta(days=5),
        ),
    ])
    await db.flush()


async def main():
    """Run the seed script."""
    setup_logging()
    async with async_session() as db:
        try:
            await clear_demo_data(db)
            await seed_accounts(db)
            await seed_consultations(db)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("seed_failed")
            raise
    logger.info("seed_complete", patient_id=str(PATIENT_ID),
                doctor_ids=[str(CARDIOLOGIST_ID), str(GP_ID)])


if __name__ == "__main__":
    asyncio.run(main())
