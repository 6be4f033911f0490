"""
Global test fixtures for pytest.

Provides:
- A fresh SQLite schema per test
- Token minting that mimics the identity provider
- Helpers that create profiles, doctors and consultations directly in the
  database, each in its own short-lived session
"""
import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

_DB_DIR = tempfile.mkdtemp(prefix="emergicare-tests-")
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-signing-secret-with-enough-length-0123456789"
os.environ["JWT_AUDIENCE"] = "authenticated"
os.environ["LOG_LEVEL"] = "warning"

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from emergicare.common.config import settings
from emergicare.common.database.database import async_session, engine
from emergicare.main import app
from emergicare.models.models import (
    Base, Consultation, ConsultationStatus, Doctor, Profile, UrgencyLevel, UserRole,
)


# ============================================================================
# Database
# ============================================================================

@pytest.fixture(autouse=True)
async def database():
    """Create all tables before each test and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


# ============================================================================
# Tokens & clients
# ============================================================================

def make_token(identity, expires_in: int = 3600, **claims) -> str:
    """Token shaped like the identity provider's access tokens."""
    payload = {
        "sub": str(identity),
        "aud": "authenticated",
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(identity) -> dict:
    return {"Authorization": f"Bearer {make_token(identity)}"}


@pytest.fixture
async def client():
    """Unauthenticated async HTTP client bound to the app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# Data helpers
# ============================================================================

async def create_profile(role: UserRole, full_name: str, phone=None) -> Profile:
    async with async_session() as session:
        profile = Profile(id=uuid.uuid4(), role=role, full_name=full_name, phone=phone)
        session.add(profile)
        await session.commit()
        return await load_profile(profile.id, session)


async def create_doctor(
    full_name: str,
    specialization: str = "Emergency Medicine",
    is_available: bool = True,
    license_number=None,
) -> Profile:
    profile = await create_profile(UserRole.DOCTOR, full_name)
    async with async_session() as session:
        session.add(Doctor(
            id=profile.id,
            specialization=specialization,
            license_number=license_number or f"LIC-{profile.id.hex[:10]}",
            is_available=is_available,
            years_of_experience=5,
        ))
        await session.commit()
    return profile


async def load_profile(identity, session=None) -> Profile:
    """Load a profile and detach it, so it can be passed between sessions."""
    if session is None:
        async with async_session() as session:
            return await load_profile(identity, session)
    profile = await session.get(Profile, identity, populate_existing=True)
    await session.commit()
    return profile


async def insert_consultation(patient_id, symptoms="fever, chills", urgency=UrgencyLevel.HIGH, **fields) -> uuid.UUID:
    async with async_session() as session:
        consultation = Consultation(
            patient_id=patient_id,
            status=fields.pop("status", ConsultationStatus.PENDING),
            urgency_level=urgency,
            symptoms=symptoms,
            **fields,
        )
        session.add(consultation)
        await session.commit()
        return consultation.id


async def fetch_consultation(consultation_id) -> Consultation:
    async with async_session() as session:
        consultation = await session.get(Consultation, consultation_id)
        await session.commit()
        return consultation


async def count_consultations() -> int:
    from sqlalchemy import func, select

    async with async_session() as session:
        result = await session.execute(select(func.count(Consultation.id)))
        count = result.scalar_one()
        await session.commit()
        return count


@pytest.fixture
async def patient() -> Profile:
    return await create_profile(UserRole.PATIENT, "Amara Okafor", phone="+2348010000001")


@pytest.fixture
async def other_patient() -> Profile:
    return await create_profile(UserRole.PATIENT, "Kofi Asante")


@pytest.fixture
async def doctor() -> Profile:
    return await create_doctor("Tunde Bello", specialization="Cardiology")


@pytest.fixture
async def other_doctor() -> Profile:
    return await create_doctor("Grace Mensah", specialization="General Practice")
