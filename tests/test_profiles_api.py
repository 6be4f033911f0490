import uuid

from emergicare.auth.role_resolver import resolve_role
from emergicare.common.database.database import async_session
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import UserRole
from tests.conftest import auth_headers


async def test_signup_creates_profile_for_token_identity(client):
    identity = uuid.uuid4()
    response = await client.post(
        "/profiles",
        json={"role": "patient", "full_name": "  Amara Okafor ", "phone": "+2348010000001"},
        headers=auth_headers(identity),
    )
    assert response.status_code == 201
    assert response.json()["id"] == str(identity)
    assert response.json()["full_name"] == "Amara Okafor"
    assert response.json()["role"] == "patient"

    async with async_session() as session:
        assert await resolve_role(session, identity) == UserRole.PATIENT


async def test_signup_twice_conflicts(client, patient):
    response = await client.post(
        "/profiles", json={"role": "doctor", "full_name": "Someone Else"}, headers=auth_headers(patient.id)
    )
    assert response.status_code == 409
    assert response.json()["detail"] == GlobalMessages.PROFILE_EXISTS


async def test_signup_rejects_unknown_role(client):
    response = await client.post(
        "/profiles", json={"role": "admin", "full_name": "Root"}, headers=auth_headers(uuid.uuid4())
    )
    assert response.status_code == 422


async def test_signup_rejects_blank_name(client):
    response = await client.post(
        "/profiles", json={"role": "patient", "full_name": "   "}, headers=auth_headers(uuid.uuid4())
    )
    assert response.status_code == 422


async def test_read_own_profile(client, patient):
    response = await client.get("/profiles/me", headers=auth_headers(patient.id))
    assert response.status_code == 200
    assert response.json()["id"] == str(patient.id)
    assert response.json()["phone"] == "+2348010000001"


async def test_update_name_and_phone(client, patient):
    response = await client.put(
        "/profiles/me", json={"full_name": "Amara O. Okafor", "phone": None}, headers=auth_headers(patient.id)
    )
    assert response.status_code == 200
    assert response.json()["full_name"] == "Amara O. Okafor"
    assert response.json()["phone"] is None


async def test_role_cannot_be_changed(client, patient):
    response = await client.put("/profiles/me", json={"role": "doctor"}, headers=auth_headers(patient.id))
    assert response.status_code == 422

    me = await client.get("/profiles/me", headers=auth_headers(patient.id))
    assert me.json()["role"] == "patient"


async def test_profile_required_before_use(client):
    response = await client.get("/profiles/me", headers=auth_headers(uuid.uuid4()))
    assert response.status_code == 403
    assert response.json()["detail"] == GlobalMessages.PROFILE_REQUIRED
