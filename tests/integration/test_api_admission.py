"""
API tests for applications, invitations, registration and login
"""

from unittest.mock import patch
from uuid import uuid4

import pytest

from app.models.enums import UserRole
from app.services.admission import AdmissionService
from app.services.exceptions import StoreUnavailableError

from tests.fixtures.admission import DEFAULT_PASSWORD, DEFAULT_PHONE, bearer, create_test_user

pytestmark = pytest.mark.integration

API = "/api/v1"


async def _submit(client, name="Ana", email="ana@x.com"):
    response = await client.post(f"{API}/applications", json={"name": name, "email": email, "company": "Silva & Co"})
    assert response.status_code == 201
    return response.json()


async def _approve(client, admin_headers, application_id):
    return await client.post(
        f"{API}/admin/applications/{application_id}/decision",
        json={"decision": "approve"},
        headers=admin_headers,
    )


async def test_full_admission_over_http(test_client, admin_headers, notifier):
    application = await _submit(test_client)
    assert application["status"] == "pending"
    assert application["reviewer_id"] is None

    response = await _approve(test_client, admin_headers, application["id"])
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    token = notifier.last_token_for("ana@x.com")
    response = await test_client.post(f"{API}/invitations/lookup", json={"token": token})
    assert response.json() == {"valid": True, "email": "ana@x.com"}

    response = await test_client.post(
        f"{API}/members/register",
        json={"token": token, "full_name": "Ana Silva", "phone": DEFAULT_PHONE, "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 201
    member = response.json()
    assert member["email"] == "ana@x.com"
    assert member["active"] is True

    response = await test_client.post(f"{API}/invitations/lookup", json={"token": token})
    assert response.json() == {"valid": False, "email": None}

    response = await test_client.post(f"{API}/auth/login", json={"email": "ana@x.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    assert response.json()["role"] == "member"
    member_auth = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = await test_client.get(f"{API}/members/me", headers=member_auth)
    assert response.status_code == 200
    assert response.json()["id"] == member["id"]


async def test_invalid_application_is_422(test_client):
    response = await test_client.post(f"{API}/applications", json={"name": "Ana", "email": "nope"})

    assert response.status_code == 422


async def test_admin_endpoints_require_admin(test_client, session_factory):
    response = await test_client.get(f"{API}/admin/applications")
    assert response.status_code in (401, 403)

    member_user = await create_test_user(session_factory, "plain@example.com", role=UserRole.MEMBER)
    response = await test_client.get(f"{API}/admin/applications", headers=bearer(member_user.id))
    assert response.status_code == 403


async def test_list_pending_applications(test_client, admin_headers):
    first = await _submit(test_client, "Ana", "ana@example.com")
    second = await _submit(test_client, "Bo", "bo@example.com")
    await _approve(test_client, admin_headers, first["id"])

    response = await test_client.get(f"{API}/admin/applications?status=pending", headers=admin_headers)
    assert [a["id"] for a in response.json()] == [second["id"]]

    response = await test_client.get(f"{API}/admin/applications", headers=admin_headers)
    assert {a["id"] for a in response.json()} == {first["id"], second["id"]}

    response = await test_client.get(f"{API}/admin/applications?status=approved", headers=admin_headers)
    assert [a["id"] for a in response.json()] == [first["id"]]


async def test_decide_twice_is_409(test_client, admin_headers):
    application = await _submit(test_client)
    await _approve(test_client, admin_headers, application["id"])

    response = await test_client.post(
        f"{API}/admin/applications/{application['id']}/decision",
        json={"decision": "reject"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["error"] == "AlreadyDecided"


async def test_decide_unknown_is_404(test_client, admin_headers):
    response = await _approve(test_client, admin_headers, uuid4())

    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


async def test_register_with_bad_token_is_400(test_client):
    response = await test_client.post(
        f"{API}/members/register",
        json={"token": "made-up", "full_name": "X", "phone": DEFAULT_PHONE, "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Invitation token is invalid or has expired", "error": "InvalidToken"}


async def test_register_with_weak_password_is_422(test_client, admin_headers, notifier):
    application = await _submit(test_client)
    await _approve(test_client, admin_headers, application["id"])

    response = await test_client.post(
        f"{API}/members/register",
        json={"token": notifier.last_token_for("ana@x.com"), "full_name": "Ana", "phone": DEFAULT_PHONE, "password": "short"},
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


async def test_login_with_wrong_password_is_401(test_client, admin_user):
    response = await test_client.post(f"{API}/auth/login", json={"email": "admin@example.com", "password": "wrong-one"})

    assert response.status_code == 401


async def test_deactivated_member_cannot_login(test_client, admin_headers, notifier):
    application = await _submit(test_client)
    await _approve(test_client, admin_headers, application["id"])
    response = await test_client.post(
        f"{API}/members/register",
        json={"token": notifier.last_token_for("ana@x.com"), "full_name": "Ana", "phone": DEFAULT_PHONE, "password": DEFAULT_PASSWORD},
    )
    member_id = response.json()["id"]

    response = await test_client.patch(f"{API}/admin/members/{member_id}", json={"active": False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["active"] is False

    response = await test_client.post(f"{API}/auth/login", json={"email": "ana@x.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 403


async def test_set_active_unknown_member_is_404(test_client, admin_headers):
    response = await test_client.patch(f"{API}/admin/members/{uuid4()}", json={"active": False}, headers=admin_headers)

    assert response.status_code == 404


async def test_store_outage_is_503(test_client):
    with patch.object(AdmissionService, "lookup_invitation", side_effect=StoreUnavailableError("db down")):
        response = await test_client.post(f"{API}/invitations/lookup", json={"token": "anything"})

    assert response.status_code == 503
    assert response.json()["error"] == "StoreUnavailableError"
