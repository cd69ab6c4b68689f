"""Tests for user management endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_admin_manages_users(
    client: AsyncClient,
    admin_headers: dict,
    admin_user: dict,
) -> None:
    response = await client.post(
        "/api/v1/users/",
        json={"name": "Dr. James Wilson", "email": "wilson@clinic.com", "role": "DOCTOR"},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["role"] == "DOCTOR"
    assert created["is_active"] is True

    response = await client.get(f"/api/v1/users/{created['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == created

    response = await client.get("/api/v1/users/", headers=admin_headers)
    assert response.status_code == 200
    assert [user["email"] for user in response.json()] == [
        admin_user["email"],
        "wilson@clinic.com",
    ]

    response = await client.delete(f"/api/v1/users/{created['id']}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/users/{created['id']}", headers=admin_headers)
    assert response.status_code == 404

    response = await client.get("/api/v1/users/", headers=admin_headers)
    assert [user["email"] for user in response.json()] == [admin_user["email"]]


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(
    client: AsyncClient,
    admin_headers: dict,
    doctor_user: dict,
) -> None:
    response = await client.post(
        "/api/v1/users/",
        json={"name": "Someone Else", "email": doctor_user["email"], "role": "RECEPTIONIST"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["message"] == f"Email already registered: {doctor_user['email']}"


@pytest.mark.asyncio
async def test_missing_user(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.get(f"/api/v1/users/{uuid4()}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["message"].startswith("User not found with id:")

    response = await client.delete(f"/api/v1/users/{uuid4()}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_user_management_is_admin_only(
    client: AsyncClient,
    receptionist_headers: dict,
    doctor_user: dict,
) -> None:
    response = await client.get("/api/v1/users/", headers=receptionist_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Only administrators can perform this operation"

    response = await client.delete(f"/api/v1/users/{doctor_user['id']}", headers=receptionist_headers)
    assert response.status_code == 400

    response = await client.get("/api/v1/users/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_deactivated_user_cannot_authenticate(
    client: AsyncClient,
    admin_headers: dict,
    doctor_user: dict,
    doctor_headers: dict,
) -> None:
    response = await client.get("/api/v1/specialties/", headers=doctor_headers)
    assert response.status_code == 200

    response = await client.delete(f"/api/v1/users/{doctor_user['id']}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get("/api/v1/specialties/", headers=doctor_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "User not found or inactive"
