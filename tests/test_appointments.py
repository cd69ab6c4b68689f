"""Tests for appointment endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient

from clinic_scheduler.core.security import create_access_token
from clinic_scheduler.main import app
from clinic_scheduler.services.event_publisher import (
    AppointmentEventPublisher,
    get_event_publisher,
)


@pytest.fixture
def appointment_payload(doctor_user: dict, catalogs: dict, tomorrow: datetime) -> dict:
    """Sample appointment data for testing."""
    return {
        "patient_name": "John Patient",
        "doctor_id": str(doctor_user["id"]),
        "specialty_id": catalogs["id"],
        "scheduled_at": tomorrow.isoformat(),
        "notes": "First time patient",
    }


async def _create(client: AsyncClient, payload: dict, headers: dict) -> dict:
    response = await client.post("/api/v1/appointments/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_detailed_health_with_events_disabled(client: AsyncClient, transport) -> None:
    app.dependency_overrides[get_event_publisher] = lambda: AppointmentEventPublisher(
        transport, enabled=False
    )

    response = await client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["database"] == "healthy"
    assert data["events"] == "disabled"
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_requires_authentication(client: AsyncClient) -> None:
    response = await client.get("/api/v1/appointments/")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"] == "UnauthorizedException"

    response = await client.get(
        "/api/v1/appointments/",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_user_is_rejected(client: AsyncClient) -> None:
    token = create_access_token(uuid4())

    response = await client.get(
        "/api/v1/appointments/",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "User not found or inactive"


@pytest.mark.asyncio
async def test_create_appointment(
    client: AsyncClient,
    receptionist_headers: dict,
    receptionist_user: dict,
    appointment_payload: dict,
) -> None:
    """Test creating an appointment."""
    data = await _create(client, appointment_payload, receptionist_headers)

    assert data["patient_name"] == "John Patient"
    assert data["status"]["code"] == "SCHEDULED"
    assert data["doctor"]["id"] == appointment_payload["doctor_id"]
    assert data["specialty"]["code"] == "CARDIOLOGY"
    assert data["created_by"] == receptionist_user["email"]
    assert "id" in data


@pytest.mark.asyncio
async def test_create_ignores_client_status(
    client: AsyncClient,
    admin_headers: dict,
    appointment_payload: dict,
) -> None:
    data = await _create(client, {**appointment_payload, "status": "COMPLETED"}, admin_headers)
    assert data["status"]["code"] == "SCHEDULED"


@pytest.mark.asyncio
async def test_create_in_past_is_rejected(
    client: AsyncClient,
    admin_headers: dict,
    appointment_payload: dict,
) -> None:
    past = (datetime.now(UTC) - timedelta(hours=1)).isoformat()

    response = await client.post(
        "/api/v1/appointments/",
        json={**appointment_payload, "scheduled_at": past},
        headers=admin_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "BusinessRuleViolation"
    assert body["message"] == "Scheduled date must be in the future"


@pytest.mark.asyncio
async def test_create_validation_error(
    client: AsyncClient,
    admin_headers: dict,
    appointment_payload: dict,
) -> None:
    response = await client.post(
        "/api/v1/appointments/",
        json={**appointment_payload, "patient_name": "  a "},
        headers=admin_headers,
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["details"]


@pytest.mark.asyncio
async def test_get_and_list_appointments(
    client: AsyncClient,
    admin_headers: dict,
    doctor_user: dict,
    appointment_payload: dict,
) -> None:
    created = await _create(client, appointment_payload, admin_headers)

    response = await client.get(f"/api/v1/appointments/{created['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == created

    response = await client.get(
        "/api/v1/appointments/",
        params={"status": "scheduled", "doctor_id": str(doctor_user["id"]), "patient": "john"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [created["id"]]

    response = await client.get(
        "/api/v1/appointments/",
        params={"status": "CANCELED"},
        headers=admin_headers,
    )
    assert response.json() == []


@pytest.mark.asyncio
async def test_get_missing_appointment(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.get(f"/api/v1/appointments/{uuid4()}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"].startswith("Appointment not found with id:")


@pytest.mark.asyncio
async def test_doctor_workflow(
    client: AsyncClient,
    receptionist_headers: dict,
    doctor_headers: dict,
    appointment_payload: dict,
) -> None:
    created = await _create(client, appointment_payload, receptionist_headers)
    url = f"/api/v1/appointments/{created['id']}"

    response = await client.put(url, json={"status_code": "IN_PROGRESS"}, headers=receptionist_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Only doctors can set status to IN_PROGRESS"

    response = await client.put(url, json={"status_code": "in_progress"}, headers=doctor_headers)
    assert response.status_code == 200
    assert response.json()["status"]["code"] == "IN_PROGRESS"

    response = await client.put(url, json={"status_code": "COMPLETED"}, headers=doctor_headers)
    assert response.status_code == 200

    response = await client.put(
        url,
        json={"status_code": "COMPLETED", "notes": "Amended"},
        headers=doctor_headers,
    )
    assert response.status_code == 400
    assert "immutable" in response.json()["message"]


@pytest.mark.asyncio
async def test_update_requires_status_code(
    client: AsyncClient,
    admin_headers: dict,
    appointment_payload: dict,
) -> None:
    created = await _create(client, appointment_payload, admin_headers)

    response = await client.put(
        f"/api/v1/appointments/{created['id']}",
        json={"notes": "No status"},
        headers=admin_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_appointment(
    client: AsyncClient,
    admin_headers: dict,
    receptionist_headers: dict,
    appointment_payload: dict,
    publisher,
    transport,
) -> None:
    created = await _create(client, appointment_payload, admin_headers)
    url = f"/api/v1/appointments/{created['id']}"

    response = await client.delete(url, headers=receptionist_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Only administrators can delete appointments"

    response = await client.delete(url, headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(url, headers=admin_headers)
    assert response.status_code == 404

    await publisher.flush()
    assert [event.event_type.value for _, event in transport.sent] == ["CREATED", "DELETED"]


@pytest.mark.asyncio
async def test_status_catalog_endpoints(
    client: AsyncClient,
    admin_headers: dict,
    receptionist_headers: dict,
    catalogs: dict,
) -> None:
    response = await client.get("/api/v1/statuses/", headers=receptionist_headers)
    assert response.status_code == 200
    assert [item["code"] for item in response.json()] == [
        "SCHEDULED",
        "IN_PROGRESS",
        "COMPLETED",
        "CANCELED",
    ]

    response = await client.get("/api/v1/statuses/completed", headers=receptionist_headers)
    assert response.status_code == 200
    assert response.json()["code"] == "COMPLETED"

    new_status = {"code": "no_show", "description": "Patient did not attend"}
    response = await client.post("/api/v1/statuses/", json=new_status, headers=receptionist_headers)
    assert response.status_code == 400

    response = await client.post("/api/v1/statuses/", json=new_status, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["code"] == "NO_SHOW"

    response = await client.post("/api/v1/statuses/", json=new_status, headers=admin_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_specialties(client: AsyncClient, admin_headers: dict, catalogs: dict) -> None:
    response = await client.get("/api/v1/specialties/", headers=admin_headers)

    assert response.status_code == 200
    assert "CARDIOLOGY" in [item["code"] for item in response.json()]
