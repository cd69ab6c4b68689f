import os
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("EVENTS_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from clinic_scheduler.core.actor import Actor, UserRole
from clinic_scheduler.core.security import create_access_token
from clinic_scheduler.database import get_db
from clinic_scheduler.main import app
from clinic_scheduler.models import metadata
from clinic_scheduler.schemas.appointments import AppointmentCreate
from clinic_scheduler.schemas.events import AppointmentEvent
from clinic_scheduler.schemas.users import UserCreate
from clinic_scheduler.services.event_publisher import (
    AppointmentEventPublisher,
    get_event_publisher,
)
from clinic_scheduler.services.specialty_service import SpecialtyService
from clinic_scheduler.services.status_catalog import StatusCatalog
from clinic_scheduler.services.user_service import UserService, actor_from_user

# In-memory SQLite unless a dedicated test database is configured
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


class RecordingTransport:
    """Transport double that keeps every (stream, event) it is asked to send."""

    def __init__(self, fail: bool = False):
        self.sent: list[tuple[str, AppointmentEvent]] = []
        self.fail = fail

    async def send(self, stream: str, event: AppointmentEvent) -> str | None:
        if self.fail:
            raise ConnectionError("transport unavailable")
        self.sent.append((stream, event))
        return f"{len(self.sent)}-0"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh schema."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest_asyncio.fixture
async def publisher(
    transport: RecordingTransport,
) -> AsyncGenerator[AppointmentEventPublisher, None]:
    """Running publisher that writes to the recording transport."""
    event_publisher = AppointmentEventPublisher(
        transport,
        enabled=True,
        stream_prefix="test-events",
        partitions=4,
        queue_size=100,
    )
    event_publisher.start()
    yield event_publisher
    await event_publisher.stop()


@pytest_asyncio.fixture
async def catalogs(db_session: AsyncSession) -> dict:
    """Seed statuses and specialties; returns the specialty used by tests."""
    await StatusCatalog(db_session).ensure_defaults()
    specialties = SpecialtyService(db_session)
    await specialties.ensure_defaults()
    return await specialties.get_by_code("CARDIOLOGY")


async def _create_user(db: AsyncSession, name: str, email: str, role: UserRole) -> dict:
    return await UserService(db).create_user(UserCreate(name=name, email=email, role=role))


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> dict:
    return await _create_user(db_session, "Alice Admin", "alice@clinic.com", UserRole.ADMIN)


@pytest_asyncio.fixture
async def doctor_user(db_session: AsyncSession) -> dict:
    return await _create_user(db_session, "Dr. Gregory House", "house@clinic.com", UserRole.DOCTOR)


@pytest_asyncio.fixture
async def other_doctor_user(db_session: AsyncSession) -> dict:
    return await _create_user(db_session, "Dr. Lisa Cuddy", "cuddy@clinic.com", UserRole.DOCTOR)


@pytest_asyncio.fixture
async def receptionist_user(db_session: AsyncSession) -> dict:
    return await _create_user(db_session, "Rita Desk", "rita@clinic.com", UserRole.RECEPTIONIST)


@pytest.fixture
def admin(admin_user: dict) -> Actor:
    return actor_from_user(admin_user)


@pytest.fixture
def doctor(doctor_user: dict) -> Actor:
    return actor_from_user(doctor_user)


@pytest.fixture
def other_doctor(other_doctor_user: dict) -> Actor:
    return actor_from_user(other_doctor_user)


@pytest.fixture
def receptionist(receptionist_user: dict) -> Actor:
    return actor_from_user(receptionist_user)


@pytest.fixture
def tomorrow() -> datetime:
    return (datetime.now(UTC) + timedelta(days=1)).replace(microsecond=0)


@pytest.fixture
def make_appointment(
    doctor_user: dict,
    catalogs: dict,
    tomorrow: datetime,
) -> Callable[..., AppointmentCreate]:
    """Factory for valid creation requests assigned to ``doctor_user``."""

    def _make(**overrides) -> AppointmentCreate:
        data = {
            "patient_name": "John Patient",
            "doctor_id": doctor_user["id"],
            "specialty_id": catalogs["id"],
            "scheduled_at": tomorrow,
            "notes": "Follow-up visit",
        }
        data.update(overrides)
        return AppointmentCreate(**data)

    return _make


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    publisher: AppointmentEventPublisher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: publisher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def _auth_headers(user: dict) -> dict:
    token = create_access_token(user["id"], expires_delta=timedelta(minutes=30), email=user["email"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: dict) -> dict:
    return _auth_headers(admin_user)


@pytest.fixture
def doctor_headers(doctor_user: dict) -> dict:
    return _auth_headers(doctor_user)


@pytest.fixture
def receptionist_headers(receptionist_user: dict) -> dict:
    return _auth_headers(receptionist_user)
