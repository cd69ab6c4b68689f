"""Script to initialize the database and seed reference data."""

import asyncio

from clinic_scheduler.core.actor import UserRole
from clinic_scheduler.core.security import create_access_token
from clinic_scheduler.database import AsyncSessionLocal, engine
from clinic_scheduler.models import metadata
from clinic_scheduler.schemas.users import UserCreate
from clinic_scheduler.services.specialty_service import SpecialtyService
from clinic_scheduler.services.status_catalog import StatusCatalog
from clinic_scheduler.services.user_service import UserService

DEFAULT_STAFF: tuple[tuple[str, str, UserRole], ...] = (
    ("Administrator", "admin@clinicscheduler.com", UserRole.ADMIN),
    ("Dr. John Silva", "john.silva@clinicscheduler.com", UserRole.DOCTOR),
    ("Dr. Mary Santos", "mary.santos@clinicscheduler.com", UserRole.DOCTOR),
    ("Dr. Charles Oliver", "charles.oliver@clinicscheduler.com", UserRole.DOCTOR),
    ("Ann Costa", "ann.costa@clinicscheduler.com", UserRole.RECEPTIONIST),
    ("Peter Alves", "peter.alves@clinicscheduler.com", UserRole.RECEPTIONIST),
)


async def seed_staff(service: UserService) -> list[dict]:
    """Create default staff for every role that has nobody yet."""
    created = []
    for role in UserRole:
        if await service.list_by_role(role):
            continue
        for name, email, staff_role in DEFAULT_STAFF:
            if staff_role == role:
                created.append(
                    await service.create_user(UserCreate(name=name, email=email, role=role))
                )
    return created


async def init_db() -> None:
    """Create all tables, then seed catalogs and default staff."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    print("✓ Tables created")

    async with AsyncSessionLocal() as session:
        statuses = await StatusCatalog(session).ensure_defaults()
        specialties = await SpecialtyService(session).ensure_defaults()
        staff = await seed_staff(UserService(session))

    print(f"✓ Statuses created: {statuses or 'none'}")
    print(f"✓ Specialties created: {specialties or 'none'}")

    for user in staff:
        token = create_access_token(user["id"], email=user["email"], role=user["role"])
        print(f"✓ {user['role']:<12} {user['email']:<32} {token}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_db())
