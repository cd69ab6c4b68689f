"""Medical specialty lookup and seeding."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor
from clinic_scheduler.core.exceptions import NotFoundException
from clinic_scheduler.models.specialties import medical_specialties
from clinic_scheduler.repositories.soft_delete import SoftDeleteTable

logger = structlog.get_logger(__name__)

DEFAULT_SPECIALTIES: tuple[tuple[str, str, str], ...] = (
    ("GENERAL_PRACTICE", "General Practice", "Diagnosis and treatment of common conditions"),
    ("PEDIATRICS", "Pediatrics", "Care of children and adolescents"),
    ("CARDIOLOGY", "Cardiology", "Heart and cardiovascular system"),
    ("DERMATOLOGY", "Dermatology", "Skin, hair and nail conditions"),
    ("ORTHOPEDICS", "Orthopedics", "Musculoskeletal system"),
)

specialties = SoftDeleteTable(medical_specialties)


class SpecialtyService:
    """Service for specialty operations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def ensure_defaults(self, actor: Actor | None = None) -> list[str]:
        """Create missing default specialties; returns the codes created."""
        result = await self.db.execute(specialties.select_including_deleted(specialties.c.code))
        existing = set(result.scalars().all())

        created = []
        for code, name, description in DEFAULT_SPECIALTIES:
            if code in existing:
                continue
            await specialties.insert(
                self.db,
                {"code": code, "name": name, "description": description},
                actor,
            )
            created.append(code)

        await self.db.commit()
        if created:
            logger.info("specialties_created", codes=created)
        return created

    async def get_specialty(self, specialty_id: int) -> dict:
        """
        Get an active specialty by ID.

        Raises:
            NotFoundException: If the specialty is missing or soft-deleted
        """
        result = await self.db.execute(specialties.select().where(specialties.c.id == specialty_id))
        row = result.mappings().first()

        if not row:
            raise NotFoundException.for_field("Specialty", "id", specialty_id)

        return dict(row)

    async def get_by_code(self, code: str) -> dict:
        """Get an active specialty by code."""
        result = await self.db.execute(specialties.select().where(specialties.c.code == code))
        row = result.mappings().first()

        if not row:
            raise NotFoundException.for_field("Specialty", "code", code)

        return dict(row)

    async def list_active(self) -> list[dict]:
        """List non-deleted specialties."""
        result = await self.db.execute(specialties.select().order_by(specialties.c.name))
        return [dict(row) for row in result.mappings().all()]
