"""User schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from clinic_scheduler.core.actor import UserRole


class UserCreate(BaseModel):
    """Schema for creating a new user."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: UserRole


class UserResponse(BaseModel):
    """Schema for user response."""

    id: UUID
    name: str
    email: EmailStr
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class DoctorSummary(BaseModel):
    """Doctor as embedded in an appointment projection."""

    id: UUID
    name: str
    email: str
