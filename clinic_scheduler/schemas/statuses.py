"""Appointment status catalog schemas."""

from pydantic import BaseModel, Field, field_validator


class StatusCode:
    """Codes the lifecycle engine gives behavioural meaning to."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    INITIAL = SCHEDULED
    TERMINAL = COMPLETED
    CLINICAL = frozenset({IN_PROGRESS, COMPLETED})


class StatusCreate(BaseModel):
    """Schema for extending the status catalog."""

    code: str = Field(..., min_length=1, max_length=50, pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    description: str = Field(..., min_length=1, max_length=100)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Catalog codes are stored upper case."""
        return v.upper()


class StatusResponse(BaseModel):
    """Schema for status response."""

    id: int
    code: str
    description: str

    model_config = {"from_attributes": True}
