"""Medical specialty schemas."""

from pydantic import BaseModel


class SpecialtyResponse(BaseModel):
    """Schema for specialty response."""

    id: int
    code: str
    name: str
    description: str | None = None

    model_config = {"from_attributes": True}
