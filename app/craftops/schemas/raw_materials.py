from datetime import datetime

from pydantic import Field

from app.craftops.schemas.base import CamelModel


class RawMaterialCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    quantity: float = Field(default=0, ge=0)
    unit: str | None = None


class RawMaterialResponse(CamelModel):
    id: int
    name: str
    quantity: float
    unit: str
    created_at: datetime
    updated_at: datetime | None = None
