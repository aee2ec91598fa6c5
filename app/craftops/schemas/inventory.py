from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from app.craftops.schemas.base import CamelModel
from app.craftops.schemas.raw_materials import RawMaterialResponse
from app.craftops.schemas.users import UserSummary


class UserInventoryAdjustRequest(CamelModel):
    user_id: UUID
    raw_material_id: int
    quantity: float = Field(gt=0)
    action: Literal["ADD", "SUBTRACT"] = "ADD"


class UserInventoryResponse(CamelModel):
    id: int
    user_id: UUID
    raw_material_id: int
    quantity: float
    unit: str
    created_at: datetime
    updated_at: datetime | None = None
    raw_material: RawMaterialResponse
    user: UserSummary
