from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.craftops.schemas.base import CamelModel
from app.craftops.schemas.raw_materials import RawMaterialResponse
from app.craftops.schemas.users import UserSummary


class TransferIssueItem(CamelModel):
    raw_material_id: int | None = None
    quantity_issued: float | None = None


class TransferIssueRequest(CamelModel):
    user_id: UUID | None = None
    items: list[TransferIssueItem] = []
    notes: str | None = None


class TransferStatusUpdateRequest(CamelModel):
    status: str | None = None
    notes: str | None = None
    quantity_returned: float | None = None
    rejection_type: str | None = None
    rejection_images: list[str] | None = None
    rejection_reason: str | None = None
    expected_version: int | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "RETURNED",
                "quantityReturned": 4,
                "rejectionType": "Damaged",
                "rejectionImages": ["https://example.com/crack.jpg"],
                "notes": "Four pieces cracked in transit",
            }
        }
    }


class TransferResponse(CamelModel):
    id: int
    user_id: UUID
    raw_material_id: int
    quantity_issued: float
    quantity_approved: float
    quantity_rejected: float
    status: str
    notes: str | None = None
    rejection_reason: str | None = None
    rejection_images: list[str] = []
    version: int
    created_at: datetime
    updated_at: datetime | None = None
    user: UserSummary
    raw_material: RawMaterialResponse
