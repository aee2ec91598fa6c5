from datetime import datetime

from pydantic import Field

from app.craftops.schemas.base import CamelModel


class VendorCreateRequest(CamelModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    company_name: str | None = None
    gstin: str | None = None
    address: str | None = None
    opening_balance: float = 0
    credit_limit: float | None = Field(default=None, ge=0)


class VendorSummary(CamelModel):
    id: int
    name: str
    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    gstin: str | None = None


class VendorResponse(VendorSummary):
    address: str | None = None
    opening_balance: float
    credit_limit: float | None = None
    created_at: datetime
