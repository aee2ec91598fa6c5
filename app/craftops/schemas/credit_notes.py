from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.craftops.schemas.base import CamelModel
from app.craftops.schemas.vendors import VendorSummary


class CreditNoteCreateRequest(CamelModel):
    vendor_id: int | None = None
    bill_number: str | None = None
    reason: str | None = None
    amount: float | None = None
    tax_amount: float | None = 0
    notes: str | None = None
    status: str | None = None
    credit_note_number: str | None = None


class CreditNoteUpdateRequest(CamelModel):
    id: UUID | None = None
    status: str | None = None
    notes: str | None = None
    applied_to_bill: bool | None = None
    applied_bill_id: str | None = None


class CreditNoteResponse(CamelModel):
    id: UUID
    vendor_id: int
    credit_note_number: str
    bill_number: str | None = None
    reason: str
    amount: float
    tax_amount: float
    total_amount: float
    notes: str | None = None
    status: str
    issue_date: datetime
    applied_to_bill: bool
    applied_date: datetime | None = None
    applied_bill_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    vendor: VendorSummary


class CounterPeekResponse(CamelModel):
    current_number: int
    next_number: int
    credit_note_number: str
    financial_year: str


class CounterIssueResponse(CamelModel):
    credit_note_number: str
    next_number: int
    financial_year: str


class CounterSyncResponse(CamelModel):
    message: str
    last_number: int
    financial_year: str
