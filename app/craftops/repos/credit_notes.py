from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.orm import joinedload

from app.craftops.db.models import Vendor, VendorCreditNote, VendorCreditNoteCounter


@dataclass(frozen=True)
class CreditNoteQueryFilters:
    search: str | None = None
    status: str | None = None
    vendor_id: int | None = None


class CreditNoteRepository:
    def __init__(self, db):
        self.db = db

    def list(self, filters: CreditNoteQueryFilters) -> list[VendorCreditNote]:
        stmt = (
            select(VendorCreditNote)
            .join(Vendor, Vendor.id == VendorCreditNote.vendor_id)
            .options(joinedload(VendorCreditNote.vendor))
        )
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            stmt = stmt.where(
                or_(
                    VendorCreditNote.credit_note_number.ilike(pattern),
                    VendorCreditNote.bill_number.ilike(pattern),
                    Vendor.name.ilike(pattern),
                    Vendor.company_name.ilike(pattern),
                )
            )
        if filters.status:
            stmt = stmt.where(VendorCreditNote.status == filters.status)
        if filters.vendor_id is not None:
            stmt = stmt.where(VendorCreditNote.vendor_id == filters.vendor_id)
        stmt = stmt.order_by(VendorCreditNote.issue_date.desc(), VendorCreditNote.created_at.desc())
        return self.db.execute(stmt).scalars().all()

    def get(self, credit_note_id) -> VendorCreditNote | None:
        stmt = (
            select(VendorCreditNote)
            .where(VendorCreditNote.id == credit_note_id)
            .options(joinedload(VendorCreditNote.vendor))
        )
        return self.db.execute(stmt).scalars().first()

    def get_by_number(self, credit_note_number: str) -> VendorCreditNote | None:
        stmt = select(VendorCreditNote).where(VendorCreditNote.credit_note_number == credit_note_number)
        return self.db.execute(stmt).scalars().first()

    def highest_number_with_prefix(self, prefix: str) -> str | None:
        stmt = (
            select(VendorCreditNote.credit_note_number)
            .where(VendorCreditNote.credit_note_number.startswith(prefix))
            .order_by(
                func.length(VendorCreditNote.credit_note_number).desc(),
                VendorCreditNote.credit_note_number.desc(),
            )
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def get_counter_for_update(self, financial_year: str) -> VendorCreditNoteCounter | None:
        stmt = (
            select(VendorCreditNoteCounter)
            .where(VendorCreditNoteCounter.financial_year == financial_year)
            .with_for_update()
        )
        return self.db.execute(stmt).scalars().first()
