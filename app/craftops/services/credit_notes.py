from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sqlalchemy.exc import IntegrityError

from app.craftops.core.error_catalog import AppError, ErrorCatalog
from app.craftops.core.logging import log_json
from app.craftops.db.models import VendorCreditNote
from app.craftops.repos.credit_notes import CreditNoteQueryFilters, CreditNoteRepository
from app.craftops.repos.vendors import VendorRepository
from app.craftops.services.audit import AuditEventPayload, AuditService

logger = logging.getLogger("craftops.credit_notes")


class CreditNoteStatus(str, Enum):
    DRAFT = "DRAFT"
    ISSUED = "ISSUED"
    APPLIED = "APPLIED"
    CANCELLED = "CANCELLED"


CREDIT_NOTE_TRANSITIONS: dict[CreditNoteStatus, frozenset[CreditNoteStatus]] = {
    CreditNoteStatus.DRAFT: frozenset({CreditNoteStatus.ISSUED}),
    CreditNoteStatus.ISSUED: frozenset({CreditNoteStatus.APPLIED, CreditNoteStatus.CANCELLED}),
    CreditNoteStatus.APPLIED: frozenset(),
    CreditNoteStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class CreditNoteCreate:
    vendor_id: int | None
    reason: str | None
    amount: float | None
    credit_note_number: str | None
    bill_number: str | None = None
    tax_amount: float | None = 0
    notes: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class CreditNoteUpdate:
    id: str | None
    status: str | None = None
    notes: str | None = None
    notes_set: bool = False
    applied_to_bill: bool | None = None
    applied_bill_id: str | None = None


def parse_credit_note_status(value: str) -> CreditNoteStatus:
    try:
        return CreditNoteStatus(value)
    except ValueError as exc:
        allowed = [status.value for status in CreditNoteStatus]
        raise AppError(
            ErrorCatalog.INVALID_STATUS,
            message=f"Invalid credit note status. Allowed: {', '.join(allowed)}",
            details={"allowed": allowed},
        ) from exc


def _not_found(credit_note_id) -> AppError:
    return AppError(ErrorCatalog.NOT_FOUND, message="Credit note not found", details={"id": str(credit_note_id)})


class CreditNoteService:
    def __init__(self, db, *, trace_id: str | None = None):
        self.db = db
        self.trace_id = trace_id
        self.repo = CreditNoteRepository(db)
        self.vendors = VendorRepository(db)

    def _audit(self, action: str, note_id, before: dict | None, after: dict | None) -> None:
        AuditService(self.db).record_event(
            AuditEventPayload(
                trace_id=self.trace_id,
                action=action,
                entity_type="vendor_credit_note",
                entity_id=str(note_id),
                before=before,
                after=after,
            )
        )

    def list_notes(self, *, search: str | None, status: str | None, vendor_id: int | None) -> list[VendorCreditNote]:
        if status:
            status = parse_credit_note_status(status).value
        return self.repo.list(CreditNoteQueryFilters(search=search, status=status, vendor_id=vendor_id))

    def create(self, payload: CreditNoteCreate) -> VendorCreditNote:
        if not payload.vendor_id or not payload.reason or not payload.amount or not payload.credit_note_number:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                message="Missing required fields: vendorId, reason, amount, and creditNoteNumber are required",
            )
        if payload.amount <= 0:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, message="Invalid amount", details={"amount": payload.amount})
        tax_amount = payload.tax_amount or 0
        if tax_amount < 0:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                message="Invalid tax amount",
                details={"taxAmount": tax_amount},
            )
        status = parse_credit_note_status(payload.status).value if payload.status else CreditNoteStatus.DRAFT.value

        if self.vendors.get(payload.vendor_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, message="Vendor not found", details={"vendorId": payload.vendor_id})
        if self.repo.get_by_number(payload.credit_note_number) is not None:
            raise AppError(
                ErrorCatalog.CREDIT_NOTE_NUMBER_EXISTS,
                details={"creditNoteNumber": payload.credit_note_number},
            )

        note = VendorCreditNote(
            vendor_id=payload.vendor_id,
            credit_note_number=payload.credit_note_number,
            bill_number=payload.bill_number or None,
            reason=payload.reason,
            amount=payload.amount,
            tax_amount=tax_amount,
            total_amount=payload.amount + tax_amount,
            notes=payload.notes or None,
            status=status,
        )
        self.db.add(note)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Unique constraint on credit_note_number; another request took it after the check above.
            self.db.rollback()
            raise AppError(
                ErrorCatalog.CREDIT_NOTE_NUMBER_EXISTS,
                details={"creditNoteNumber": payload.credit_note_number},
            ) from exc
        log_json(
            logger,
            {
                "event": "credit_note_created",
                "trace_id": self.trace_id,
                "credit_note_number": note.credit_note_number,
                "vendor_id": note.vendor_id,
            },
        )
        self._audit("credit_note.create", note.id, None, {"status": status, "total_amount": note.total_amount})
        return self.repo.get(note.id)

    def update(self, payload: CreditNoteUpdate) -> VendorCreditNote:
        if not payload.id:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, message="Credit note ID is required")
        target = parse_credit_note_status(payload.status) if payload.status else None

        note = self.repo.get(payload.id)
        if note is None:
            raise _not_found(payload.id)
        before = {"status": note.status, "applied_to_bill": note.applied_to_bill}

        if target is not None and target.value != note.status:
            current = CreditNoteStatus(note.status)
            if target not in CREDIT_NOTE_TRANSITIONS[current]:
                raise AppError(
                    ErrorCatalog.TRANSITION_NOT_ALLOWED,
                    message=f"Cannot move credit note from {current.value} to {target.value}",
                    details={"current": current.value, "target": target.value},
                )
            note.status = target.value
        if payload.notes_set:
            note.notes = payload.notes
        if payload.applied_to_bill is not None:
            note.applied_to_bill = payload.applied_to_bill
            if payload.applied_to_bill:
                note.applied_date = datetime.utcnow()
                if payload.applied_bill_id:
                    note.applied_bill_id = payload.applied_bill_id
            else:
                note.applied_date = None
                note.applied_bill_id = None
        self.db.commit()

        after = {"status": note.status, "applied_to_bill": note.applied_to_bill}
        log_json(logger, {"event": "credit_note_updated", "trace_id": self.trace_id, "id": str(note.id), **after})
        self._audit("credit_note.update", note.id, before, after)
        return self.repo.get(note.id)

    def delete(self, credit_note_id) -> None:
        if not credit_note_id:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, message="Credit note ID is required")
        note = self.repo.get(credit_note_id)
        if note is None:
            raise _not_found(credit_note_id)
        if note.status != CreditNoteStatus.DRAFT.value:
            raise AppError(ErrorCatalog.CREDIT_NOTE_NOT_DRAFT, details={"status": note.status})
        number = note.credit_note_number
        self.db.delete(note)
        self.db.commit()
        log_json(logger, {"event": "credit_note_deleted", "trace_id": self.trace_id, "credit_note_number": number})
        self._audit("credit_note.delete", credit_note_id, {"status": CreditNoteStatus.DRAFT.value}, None)
