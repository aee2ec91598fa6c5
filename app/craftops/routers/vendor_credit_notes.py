from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.craftops.db.session import get_db
from app.craftops.schemas.base import MessageResponse
from app.craftops.schemas.credit_notes import (
    CounterIssueResponse,
    CounterPeekResponse,
    CounterSyncResponse,
    CreditNoteCreateRequest,
    CreditNoteResponse,
    CreditNoteUpdateRequest,
)
from app.craftops.services.credit_note_counter import CreditNoteCounterService
from app.craftops.services.credit_notes import CreditNoteCreate, CreditNoteService, CreditNoteUpdate

router = APIRouter()


def _service(request: Request, db) -> CreditNoteService:
    return CreditNoteService(db, trace_id=getattr(request.state, "trace_id", "") or None)


@router.get("/api/vendor-credit-notes", response_model=list[CreditNoteResponse])
def list_credit_notes(
    request: Request,
    search: str | None = Query(default=None),
    status: str | None = Query(default=None),
    vendor_id: int | None = Query(default=None, alias="vendorId"),
    db=Depends(get_db),
):
    rows = _service(request, db).list_notes(search=search, status=status, vendor_id=vendor_id)
    return [CreditNoteResponse.model_validate(row) for row in rows]


@router.post("/api/vendor-credit-notes", response_model=CreditNoteResponse, status_code=201)
def create_credit_note(request: Request, payload: CreditNoteCreateRequest, db=Depends(get_db)):
    note = _service(request, db).create(
        CreditNoteCreate(
            vendor_id=payload.vendor_id,
            reason=payload.reason,
            amount=payload.amount,
            credit_note_number=payload.credit_note_number,
            bill_number=payload.bill_number,
            tax_amount=payload.tax_amount,
            notes=payload.notes,
            status=payload.status,
        )
    )
    return CreditNoteResponse.model_validate(note)


@router.put("/api/vendor-credit-notes", response_model=CreditNoteResponse)
def update_credit_note(request: Request, payload: CreditNoteUpdateRequest, db=Depends(get_db)):
    note = _service(request, db).update(
        CreditNoteUpdate(
            id=payload.id,
            status=payload.status,
            notes=payload.notes,
            notes_set="notes" in payload.model_fields_set,
            applied_to_bill=payload.applied_to_bill,
            applied_bill_id=payload.applied_bill_id,
        )
    )
    return CreditNoteResponse.model_validate(note)


@router.delete("/api/vendor-credit-notes", response_model=MessageResponse)
def delete_credit_note(
    request: Request,
    credit_note_id: UUID | None = Query(default=None, alias="id"),
    db=Depends(get_db),
):
    _service(request, db).delete(credit_note_id)
    return MessageResponse(message="Credit note deleted successfully")


@router.get("/api/vendor-credit-note-counter", response_model=CounterPeekResponse)
def peek_credit_note_counter(db=Depends(get_db)):
    peek = CreditNoteCounterService(db).peek()
    return CounterPeekResponse(
        current_number=peek.current_number,
        next_number=peek.next_number,
        credit_note_number=peek.credit_note_number,
        financial_year=peek.financial_year,
    )


@router.post("/api/vendor-credit-note-counter", response_model=CounterIssueResponse)
def issue_credit_note_number(db=Depends(get_db)):
    issued = CreditNoteCounterService(db).next_number()
    return CounterIssueResponse(
        credit_note_number=issued.credit_note_number,
        next_number=issued.next_number,
        financial_year=issued.financial_year,
    )


@router.patch("/api/vendor-credit-note-counter", response_model=CounterSyncResponse)
def sync_credit_note_counter(db=Depends(get_db)):
    service = CreditNoteCounterService(db)
    last_number = service.sync()
    return CounterSyncResponse(
        message="Counter synced successfully",
        last_number=last_number,
        financial_year=service.financial_year,
    )
