from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.craftops.db.session import get_db
from app.craftops.schemas.base import MessageResponse
from app.craftops.schemas.transfers import (
    TransferIssueRequest,
    TransferResponse,
    TransferStatusUpdateRequest,
)
from app.craftops.services.transfer_workflow import TransitionRequest
from app.craftops.services.transfers import IssueItem, TransferService


router = APIRouter()


def _service(request: Request, db) -> TransferService:
    return TransferService(db, trace_id=getattr(request.state, "trace_id", "") or None)


@router.get("/api/raw-material-transfers", response_model=list[TransferResponse])
def list_transfers(
    request: Request,
    status: str | None = Query(default=None),
    user_id: UUID | None = Query(default=None, alias="userId"),
    db=Depends(get_db),
):
    rows = _service(request, db).list_transfers(status=status, user_id=user_id)
    return [TransferResponse.model_validate(row) for row in rows]


@router.post("/api/raw-material-transfers", response_model=list[TransferResponse], status_code=201)
def issue_transfers(request: Request, payload: TransferIssueRequest, db=Depends(get_db)):
    items = [
        IssueItem(raw_material_id=item.raw_material_id, quantity_issued=item.quantity_issued)
        for item in payload.items
    ]
    rows = _service(request, db).issue(user_id=payload.user_id, items=items, notes=payload.notes)
    return [TransferResponse.model_validate(row) for row in rows]


@router.get("/api/raw-material-transfers/{transfer_id}", response_model=TransferResponse)
def get_transfer_detail(transfer_id: int, request: Request, db=Depends(get_db)):
    transfer = _service(request, db).get_transfer(transfer_id)
    return TransferResponse.model_validate(transfer)


@router.put("/api/raw-material-transfers/{transfer_id}", response_model=TransferResponse)
def update_transfer_status(
    transfer_id: int,
    request: Request,
    payload: TransferStatusUpdateRequest,
    db=Depends(get_db),
):
    transition = TransitionRequest(
        status=payload.status,
        notes=payload.notes,
        quantity_returned=payload.quantity_returned,
        rejection_type=payload.rejection_type,
        rejection_images=payload.rejection_images,
        rejection_reason=payload.rejection_reason,
    )
    transfer = _service(request, db).update_status(
        transfer_id,
        transition,
        expected_version=payload.expected_version,
    )
    return TransferResponse.model_validate(transfer)


@router.delete("/api/raw-material-transfers/{transfer_id}", response_model=MessageResponse)
def delete_transfer(transfer_id: int, request: Request, db=Depends(get_db)):
    _service(request, db).delete(transfer_id)
    return MessageResponse(message="Transfer deleted successfully")
