"""Raw material transfer state machine.

Pure planning logic: given the stored state of a transfer and a requested
status change, work out which fields change on the transfer and how much
central stock (``RawMaterial.quantity``) and user inventory
(``UserInventory.quantity``) move. Nothing here touches the database; the
transfer service applies a plan inside a single transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from app.craftops.core.error_catalog import AppError, ErrorCatalog


class TransferStatus(str, Enum):
    SENT = "SENT"
    USED = "USED"
    RETURNED = "RETURNED"
    REPAIRING = "REPAIRING"
    FINISHED = "FINISHED"
    UNUSED = "UNUSED"
    CANCELLED = "CANCELLED"


# Targets accepted by the update endpoint, in the order they are reported.
UPDATABLE_STATUSES: tuple[TransferStatus, ...] = (
    TransferStatus.USED,
    TransferStatus.RETURNED,
    TransferStatus.CANCELLED,
    TransferStatus.REPAIRING,
    TransferStatus.FINISHED,
    TransferStatus.UNUSED,
)

ALLOWED_TRANSITIONS: dict[TransferStatus, frozenset[TransferStatus]] = {
    TransferStatus.SENT: frozenset(
        {TransferStatus.USED, TransferStatus.RETURNED, TransferStatus.UNUSED, TransferStatus.CANCELLED}
    ),
    TransferStatus.RETURNED: frozenset({TransferStatus.REPAIRING, TransferStatus.UNUSED}),
    TransferStatus.REPAIRING: frozenset({TransferStatus.FINISHED}),
    TransferStatus.USED: frozenset(),
    TransferStatus.FINISHED: frozenset(),
    TransferStatus.UNUSED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
}

DEFAULT_NOTES = {
    TransferStatus.USED: "Material approved and marked as used",
    TransferStatus.FINISHED: "Repair completed - materials returned to inventory",
    TransferStatus.REPAIRING: "Material under repair",
    TransferStatus.UNUSED: "Product is too damaged and cannot be repaired",
}
DEFAULT_UNUSED_REASON = "Product is too damaged"


@dataclass(frozen=True)
class TransferState:
    """Snapshot of the stored transfer fields the planner depends on."""

    status: TransferStatus
    quantity_issued: float
    unit: str
    rejection_images: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransitionRequest:
    status: str
    notes: str | None = None
    quantity_returned: float | None = None
    rejection_type: str | None = None
    rejection_images: list[str] | None = None
    rejection_reason: str | None = None


@dataclass(frozen=True)
class TransitionPlan:
    status: TransferStatus
    updates: dict = field(default_factory=dict)
    central_stock_delta: float = 0
    user_inventory_delta: float = 0


@dataclass(frozen=True)
class ReversalPlan:
    central_stock_delta: float = 0
    user_inventory_delta: float = 0


def valid_status_message() -> str:
    return f"Valid status is required ({', '.join(status.value for status in UPDATABLE_STATUSES)})"


def parse_target_status(value: str | None) -> TransferStatus:
    if value:
        for status in UPDATABLE_STATUSES:
            if status.value == value:
                return status
    raise AppError(
        ErrorCatalog.INVALID_STATUS,
        message=valid_status_message(),
        details={"allowed": [status.value for status in UPDATABLE_STATUSES]},
    )


def parse_status_filter(value: str) -> TransferStatus:
    try:
        return TransferStatus(value)
    except ValueError as exc:
        raise AppError(
            ErrorCatalog.INVALID_STATUS,
            message=f"Unknown transfer status: {value}",
            details={"allowed": [status.value for status in TransferStatus]},
        ) from exc


def is_transition_allowed(current: TransferStatus, target: TransferStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition_allowed(current: TransferStatus, target: TransferStatus) -> None:
    if is_transition_allowed(current, target):
        return
    allowed = sorted(status.value for status in ALLOWED_TRANSITIONS.get(current, frozenset()))
    raise AppError(
        ErrorCatalog.TRANSITION_NOT_ALLOWED,
        message=f"Cannot move transfer from {current.value} to {target.value}",
        details={"current": current.value, "target": target.value, "allowed": allowed},
    )


def _format_quantity(value: float) -> str:
    return f"{value:g}"


def _plan_returned(state: TransferState, request: TransitionRequest) -> TransitionPlan:
    return_qty = state.quantity_issued if request.quantity_returned is None else request.quantity_returned
    if return_qty < 0:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            message="quantityReturned must not be negative",
            details={"quantityReturned": return_qty},
        )
    if return_qty > state.quantity_issued:
        raise AppError(
            ErrorCatalog.RETURN_QUANTITY_EXCEEDED,
            message=f"Cannot return more than {_format_quantity(state.quantity_issued)} {state.unit}",
            details={"max": state.quantity_issued, "requested": return_qty},
        )
    approved_qty = state.quantity_issued - return_qty
    return TransitionPlan(
        status=TransferStatus.RETURNED,
        updates={
            "notes": request.notes,
            "quantity_rejected": return_qty,
            "quantity_approved": approved_qty,
            "rejection_reason": request.rejection_type,
            "rejection_images": list(request.rejection_images or []),
        },
        central_stock_delta=return_qty,
        user_inventory_delta=approved_qty,
    )


def plan_transition(
    state: TransferState,
    request: TransitionRequest,
    *,
    strict: bool = True,
) -> TransitionPlan:
    """Validate a status change and describe its effects.

    Raises ``AppError`` for an unknown target status, a transition outside
    ``ALLOWED_TRANSITIONS`` (only when ``strict``) or a return quantity
    larger than the issued quantity.
    """
    target = parse_target_status(request.status)
    if strict:
        ensure_transition_allowed(state.status, target)

    if target is TransferStatus.USED:
        return TransitionPlan(
            status=target,
            updates={
                "notes": request.notes or DEFAULT_NOTES[target],
                "quantity_approved": state.quantity_issued,
                "quantity_rejected": 0,
                "rejection_images": [],
            },
            user_inventory_delta=state.quantity_issued,
        )
    if target is TransferStatus.RETURNED:
        return _plan_returned(state, request)
    if target is TransferStatus.FINISHED:
        return TransitionPlan(
            status=target,
            updates={"notes": request.notes or DEFAULT_NOTES[target]},
            central_stock_delta=state.quantity_issued,
        )
    if target is TransferStatus.REPAIRING:
        return TransitionPlan(
            status=target,
            updates={"notes": request.notes or DEFAULT_NOTES[target]},
        )
    if target is TransferStatus.UNUSED:
        images = request.rejection_images if request.rejection_images is not None else list(state.rejection_images)
        return TransitionPlan(
            status=target,
            updates={
                "notes": request.notes or DEFAULT_NOTES[target],
                "rejection_reason": request.rejection_reason or DEFAULT_UNUSED_REASON,
                "quantity_rejected": state.quantity_issued,
                "quantity_approved": 0,
                "rejection_images": list(images),
            },
        )
    return TransitionPlan(
        status=TransferStatus.CANCELLED,
        updates={
            "notes": request.notes,
            "quantity_rejected": 0,
            "quantity_approved": 0,
            "rejection_images": [],
        },
    )


def plan_reversal(state: TransferState) -> ReversalPlan:
    """Counter changes that undo a transfer before its row is deleted.

    Only ``USED`` transfers still hold stock in a user's inventory. Every
    other status either never moved stock to the user or already settled it
    through its own transition.
    """
    if state.status is TransferStatus.USED:
        return ReversalPlan(
            central_stock_delta=state.quantity_issued,
            user_inventory_delta=-state.quantity_issued,
        )
    return ReversalPlan()
