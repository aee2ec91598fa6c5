from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass

from app.craftops.core.config import settings
from app.craftops.core.error_catalog import AppError, ErrorCatalog
from app.craftops.core.logging import log_json
from app.craftops.core.metrics import metrics
from app.craftops.db.models import RawMaterialTransfer, UserInventory
from app.craftops.repos.raw_materials import RawMaterialRepository
from app.craftops.repos.transfers import TransferQueryFilters, TransferRepository
from app.craftops.repos.user_inventory import UserInventoryRepository
from app.craftops.repos.users import UserRepository
from app.craftops.services.audit import AuditEventPayload, AuditService
from app.craftops.services.transfer_workflow import (
    TransferState,
    TransferStatus,
    TransitionRequest,
    parse_status_filter,
    parse_target_status,
    plan_reversal,
    plan_transition,
)

logger = logging.getLogger("craftops.transfers")


@dataclass(frozen=True)
class IssueItem:
    raw_material_id: int | None
    quantity_issued: float | None


def _transfer_not_found(transfer_id: int) -> AppError:
    return AppError(ErrorCatalog.NOT_FOUND, message="Transfer not found", details={"id": transfer_id})


def _snapshot(transfer: RawMaterialTransfer) -> dict:
    return {
        "status": transfer.status,
        "quantity_issued": transfer.quantity_issued,
        "quantity_approved": transfer.quantity_approved,
        "quantity_rejected": transfer.quantity_rejected,
        "version": transfer.version,
    }


class TransferService:
    def __init__(self, db, *, trace_id: str | None = None, strict_transitions: bool | None = None):
        self.db = db
        self.trace_id = trace_id
        self.strict = settings.TRANSFER_STRICT_TRANSITIONS if strict_transitions is None else strict_transitions
        self.transfers = TransferRepository(db)
        self.raw_materials = RawMaterialRepository(db)
        self.inventory = UserInventoryRepository(db)
        self.users = UserRepository(db)

    @contextmanager
    def _atomic(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _state(self, transfer: RawMaterialTransfer) -> TransferState:
        unit = transfer.raw_material.unit if transfer.raw_material else None
        return TransferState(
            status=TransferStatus(transfer.status),
            quantity_issued=transfer.quantity_issued,
            unit=unit or settings.DEFAULT_MATERIAL_UNIT,
            rejection_images=tuple(transfer.rejection_images or ()),
        )

    def _audit(self, action: str, transfer_id: int, before: dict | None, after: dict | None, **metadata) -> None:
        AuditService(self.db).record_event(
            AuditEventPayload(
                trace_id=self.trace_id,
                action=action,
                entity_type="raw_material_transfer",
                entity_id=str(transfer_id),
                before=before,
                after=after,
                metadata=metadata or None,
            )
        )

    def list_transfers(self, *, status: str | None = None, user_id: str | None = None) -> list[RawMaterialTransfer]:
        if status:
            status = parse_status_filter(status).value
        return self.transfers.list_transfers(TransferQueryFilters(status=status, user_id=user_id))

    def get_transfer(self, transfer_id: int) -> RawMaterialTransfer:
        transfer = self.transfers.get_transfer(transfer_id)
        if transfer is None:
            raise _transfer_not_found(transfer_id)
        return transfer

    def issue(self, *, user_id, items: list[IssueItem], notes: str | None = None) -> list[RawMaterialTransfer]:
        """Create one SENT transfer per item and take the stock out of the central pool."""
        if not user_id or not items:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                message="User ID and at least one transfer item are required",
            )
        for item in items:
            if not item.raw_material_id or item.quantity_issued is None or item.quantity_issued <= 0:
                raise AppError(
                    ErrorCatalog.VALIDATION_ERROR,
                    message="Each item must have a valid raw material ID and quantity",
                )
        if self.users.get_by_id(user_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, message="User not found", details={"userId": str(user_id)})

        requested: dict[int, float] = defaultdict(float)
        for item in items:
            requested[item.raw_material_id] += item.quantity_issued
        for raw_material_id, qty in requested.items():
            raw_material = self.raw_materials.get(raw_material_id)
            if raw_material is None:
                raise AppError(
                    ErrorCatalog.NOT_FOUND,
                    message=f"Raw material with ID {raw_material_id} not found",
                    details={"rawMaterialId": raw_material_id},
                )
            if raw_material.quantity < qty:
                raise AppError(
                    ErrorCatalog.INSUFFICIENT_STOCK,
                    message=(
                        f"Insufficient stock for {raw_material.name}. "
                        f"Available: {raw_material.quantity:g}, Requested: {qty:g}"
                    ),
                    details={"rawMaterialId": raw_material_id, "available": raw_material.quantity, "requested": qty},
                )

        created_ids = []
        with self._atomic():
            for item in items:
                # Guarded decrement: a concurrent issue may have drained the stock since the check above.
                if not self.raw_materials.decrement_if_available(item.raw_material_id, item.quantity_issued):
                    raise AppError(
                        ErrorCatalog.INSUFFICIENT_STOCK,
                        message=f"Insufficient stock for raw material {item.raw_material_id}",
                        details={"rawMaterialId": item.raw_material_id, "requested": item.quantity_issued},
                    )
                transfer = self.transfers.add(
                    RawMaterialTransfer(
                        user_id=user_id,
                        raw_material_id=item.raw_material_id,
                        quantity_issued=item.quantity_issued,
                        quantity_approved=0,
                        quantity_rejected=0,
                        status=TransferStatus.SENT.value,
                        notes=notes,
                        rejection_images=[],
                    )
                )
                created_ids.append(transfer.id)

        log_json(
            logger,
            {
                "event": "transfers_issued",
                "trace_id": self.trace_id,
                "user_id": str(user_id),
                "transfer_ids": created_ids,
            },
        )
        for transfer_id in created_ids:
            self._audit("transfer.issue", transfer_id, None, {"status": TransferStatus.SENT.value})
        return self.transfers.get_many(created_ids)

    def _credit_user_inventory(self, transfer: RawMaterialTransfer, qty: float, unit: str) -> None:
        row = self.inventory.get_for_update(transfer.user_id, transfer.raw_material_id)
        if row is None:
            self.inventory.add(
                UserInventory(
                    user_id=transfer.user_id,
                    raw_material_id=transfer.raw_material_id,
                    quantity=qty,
                    unit=unit,
                )
            )
        else:
            row.quantity = row.quantity + qty

    def _debit_user_inventory(self, transfer: RawMaterialTransfer, qty: float) -> None:
        row = self.inventory.get_for_update(transfer.user_id, transfer.raw_material_id)
        if row is None:
            return
        if row.quantity <= qty:
            self.inventory.delete(row)
        else:
            row.quantity = row.quantity - qty

    def update_status(
        self,
        transfer_id: int,
        request: TransitionRequest,
        *,
        expected_version: int | None = None,
    ) -> RawMaterialTransfer:
        parse_target_status(request.status)
        with self._atomic():
            transfer = self.transfers.get_for_update(transfer_id)
            if transfer is None:
                raise _transfer_not_found(transfer_id)
            if expected_version is not None and expected_version != transfer.version:
                metrics.increment_stale_write()
                log_json(
                    logger,
                    {
                        "event": "transfer_stale_write_rejected",
                        "trace_id": self.trace_id,
                        "transfer_id": transfer_id,
                        "expected_version": expected_version,
                        "current_version": transfer.version,
                    },
                    level=logging.WARNING,
                )
                raise AppError(
                    ErrorCatalog.STALE_TRANSFER_VERSION,
                    details={"expectedVersion": expected_version, "currentVersion": transfer.version},
                )
            state = self._state(transfer)
            plan = plan_transition(state, request, strict=self.strict)
            before = _snapshot(transfer)

            transfer.status = plan.status.value
            for field_name, value in plan.updates.items():
                setattr(transfer, field_name, value)
            if plan.central_stock_delta > 0:
                self.raw_materials.increment(transfer.raw_material_id, plan.central_stock_delta)
            if plan.user_inventory_delta > 0:
                self._credit_user_inventory(transfer, plan.user_inventory_delta, state.unit)
            self.db.flush()
            after = _snapshot(transfer)

        metrics.increment_transfer_transition(plan.status.value)
        log_json(
            logger,
            {
                "event": "transfer_transition",
                "trace_id": self.trace_id,
                "transfer_id": transfer_id,
                "from": state.status.value,
                "to": plan.status.value,
                "central_stock_delta": plan.central_stock_delta,
                "user_inventory_delta": plan.user_inventory_delta,
            },
        )
        self._audit("transfer.update_status", transfer_id, before, after)
        return self.get_transfer(transfer_id)

    def delete(self, transfer_id: int) -> None:
        with self._atomic():
            transfer = self.transfers.get_for_update(transfer_id)
            if transfer is None:
                raise _transfer_not_found(transfer_id)
            state = self._state(transfer)
            plan = plan_reversal(state)
            before = _snapshot(transfer)
            if plan.user_inventory_delta < 0:
                self._debit_user_inventory(transfer, -plan.user_inventory_delta)
            if plan.central_stock_delta > 0:
                self.raw_materials.increment(transfer.raw_material_id, plan.central_stock_delta)
            self.transfers.delete(transfer)

        log_json(
            logger,
            {
                "event": "transfer_deleted",
                "trace_id": self.trace_id,
                "transfer_id": transfer_id,
                "status": state.status.value,
                "central_stock_delta": plan.central_stock_delta,
                "user_inventory_delta": plan.user_inventory_delta,
            },
        )
        self._audit("transfer.delete", transfer_id, before, None)
