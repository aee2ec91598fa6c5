from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from app.craftops.db.models import RawMaterialTransfer


@dataclass(frozen=True)
class TransferQueryFilters:
    status: str | None = None
    user_id: str | None = None


class TransferRepository:
    def __init__(self, db):
        self.db = db

    def _with_relations(self):
        return select(RawMaterialTransfer).options(
            joinedload(RawMaterialTransfer.user),
            joinedload(RawMaterialTransfer.raw_material),
        )

    def list_transfers(self, filters: TransferQueryFilters) -> list[RawMaterialTransfer]:
        query = self._with_relations()
        if filters.status:
            query = query.where(RawMaterialTransfer.status == filters.status)
        if filters.user_id:
            query = query.where(RawMaterialTransfer.user_id == filters.user_id)
        query = query.order_by(RawMaterialTransfer.created_at.desc(), RawMaterialTransfer.id.desc())
        return self.db.execute(query).scalars().all()

    def get_transfer(self, transfer_id: int) -> RawMaterialTransfer | None:
        return (
            self.db.execute(self._with_relations().where(RawMaterialTransfer.id == transfer_id))
            .scalars()
            .first()
        )

    def get_for_update(self, transfer_id: int) -> RawMaterialTransfer | None:
        return (
            self.db.execute(
                select(RawMaterialTransfer).where(RawMaterialTransfer.id == transfer_id).with_for_update()
            )
            .scalars()
            .first()
        )

    def get_many(self, transfer_ids: list[int]) -> list[RawMaterialTransfer]:
        query = self._with_relations().where(RawMaterialTransfer.id.in_(transfer_ids))
        return self.db.execute(query.order_by(RawMaterialTransfer.id.asc())).scalars().all()

    def add(self, transfer: RawMaterialTransfer) -> RawMaterialTransfer:
        self.db.add(transfer)
        self.db.flush()
        return transfer

    def delete(self, transfer: RawMaterialTransfer) -> None:
        self.db.delete(transfer)
