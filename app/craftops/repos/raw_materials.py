from sqlalchemy import select, update

from app.craftops.db.models import RawMaterial


class RawMaterialRepository:
    def __init__(self, db):
        self.db = db

    def get(self, raw_material_id: int) -> RawMaterial | None:
        return self.db.get(RawMaterial, raw_material_id)

    def get_for_update(self, raw_material_id: int) -> RawMaterial | None:
        return (
            self.db.execute(select(RawMaterial).where(RawMaterial.id == raw_material_id).with_for_update())
            .scalars()
            .first()
        )

    def list(self, *, search: str | None = None) -> list[RawMaterial]:
        stmt = select(RawMaterial)
        if search:
            stmt = stmt.where(RawMaterial.name.ilike(f"%{search.strip()}%"))
        return self.db.execute(stmt.order_by(RawMaterial.name.asc())).scalars().all()

    def add(self, raw_material: RawMaterial) -> RawMaterial:
        self.db.add(raw_material)
        self.db.flush()
        return raw_material

    def increment(self, raw_material_id: int, delta: float) -> None:
        self.db.execute(
            update(RawMaterial)
            .where(RawMaterial.id == raw_material_id)
            .values(quantity=RawMaterial.quantity + delta)
        )

    def decrement_if_available(self, raw_material_id: int, qty: float) -> bool:
        result = self.db.execute(
            update(RawMaterial)
            .where(RawMaterial.id == raw_material_id, RawMaterial.quantity >= qty)
            .values(quantity=RawMaterial.quantity - qty)
        )
        return result.rowcount == 1
