from sqlalchemy import select
from sqlalchemy.orm import joinedload

from app.craftops.db.models import RawMaterial, UserInventory


class UserInventoryRepository:
    def __init__(self, db):
        self.db = db

    def get_for_update(self, user_id, raw_material_id: int) -> UserInventory | None:
        return (
            self.db.execute(
                select(UserInventory)
                .where(UserInventory.user_id == user_id, UserInventory.raw_material_id == raw_material_id)
                .with_for_update()
            )
            .scalars()
            .first()
        )

    def list_for_user(self, user_id) -> list[UserInventory]:
        stmt = (
            select(UserInventory)
            .join(RawMaterial, RawMaterial.id == UserInventory.raw_material_id)
            .where(UserInventory.user_id == user_id)
            .options(joinedload(UserInventory.raw_material), joinedload(UserInventory.user))
            .order_by(RawMaterial.name.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def add(self, row: UserInventory) -> UserInventory:
        self.db.add(row)
        self.db.flush()
        return row

    def delete(self, row: UserInventory) -> None:
        self.db.delete(row)
