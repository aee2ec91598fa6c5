from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.craftops.core.error_catalog import AppError, ErrorCatalog
from app.craftops.db.models import UserInventory
from app.craftops.db.session import get_db
from app.craftops.repos.raw_materials import RawMaterialRepository
from app.craftops.repos.user_inventory import UserInventoryRepository
from app.craftops.repos.users import UserRepository
from app.craftops.schemas.inventory import UserInventoryAdjustRequest, UserInventoryResponse

router = APIRouter()


@router.get("/api/user-inventory", response_model=list[UserInventoryResponse])
def list_user_inventory(user_id: UUID | None = Query(default=None, alias="userId"), db=Depends(get_db)):
    if user_id is None:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, message="userId is required")
    rows = UserInventoryRepository(db).list_for_user(user_id)
    return [UserInventoryResponse.model_validate(row) for row in rows]


@router.post("/api/user-inventory", response_model=UserInventoryResponse)
def adjust_user_inventory(payload: UserInventoryAdjustRequest, db=Depends(get_db)):
    repo = UserInventoryRepository(db)
    row = repo.get_for_update(payload.user_id, payload.raw_material_id)
    if row is None:
        if payload.action != "ADD":
            raise AppError(ErrorCatalog.VALIDATION_ERROR, message="Cannot subtract from non-existent inventory item")
        if UserRepository(db).get_by_id(payload.user_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, message="User not found")
        raw_material = RawMaterialRepository(db).get(payload.raw_material_id)
        if raw_material is None:
            raise AppError(ErrorCatalog.NOT_FOUND, message="Raw material not found")
        row = repo.add(
            UserInventory(
                user_id=payload.user_id,
                raw_material_id=payload.raw_material_id,
                quantity=payload.quantity,
                unit=raw_material.unit,
            )
        )
    elif payload.action == "ADD":
        row.quantity = row.quantity + payload.quantity
    elif row.quantity < payload.quantity:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            message="Cannot subtract more than the user holds",
            details={"available": row.quantity, "requested": payload.quantity},
        )
    else:
        row.quantity = row.quantity - payload.quantity
        if row.quantity <= 0:
            # Emptied holdings are removed, matching transfer deletion.
            emptied = UserInventoryResponse.model_validate(row)
            repo.delete(row)
            db.commit()
            return emptied
    db.commit()
    db.refresh(row)
    return UserInventoryResponse.model_validate(row)
