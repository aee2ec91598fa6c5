from fastapi import APIRouter, Depends, Query

from app.craftops.core.config import settings
from app.craftops.core.error_catalog import AppError, ErrorCatalog
from app.craftops.db.models import RawMaterial
from app.craftops.db.session import get_db
from app.craftops.repos.raw_materials import RawMaterialRepository
from app.craftops.schemas.raw_materials import RawMaterialCreateRequest, RawMaterialResponse

router = APIRouter()


@router.get("/api/raw-materials", response_model=list[RawMaterialResponse])
def list_raw_materials(search: str | None = Query(default=None), db=Depends(get_db)):
    return [RawMaterialResponse.model_validate(row) for row in RawMaterialRepository(db).list(search=search)]


@router.post("/api/raw-materials", response_model=RawMaterialResponse, status_code=201)
def create_raw_material(payload: RawMaterialCreateRequest, db=Depends(get_db)):
    raw_material = RawMaterialRepository(db).add(
        RawMaterial(
            name=payload.name.strip(),
            quantity=payload.quantity,
            unit=payload.unit or settings.DEFAULT_MATERIAL_UNIT,
        )
    )
    db.commit()
    db.refresh(raw_material)
    return RawMaterialResponse.model_validate(raw_material)


@router.get("/api/raw-materials/{raw_material_id}", response_model=RawMaterialResponse)
def get_raw_material(raw_material_id: int, db=Depends(get_db)):
    raw_material = RawMaterialRepository(db).get(raw_material_id)
    if raw_material is None:
        raise AppError(ErrorCatalog.NOT_FOUND, message="Raw material not found", details={"id": raw_material_id})
    return RawMaterialResponse.model_validate(raw_material)
