from fastapi import APIRouter, Depends, Query

from app.craftops.core.error_catalog import AppError, ErrorCatalog
from app.craftops.db.models import Vendor
from app.craftops.db.session import get_db
from app.craftops.repos.vendors import VendorRepository
from app.craftops.schemas.vendors import VendorCreateRequest, VendorResponse

router = APIRouter()


@router.get("/api/vendors", response_model=list[VendorResponse])
def list_vendors(search: str | None = Query(default=None), db=Depends(get_db)):
    return [VendorResponse.model_validate(vendor) for vendor in VendorRepository(db).list(search=search)]


@router.post("/api/vendors", response_model=VendorResponse, status_code=201)
def create_vendor(payload: VendorCreateRequest, db=Depends(get_db)):
    if not payload.name or not payload.name.strip():
        raise AppError(ErrorCatalog.VALIDATION_ERROR, message="Vendor name is required")
    repo = VendorRepository(db)
    if payload.gstin and repo.find_by(gstin=payload.gstin) is not None:
        raise AppError(
            ErrorCatalog.DUPLICATE_VALUE,
            message="Vendor with this GSTIN already exists",
            details={"gstin": payload.gstin},
        )
    if payload.email and repo.find_by(email=payload.email) is not None:
        raise AppError(
            ErrorCatalog.DUPLICATE_VALUE,
            message="Vendor with this email already exists",
            details={"email": payload.email},
        )
    vendor = Vendor(
        name=payload.name.strip(),
        phone=payload.phone or None,
        email=payload.email or None,
        company_name=payload.company_name or None,
        gstin=payload.gstin or None,
        address=payload.address or None,
        opening_balance=payload.opening_balance or 0,
        credit_limit=payload.credit_limit,
    )
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    return VendorResponse.model_validate(vendor)
