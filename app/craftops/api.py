from fastapi import APIRouter

from app.craftops.core.config import settings
from app.craftops.routers.health import router as health_router
from app.craftops.routers.metrics import router as metrics_router
from app.craftops.routers.raw_materials import router as raw_materials_router
from app.craftops.routers.transfers import router as transfers_router
from app.craftops.routers.user_inventory import router as user_inventory_router
from app.craftops.routers.users import router as users_router
from app.craftops.routers.vendor_credit_notes import router as vendor_credit_notes_router
from app.craftops.routers.vendors import router as vendors_router
from app.craftops.schemas.errors import ApiErrorResponse, ApiValidationErrorResponse

ERROR_RESPONSES = {
    400: {"model": ApiValidationErrorResponse},
    404: {"model": ApiErrorResponse},
    409: {"model": ApiErrorResponse},
}

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(users_router, tags=["users"], responses=ERROR_RESPONSES)
api_router.include_router(raw_materials_router, tags=["raw-materials"], responses=ERROR_RESPONSES)
api_router.include_router(transfers_router, tags=["raw-material-transfers"], responses=ERROR_RESPONSES)
api_router.include_router(user_inventory_router, tags=["user-inventory"], responses=ERROR_RESPONSES)
api_router.include_router(vendors_router, tags=["vendors"], responses=ERROR_RESPONSES)
api_router.include_router(vendor_credit_notes_router, tags=["vendor-credit-notes"], responses=ERROR_RESPONSES)
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
