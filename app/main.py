from fastapi import FastAPI

from app.craftops.api import api_router
from app.craftops.core.config import settings
from app.craftops.core.errors import setup_exception_handlers
from app.craftops.core.logging import configure_logging
from app.craftops.middleware.observability import ObservabilityMiddleware
from app.craftops.middleware.trace import TraceIdMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
