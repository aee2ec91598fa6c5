from __future__ import annotations

import json
import logging

from app.craftops.core.config import settings

# Request lines come from ObservabilityMiddleware; uvicorn's access log would duplicate them.
_QUIET_LOGGERS = ("uvicorn.access",)


def configure_logging() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(message)s")
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_json(logger: logging.Logger, payload: dict, *, level: int = logging.INFO) -> None:
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
