import logging
from decimal import Decimal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException

from app.craftops.core.error_catalog import AppError, ErrorCatalog, ErrorDefinition
from app.craftops.core.metrics import metrics

logger = logging.getLogger("craftops.errors")

_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _set_error_context(request: Request, code: str, exc: Exception | None = None) -> None:
    request.state.error_code = code
    if exc is not None:
        request.state.error_class = exc.__class__.__name__


def _is_lock_timeout(exc: Exception) -> bool:
    if isinstance(exc, OperationalError):
        message = str(exc).lower()
        return any(
            token in message
            for token in (
                "lock timeout",
                "deadlock detected",
                "database is locked",
                "could not obtain lock",
            )
        )
    return False


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def _json_safe(value):
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def _validation_error_details(exc: RequestValidationError) -> dict:
    errors = []
    for error in exc.errors():
        loc = list(error.get("loc", []))
        field = ".".join(str(item) for item in loc if item not in {"body", "query", "path", "header"}) or None
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "validation_error"),
                "loc": loc,
                "input": _json_safe(error.get("input")),
            }
        )
    return {"errors": errors}


def _first_validation_message(details: dict) -> str:
    errors = details.get("errors") or []
    if not errors:
        return ErrorCatalog.VALIDATION_ERROR.message
    first = errors[0]
    if first["field"]:
        return f"{first['field']}: {first['message']}"
    return first["message"]


def error_response(code: str, message: str, details: object, trace_id: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "code": code,
            "error": message,
            "details": details,
            "trace_id": trace_id,
        },
    )


def _catalog_response(request: Request, definition: ErrorDefinition, exc: Exception, details: object) -> JSONResponse:
    _set_error_context(request, definition.code, exc)
    return error_response(
        code=definition.code,
        message=definition.message,
        details=details,
        trace_id=_trace_id(request),
        status_code=definition.status_code,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        _set_error_context(request, exc.error.code, exc)
        return error_response(
            code=exc.error.code,
            message=exc.message,
            details=_json_safe(exc.details),
            trace_id=_trace_id(request),
            status_code=exc.error.status_code,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        _set_error_context(request, code, exc)
        return error_response(
            code=code,
            message=str(exc.detail) if exc.detail is not None else "HTTP error",
            details=None,
            trace_id=_trace_id(request),
            status_code=exc.status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = _validation_error_details(exc)
        _set_error_context(request, ErrorCatalog.VALIDATION_ERROR.code, exc)
        return error_response(
            code=ErrorCatalog.VALIDATION_ERROR.code,
            message=_first_validation_message(details),
            details=details,
            trace_id=_trace_id(request),
            status_code=ErrorCatalog.VALIDATION_ERROR.status_code,
        )

    @app.exception_handler(StaleDataError)
    async def stale_data_handler(request: Request, exc: StaleDataError):
        metrics.increment_stale_write()
        logger.warning("Stale write rejected: %s", exc)
        return _catalog_response(
            request,
            ErrorCatalog.STALE_TRANSFER_VERSION,
            exc,
            {"type": exc.__class__.__name__},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        if _is_lock_timeout(exc):
            metrics.increment_lock_wait_timeout()
            logger.warning("Lock wait timeout on %s %s", request.method, request.url.path)
            return _catalog_response(request, ErrorCatalog.LOCK_TIMEOUT, exc, {"type": exc.__class__.__name__})
        logger.exception(
            "Unhandled error on %s %s (trace_id=%s)",
            request.method,
            request.url.path,
            _trace_id(request),
        )
        return _catalog_response(request, ErrorCatalog.INTERNAL_ERROR, exc, {"type": exc.__class__.__name__})
