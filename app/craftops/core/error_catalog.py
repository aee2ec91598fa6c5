from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_400_BAD_REQUEST,
    )
    INVALID_STATUS = ErrorDefinition(
        "INVALID_STATUS",
        "Invalid status",
        status.HTTP_400_BAD_REQUEST,
    )
    RETURN_QUANTITY_EXCEEDED = ErrorDefinition(
        "RETURN_QUANTITY_EXCEEDED",
        "Return quantity exceeds issued quantity",
        status.HTTP_400_BAD_REQUEST,
    )
    INSUFFICIENT_STOCK = ErrorDefinition(
        "INSUFFICIENT_STOCK",
        "Insufficient stock",
        status.HTTP_400_BAD_REQUEST,
    )
    DUPLICATE_VALUE = ErrorDefinition(
        "DUPLICATE_VALUE",
        "Value already exists",
        status.HTTP_400_BAD_REQUEST,
    )
    CREDIT_NOTE_NUMBER_EXISTS = ErrorDefinition(
        "CREDIT_NOTE_NUMBER_EXISTS",
        "Credit note number already exists",
        status.HTTP_400_BAD_REQUEST,
    )
    CREDIT_NOTE_NOT_DRAFT = ErrorDefinition(
        "CREDIT_NOTE_NOT_DRAFT",
        "Only DRAFT credit notes can be deleted",
        status.HTTP_400_BAD_REQUEST,
    )
    NOT_FOUND = ErrorDefinition(
        "NOT_FOUND",
        "Resource not found",
        status.HTTP_404_NOT_FOUND,
    )
    TRANSITION_NOT_ALLOWED = ErrorDefinition(
        "TRANSITION_NOT_ALLOWED",
        "Status transition not allowed",
        status.HTTP_409_CONFLICT,
    )
    STALE_TRANSFER_VERSION = ErrorDefinition(
        "STALE_TRANSFER_VERSION",
        "Transfer was modified by another request",
        status.HTTP_409_CONFLICT,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, message: str | None = None, details: object | None = None):
        self.error = error
        self.message = message or error.message
        self.details = details
        super().__init__(self.message)
