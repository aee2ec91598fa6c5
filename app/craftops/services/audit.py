import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app.craftops.db.models import AuditEvent
from app.craftops.repos.audit import AuditRepository

logger = logging.getLogger(__name__)


@dataclass
class AuditEventPayload:
    trace_id: str | None
    action: str
    entity_type: str
    entity_id: str | None
    before: dict | None
    after: dict | None
    metadata: dict | None = None
    result: str = "success"


class AuditService:
    """Best-effort audit logging.

    Runs after the business transaction has committed; a failed audit write
    is rolled back and logged without failing the request.
    """

    def __init__(self, db):
        self.db = db
        self.repo = AuditRepository(db)

    def record_event(self, payload: AuditEventPayload) -> None:
        try:
            event = AuditEvent(
                trace_id=payload.trace_id,
                action=payload.action,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                before_payload=payload.before,
                after_payload=payload.after,
                event_metadata=dict(payload.metadata or {}),
                result=payload.result,
                created_at=datetime.utcnow(),
            )
            self.repo.create(event)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to write audit event",
                extra={
                    "action": payload.action,
                    "trace_id": payload.trace_id,
                    "entity_id": payload.entity_id,
                },
            )
