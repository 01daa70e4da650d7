# ============================================================================
# salon_scheduling/services/audit/audit_service.py
# ============================================================================
"""Audit trail writes for scheduling actions"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from salon_scheduling.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

APPOINTMENTS_ENTITY = "appointments"


class AuditService:
    """Adds audit rows to the caller's session; they commit with the caller's write"""

    @staticmethod
    def record(
            db: Session,
            action: str,
            entity_id: Optional[UUID],
            actor_id: Optional[UUID] = None,
            entity: str = APPOINTMENTS_ENTITY
    ) -> AuditLog:
        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            entity=entity,
            entity_id=entity_id,
        )
        db.add(entry)
        logger.info(f"Audit {action} on {entity}:{entity_id} by {actor_id}")
        return entry
