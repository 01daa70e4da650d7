# ============================================================================
# salon_scheduling/services/notification/notification_service.py
# Records notification requests; delivery happens elsewhere
# ============================================================================
import logging
from datetime import datetime, timezone
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salon_scheduling.models.audit_log import AuditLog
from salon_scheduling.models.notification_token import NotificationToken
from salon_scheduling.schemas.scheduling import (
    AppointmentNotificationRequest,
    RegisterPushTokenRequest,
    parse_payload,
)
from salon_scheduling.services.appointment.appointment_service import AppointmentService
from salon_scheduling.services.audit.audit_service import AuditService

logger = logging.getLogger(__name__)

REMINDER_QUEUED = "appointment_reminder_queued"
PICKUP_READY = "appointment_pickup_ready"


class NotificationService:
    """Push-token registration and notification request bookkeeping"""

    @staticmethod
    def register_push_token(
            db: Session,
            payload: Union[RegisterPushTokenRequest, dict]
    ) -> NotificationToken:
        """Upsert on token: a browser re-registering refreshes last_seen_at"""
        payload = parse_payload(RegisterPushTokenRequest, payload)

        record = db.query(NotificationToken).filter(NotificationToken.token == payload.token).first()
        if record is None:
            record = NotificationToken(token=payload.token)
            db.add(record)

        record.user_id = payload.user_id
        record.platform = payload.platform
        record.last_seen_at = datetime.now(timezone.utc)

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(record)
        return record

    @staticmethod
    def _log_notification(db: Session, action: str, appointment_id: UUID, actor_id: Optional[UUID]) -> AuditLog:
        """Audit a notification request; the appointment must exist (NotFoundError)"""
        request = parse_payload(
            AppointmentNotificationRequest,
            {"appointment_id": appointment_id, "actor_id": actor_id}
        )
        AppointmentService.get_appointment(db, request.appointment_id)

        entry = AuditService.record(
            db,
            action=action,
            entity_id=request.appointment_id,
            actor_id=request.actor_id,
        )
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return entry

    @staticmethod
    def send_reminder(db: Session, appointment_id: UUID, actor_id: Optional[UUID] = None) -> AuditLog:
        return NotificationService._log_notification(db, REMINDER_QUEUED, appointment_id, actor_id)

    @staticmethod
    def send_pickup_ready(db: Session, appointment_id: UUID, actor_id: Optional[UUID] = None) -> AuditLog:
        return NotificationService._log_notification(db, PICKUP_READY, appointment_id, actor_id)
