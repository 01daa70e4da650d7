# ===== salon_scheduling/tasks/notification_tasks.py =====
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.exc import SQLAlchemyError

from salon_scheduling.config.celery_config import celery_app
from salon_scheduling.config.database import SessionLocal
from salon_scheduling.config.settings import get_settings
from salon_scheduling.services.notification.notification_service import NotificationService

logger = logging.getLogger(__name__)
settings = get_settings()


def _record(action, appointment_id: str, actor_id: Optional[str]):
    db = SessionLocal()
    try:
        entry = action(
            db,
            UUID(appointment_id),
            UUID(actor_id) if actor_id else None
        )
        return {"status": "success", "audit_id": str(entry.id), "action": entry.action}
    finally:
        db.close()


@celery_app.task(bind=True, max_retries=settings.MAX_RETRY_ATTEMPTS)
def queue_appointment_reminder(self, appointment_id: str, actor_id: Optional[str] = None):
    """
    Record that a reminder was requested for an appointment

    Args:
        appointment_id: Appointment to remind about
        actor_id: Staff member who asked for it (optional)
    """
    try:
        logger.info(f"Queueing reminder for appointment {appointment_id}")
        return _record(NotificationService.send_reminder, appointment_id, actor_id)

    except SQLAlchemyError as exc:
        logger.error(f"Failed to queue reminder for appointment {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )


@celery_app.task(bind=True, max_retries=settings.MAX_RETRY_ATTEMPTS)
def queue_pickup_ready(self, appointment_id: str, actor_id: Optional[str] = None):
    """Record that the owner should be told their pet is ready for pickup"""
    try:
        logger.info(f"Queueing pickup-ready notice for appointment {appointment_id}")
        return _record(NotificationService.send_pickup_ready, appointment_id, actor_id)

    except SQLAlchemyError as exc:
        logger.error(f"Failed to queue pickup-ready notice for appointment {appointment_id}: {exc}")
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
