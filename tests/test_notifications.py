"""Tests for push-token registration and notification bookkeeping."""
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from salon_scheduling.core.exceptions import InvalidRequestError, NotFoundError
from salon_scheduling.models import AuditLog, NotificationToken
from salon_scheduling.services.notification.notification_service import (
    PICKUP_READY,
    REMINDER_QUEUED,
    NotificationService,
)
from salon_scheduling.tasks import notification_tasks
from tests.conftest import add_appointment, at

BROWSER_TOKEN = "web-push-token-0123456789abcdef"


def test_register_push_token_upserts(db):
    first_user, second_user = uuid.uuid4(), uuid.uuid4()

    created = NotificationService.register_push_token(db, {"user_id": first_user, "token": BROWSER_TOKEN})
    assert created.platform == "web"
    assert created.last_seen_at is not None

    refreshed = NotificationService.register_push_token(db, {"user_id": second_user, "token": BROWSER_TOKEN})
    assert refreshed.id == created.id
    assert refreshed.user_id == second_user
    assert db.query(NotificationToken).count() == 1


def test_register_rejects_short_tokens(db):
    with pytest.raises(InvalidRequestError):
        NotificationService.register_push_token(db, {"user_id": uuid.uuid4(), "token": "short"})


def test_register_rejects_unsupported_platform(db):
    with pytest.raises(InvalidRequestError):
        NotificationService.register_push_token(
            db, {"user_id": uuid.uuid4(), "token": BROWSER_TOKEN, "platform": "carrier-pigeon"}
        )


def test_reminder_and_pickup_are_audited(db, staff, service):
    appointment = add_appointment(db, staff, service, at(9), at(10))
    actor = uuid.uuid4()

    reminder = NotificationService.send_reminder(db, appointment.id, actor)
    pickup = NotificationService.send_pickup_ready(db, appointment.id)

    assert reminder.action == REMINDER_QUEUED
    assert reminder.actor_id == actor
    assert pickup.action == PICKUP_READY
    assert pickup.actor_id is None
    assert db.query(AuditLog).filter(AuditLog.entity_id == appointment.id).count() == 2


def test_reminder_task_records_the_request(db, staff, service, monkeypatch):
    appointment = add_appointment(db, staff, service, at(9), at(10))
    monkeypatch.setattr(notification_tasks, "SessionLocal", lambda: db)

    result = notification_tasks.queue_appointment_reminder(str(appointment.id))

    assert result["status"] == "success"
    assert result["action"] == REMINDER_QUEUED
    entry = db.query(AuditLog).filter(AuditLog.id == uuid.UUID(result["audit_id"])).one()
    assert entry.entity_id == appointment.id


def test_pickup_task_passes_the_actor(db, staff, service, monkeypatch):
    appointment = add_appointment(db, staff, service, at(9), at(10))
    actor = uuid.uuid4()
    monkeypatch.setattr(notification_tasks, "SessionLocal", lambda: db)

    result = notification_tasks.queue_pickup_ready(str(appointment.id), str(actor))

    entry = db.query(AuditLog).filter(AuditLog.id == uuid.UUID(result["audit_id"])).one()
    assert entry.action == PICKUP_READY
    assert entry.actor_id == actor


def test_task_surfaces_database_errors(db, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("INSERT INTO audit_log", {}, Exception("database is locked"))

    monkeypatch.setattr(notification_tasks, "SessionLocal", lambda: db)
    monkeypatch.setattr(NotificationService, "send_reminder", staticmethod(broken))

    with pytest.raises(OperationalError):
        notification_tasks.queue_appointment_reminder(str(uuid.uuid4()))


def test_notifications_for_unknown_appointments_are_refused(db):
    missing = uuid.uuid4()

    with pytest.raises(NotFoundError):
        NotificationService.send_reminder(db, missing)
    with pytest.raises(NotFoundError):
        NotificationService.send_pickup_ready(db, missing)
    assert db.query(AuditLog).count() == 0


def test_task_for_unknown_appointment_records_nothing(db, monkeypatch):
    monkeypatch.setattr(notification_tasks, "SessionLocal", lambda: db)

    with pytest.raises(NotFoundError):
        notification_tasks.queue_appointment_reminder(str(uuid.uuid4()))
    assert db.query(AuditLog).count() == 0
