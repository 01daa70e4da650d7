# salon_scheduling/models/__init__.py
from .base import Base
from .staff import Staff
from .service import Service, AddOn
from .availability import AvailabilityRule, BlackoutPeriod
from .appointment import Appointment, AppointmentAddOn, AppointmentStatus, ACTIVE_APPOINTMENT_STATUSES
from .reschedule_link import RescheduleLink, LinkState
from .audit_log import AuditLog
from .notification_token import NotificationToken

__all__ = [
    "Base",
    "Staff",
    "Service",
    "AddOn",
    "AvailabilityRule",
    "BlackoutPeriod",
    "Appointment",
    "AppointmentAddOn",
    "AppointmentStatus",
    "ACTIVE_APPOINTMENT_STATUSES",
    "RescheduleLink",
    "LinkState",
    "AuditLog",
    "NotificationToken",
]
