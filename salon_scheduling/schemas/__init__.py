# salon_scheduling/schemas/__init__.py
from .scheduling import (
    parse_payload,
    SlotQuery,
    CreateAppointmentRequest,
    CreatedAppointment,
    UpdateAppointmentRequest,
    CancelAppointmentRequest,
    ListDayQuery,
    ListWeekQuery,
    RescheduleLinkRequest,
    RescheduleLinkCreated,
    NewSlot,
    ApplyRescheduleRequest,
    RegisterPushTokenRequest,
    AppointmentNotificationRequest,
)

__all__ = [
    "parse_payload",
    "SlotQuery",
    "CreateAppointmentRequest",
    "CreatedAppointment",
    "UpdateAppointmentRequest",
    "CancelAppointmentRequest",
    "ListDayQuery",
    "ListWeekQuery",
    "RescheduleLinkRequest",
    "RescheduleLinkCreated",
    "NewSlot",
    "ApplyRescheduleRequest",
    "RegisterPushTokenRequest",
    "AppointmentNotificationRequest",
]
