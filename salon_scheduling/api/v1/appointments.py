# ============================================================================
# salon_scheduling/api/v1/appointments.py
# Thin HTTP layer - booking, updates, cancellation and calendar reads
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from salon_scheduling.config.database import get_db
from salon_scheduling.schemas.scheduling import (
    CancelAppointmentRequest,
    CreateAppointmentRequest,
    ListDayQuery,
    ListWeekQuery,
    UpdateAppointmentRequest,
)
from salon_scheduling.services.appointment.appointment_query_service import AppointmentQueryService
from salon_scheduling.services.appointment.appointment_service import AppointmentService, compute_commission_base
from salon_scheduling.services.notification.notification_service import NotificationService

router = APIRouter(prefix="/appointments", tags=["appointments"])


class NotificationBody(BaseModel):
    actor_id: Optional[UUID] = None


def _serialize(appointment):
    data = appointment.to_dict()
    data["commission_base"] = float(compute_commission_base(appointment))
    return data


@router.post("", status_code=status.HTTP_201_CREATED)
def create_appointment(
        payload: CreateAppointmentRequest,
        db: Session = Depends(get_db)
):
    """Book an appointment; 409 when the slot was taken in the meantime."""
    created = AppointmentService.create_appointment(db, payload)
    return {
        "id": str(created.id),
        "starts_at": created.starts_at.isoformat(),
        "ends_at": created.ends_at.isoformat(),
        "price_service": float(created.price_service),
        "price_addons": float(created.price_addons),
    }


@router.get("/day")
def list_day(
        day: date = Query(..., description="UTC day to list"),
        staff_id: Optional[UUID] = Query(None),
        db: Session = Depends(get_db)
):
    appointments = AppointmentQueryService.list_day(db, ListDayQuery(day=day, staff_id=staff_id))
    return {
        "date": day.isoformat(),
        "total_appointments": len(appointments),
        "appointments": [_serialize(appt) for appt in appointments],
    }


@router.get("/week")
def list_week(
        week_start: date = Query(..., description="First UTC day of the week"),
        staff_id: Optional[UUID] = Query(None),
        db: Session = Depends(get_db)
):
    appointments = AppointmentQueryService.list_week(db, ListWeekQuery(week_start=week_start, staff_id=staff_id))
    return {
        "week_start": week_start.isoformat(),
        "total_appointments": len(appointments),
        "appointments": [_serialize(appt) for appt in appointments],
    }


@router.get("/{appointment_id}")
def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    return _serialize(AppointmentService.get_appointment(db, appointment_id))


@router.patch("/{appointment_id}")
def update_appointment(
        patch: UpdateAppointmentRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    """Update status, discount, tax or notes. Moving a booking goes through reschedule links."""
    return _serialize(AppointmentService.update_appointment(db, appointment_id, patch))


@router.post("/{appointment_id}/cancel")
def cancel_appointment(
        body: Optional[CancelAppointmentRequest] = None,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    return _serialize(AppointmentService.cancel_appointment(db, appointment_id, body.reason if body else None))


@router.post("/{appointment_id}/reminder", status_code=status.HTTP_202_ACCEPTED)
def send_reminder(
        body: Optional[NotificationBody] = None,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    entry = NotificationService.send_reminder(db, appointment_id, body.actor_id if body else None)
    return {"status": "queued", "action": entry.action}


@router.post("/{appointment_id}/pickup-ready", status_code=status.HTTP_202_ACCEPTED)
def send_pickup_ready(
        body: Optional[NotificationBody] = None,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    entry = NotificationService.send_pickup_ready(db, appointment_id, body.actor_id if body else None)
    return {"status": "queued", "action": entry.action}
