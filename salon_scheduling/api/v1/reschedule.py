# ============================================================================
# salon_scheduling/api/v1/reschedule.py
# Reschedule links - staff issue them, clients redeem them
# ============================================================================
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from salon_scheduling.config.database import get_db
from salon_scheduling.core.exceptions import NotFoundError
from salon_scheduling.models.appointment import Appointment
from salon_scheduling.models.reschedule_link import RescheduleLink
from salon_scheduling.schemas.scheduling import ApplyRescheduleRequest, NewSlot, RescheduleLinkRequest
from salon_scheduling.services.reschedule.reschedule_link_service import RescheduleLinkService

router = APIRouter(prefix="/reschedule", tags=["reschedule"])


class ApplyRescheduleBody(BaseModel):
    """Client payload; service defaults to the one the link was issued for"""
    token: str = Field(..., min_length=10, description="Reschedule token")
    starts_at: datetime
    staff_id: Optional[UUID] = None
    service_id: Optional[UUID] = None


def _resolve_link_defaults(db: Session, token: str):
    """Service and staff of the appointment bound to a token, or None"""
    link = db.query(RescheduleLink).filter(RescheduleLink.token == token).first()
    if not link:
        return None
    appointment = db.query(Appointment).filter(Appointment.id == link.appointment_id).first()
    if not appointment or not appointment.service_id:
        return None
    return appointment.service_id, appointment.staff_id


@router.post("/links", status_code=status.HTTP_201_CREATED)
def create_reschedule_link(
        payload: RescheduleLinkRequest,
        db: Session = Depends(get_db)
):
    link = RescheduleLinkService.create_reschedule_link(db, payload)
    return {
        "token": link.token,
        "url": link.url,
        "expires_at": link.expires_at.isoformat() if link.expires_at else None,
    }


@router.get("/links/{token}")
def get_reschedule_link(
        token: str = Path(..., min_length=10, description="Reschedule token"),
        db: Session = Depends(get_db)
):
    return RescheduleLinkService.get_link_status(db, token)


@router.post("/apply")
def apply_reschedule(
        body: ApplyRescheduleBody,
        db: Session = Depends(get_db)
):
    """Move the linked appointment; 410 for a used/expired link, 409 for a taken slot."""
    service_id = body.service_id
    staff_id = body.staff_id

    if not service_id:
        resolved = _resolve_link_defaults(db, body.token)
        if not resolved:
            raise NotFoundError("Reschedule link could not be located.")
        service_id, default_staff_id = resolved
        staff_id = staff_id or default_staff_id

    appointment = RescheduleLinkService.apply_reschedule(db, ApplyRescheduleRequest(
        token=body.token,
        new_slot=NewSlot(service_id=service_id, staff_id=staff_id, starts_at=body.starts_at),
    ))
    return {"appointment": appointment.to_dict()}
