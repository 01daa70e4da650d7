# ============================================================================
# salon_scheduling/api/v1/slots.py
# Thin HTTP layer over slot generation
# ============================================================================
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from salon_scheduling.config.database import get_db
from salon_scheduling.core.exceptions import InvalidRequestError
from salon_scheduling.schemas.scheduling import SlotQuery
from salon_scheduling.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("")
def list_slots(
        service_id: UUID = Query(..., description="Service to book"),
        staff_id: Optional[UUID] = Query(None, description="Restrict to one groomer"),
        from_: datetime = Query(..., alias="from", description="Window start (ISO-8601)"),
        to: datetime = Query(..., description="Window end (ISO-8601)"),
        db: Session = Depends(get_db)
):
    """Bookable slots for a service inside [from, to], sorted by start."""
    query = SlotQuery(service_id=service_id, staff_id=staff_id, from_=from_, to=to)
    if query.from_ >= query.to:
        raise InvalidRequestError("'from' must be earlier than 'to'")

    slots = AvailabilityService.list_slots(db, query)
    return {
        "total": len(slots),
        "slots": [slot.to_dict() for slot in slots],
    }
