# ============================================================================
# salon_scheduling/services/appointment/appointment_service.py
# ============================================================================
"""Booking: slot re-validation, pricing snapshot, persistence and audit"""
import logging
import uuid
from decimal import Decimal
from typing import Callable, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from salon_scheduling.core.exceptions import NotFoundError, SlotUnavailableError, UnknownAddOnsError
from salon_scheduling.models.appointment import Appointment, AppointmentAddOn, AppointmentStatus
from salon_scheduling.models.service import AddOn, Service
from salon_scheduling.schemas.scheduling import (
    CancelAppointmentRequest,
    CreateAppointmentRequest,
    CreatedAppointment,
    SlotQuery,
    UpdateAppointmentRequest,
    parse_payload,
)
from salon_scheduling.services.audit.audit_service import AuditService
from salon_scheduling.services.availability.availability_service import AvailabilityService, AvailableSlot
from salon_scheduling.utils.time_utils import add_minutes

logger = logging.getLogger(__name__)

# Name of the PostgreSQL exclusion constraint created by the migrations
OVERLAP_CONSTRAINT_NAME = "appointments_no_overlap"

SlotLookup = Callable[[Session, SlotQuery], List[AvailableSlot]]


def is_overlap_violation(error: IntegrityError) -> bool:
    """True when the database rejected a write for double-booking a staff member"""
    return OVERLAP_CONSTRAINT_NAME in str(getattr(error, "orig", error))


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return Decimal("0")


def compute_commission_base(appointment: Union[Appointment, Mapping]) -> Decimal:
    """Service + add-ons - discount; tax is excluded. Used by payroll."""
    def _value(name):
        if isinstance(appointment, Mapping):
            return appointment.get(name)
        return getattr(appointment, name, None)

    return to_decimal(_value("price_service")) + to_decimal(_value("price_addons")) - to_decimal(_value("discount"))


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def get_appointment(db: Session, appointment_id: UUID) -> Appointment:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    @staticmethod
    def create_appointment(
            db: Session,
            payload: Union[CreateAppointmentRequest, dict],
            list_slots: Optional[SlotLookup] = None
    ) -> CreatedAppointment:
        """
        Book an appointment after confirming the slot is still open.

        The slot check and the insert are separate statements; the database
        overlap constraint is the backstop when two bookings race.
        """
        payload = parse_payload(CreateAppointmentRequest, payload)
        list_slots = list_slots or AvailabilityService.list_slots

        service = db.query(Service).filter(Service.id == payload.service_id).first()
        if not service:
            raise NotFoundError("Service not found")

        duration = payload.duration_min or service.effective_duration
        starts_at = payload.starts_at
        ends_at = add_minutes(starts_at, duration)

        slots = list_slots(db, SlotQuery(
            staff_id=payload.staff_id,
            service_id=payload.service_id,
            from_=add_minutes(starts_at, -duration),
            to=add_minutes(ends_at, max(service.post_buffer, 60)),
        ))
        if not AvailabilityService.is_slot_open(slots, payload.staff_id, starts_at):
            logger.info(f"Slot {starts_at.isoformat()} for staff {payload.staff_id} is not available")
            raise SlotUnavailableError()

        add_ons: List[AddOn] = []
        if payload.add_on_ids:
            add_ons = db.query(AddOn).filter(AddOn.id.in_(payload.add_on_ids)).all()
            found = {add_on.id for add_on in add_ons}
            missing = [add_on_id for add_on_id in payload.add_on_ids if add_on_id not in found]
            if missing:
                raise UnknownAddOnsError(missing)

        price_service = to_decimal(service.base_price)
        price_addons = sum((to_decimal(add_on.price) for add_on in add_ons), Decimal("0"))

        appointment = Appointment(
            id=uuid.uuid4(),
            staff_id=payload.staff_id,
            client_id=payload.client_id,
            pet_id=payload.pet_id,
            service_id=payload.service_id,
            starts_at=starts_at,
            ends_at=ends_at,
            price_service=price_service,
            price_addons=price_addons,
            discount=payload.discount,
            tax=payload.tax,
            status=(payload.status or AppointmentStatus.BOOKED).value,
            notes=payload.notes,
            created_by=payload.created_by,
        )
        for add_on in add_ons:
            appointment.add_on_lines.append(
                AppointmentAddOn(add_on_id=add_on.id, price=to_decimal(add_on.price))
            )
        db.add(appointment)

        AuditService.record(
            db,
            action="appointment_created",
            entity_id=appointment.id,
            actor_id=payload.created_by or payload.client_id,
        )

        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_overlap_violation(e):
                raise SlotUnavailableError() from e
            raise
        except SQLAlchemyError:
            db.rollback()
            raise

        logger.info(f"Created appointment {appointment.id} for staff {payload.staff_id} at {starts_at.isoformat()}")

        return CreatedAppointment(
            id=appointment.id,
            starts_at=starts_at,
            ends_at=ends_at,
            price_service=price_service,
            price_addons=price_addons,
        )

    @staticmethod
    def update_appointment(
            db: Session,
            appointment_id: UUID,
            patch: Union[UpdateAppointmentRequest, dict]
    ) -> Appointment:
        """Partial update of status / discount / tax / notes. Never moves the booking."""
        patch = parse_payload(UpdateAppointmentRequest, patch)
        appointment = AppointmentService.get_appointment(db, appointment_id)

        updates = {}
        if "status" in patch.model_fields_set and patch.status is not None:
            updates["status"] = patch.status.value
        for field in ("discount", "tax", "notes"):
            if field in patch.model_fields_set:
                updates[field] = getattr(patch, field)

        if not updates:
            return appointment

        for field, value in updates.items():
            setattr(appointment, field, value)

        AuditService.record(
            db,
            action="appointment_updated",
            entity_id=appointment.id,
            actor_id=appointment.created_by,
        )

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(appointment)
        return appointment

    @staticmethod
    def cancel_appointment(
            db: Session,
            appointment_id: UUID,
            reason: Optional[str] = None
    ) -> Appointment:
        """Cancel and append the reason to the existing notes"""
        request = parse_payload(CancelAppointmentRequest, {"reason": reason})
        appointment = AppointmentService.get_appointment(db, appointment_id)

        appointment.status = AppointmentStatus.CANCELED.value
        if request.reason:
            existing_notes = (appointment.notes or "").strip()
            new_note = f"Cancellation reason: {request.reason}"
            appointment.notes = f"{existing_notes}\n{new_note}" if existing_notes else new_note

        AuditService.record(
            db,
            action="appointment_canceled",
            entity_id=appointment.id,
            actor_id=appointment.created_by,
        )

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(appointment)
        logger.info(f"Canceled appointment {appointment.id}")
        return appointment
