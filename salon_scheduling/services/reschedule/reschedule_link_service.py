# ============================================================================
# salon_scheduling/services/reschedule/reschedule_link_service.py
# Single-use reschedule links: issue, inspect and redeem
# ============================================================================
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import urljoin

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from salon_scheduling.config.settings import get_settings
from salon_scheduling.core.exceptions import (
    LinkAlreadyUsedError,
    LinkExpiredError,
    NotFoundError,
    ServiceMismatchError,
    SlotUnavailableError,
    TokenAllocationError,
)
from salon_scheduling.models.appointment import Appointment
from salon_scheduling.models.reschedule_link import LinkState, RescheduleLink
from salon_scheduling.schemas.scheduling import (
    ApplyRescheduleRequest,
    RescheduleLinkCreated,
    RescheduleLinkRequest,
    SlotQuery,
    parse_payload,
)
from salon_scheduling.services.appointment.appointment_service import SlotLookup, is_overlap_violation
from salon_scheduling.services.audit.audit_service import AuditService
from salon_scheduling.services.availability.availability_service import AvailabilityService
from salon_scheduling.utils.time_utils import add_minutes, difference_in_minutes

logger = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 3
VALIDATION_WINDOW_MINUTES = 180
FALLBACK_DURATION_MINUTES = 60

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_reschedule_url(token: str, base_url: Optional[str] = None) -> str:
    """Public URL for a token, e.g. https://salon.example/book/reschedule/<token>"""
    base = base_url or get_settings().APP_BASE_URL
    return urljoin(base.rstrip("/") + "/", f"book/reschedule/{token}")


class RescheduleLinkService:
    """Service layer for reschedule links"""

    @staticmethod
    def create_reschedule_link(
            db: Session,
            payload: Union[RescheduleLinkRequest, dict],
            now: Optional[Clock] = None
    ) -> RescheduleLinkCreated:
        """
        Issue a link for an appointment.

        Token collisions on the unique index are retried a few times before
        giving up with TokenAllocationError.
        """
        payload = parse_payload(RescheduleLinkRequest, payload)
        now = now or _utcnow

        appointment = db.query(Appointment).filter(Appointment.id == payload.appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")

        ttl_hours = payload.ttl_hours or get_settings().RESCHEDULE_LINK_TTL_HOURS
        expires_at = now() + timedelta(hours=ttl_hours)

        for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
            token = RescheduleLink.generate_token()
            db.add(RescheduleLink(
                appointment_id=appointment.id,
                token=token,
                expires_at=expires_at,
                created_by=payload.created_by,
            ))
            AuditService.record(
                db,
                action="appointment_reschedule_link_created",
                entity_id=appointment.id,
                actor_id=payload.created_by,
            )

            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                collided = db.query(RescheduleLink.id).filter(RescheduleLink.token == token).first()
                if not collided:
                    raise
                logger.warning(f"Reschedule token collision (attempt {attempt}/{MAX_TOKEN_ATTEMPTS})")
                continue
            except SQLAlchemyError:
                db.rollback()
                raise

            logger.info(f"Issued reschedule link for appointment {appointment.id}, expires {expires_at.isoformat()}")
            return RescheduleLinkCreated(
                token=token,
                url=build_reschedule_url(token),
                expires_at=expires_at,
            )

        raise TokenAllocationError()

    @staticmethod
    def get_link_status(
            db: Session,
            token: str,
            now: Optional[Clock] = None
    ) -> Dict[str, Any]:
        """Link state (active / used / expired) plus the bound appointment"""
        now = now or _utcnow
        link = db.query(RescheduleLink).filter(RescheduleLink.token == token).first()
        if not link:
            raise NotFoundError("Reschedule token not found")

        appointment = db.query(Appointment).filter(Appointment.id == link.appointment_id).first()
        return {
            "token": link.token,
            "state": link.state_at(now()).value,
            "expires_at": link.expires_at.isoformat() if link.expires_at else None,
            "used_at": link.used_at.isoformat() if link.used_at else None,
            "appointment": appointment.to_dict() if appointment else None,
        }

    @staticmethod
    def apply_reschedule(
            db: Session,
            payload: Union[ApplyRescheduleRequest, dict],
            list_slots: Optional[SlotLookup] = None,
            now: Optional[Clock] = None
    ) -> Appointment:
        """
        Redeem a link: move the bound appointment to the requested slot.

        Link validity is checked before the appointment is touched and slot
        availability before anything is written. The appointment move, link
        consumption and audit entry commit together.
        """
        payload = parse_payload(ApplyRescheduleRequest, payload)
        list_slots = list_slots or AvailabilityService.list_slots
        now = now or _utcnow

        link = (
            db.query(RescheduleLink)
            .filter(RescheduleLink.token == payload.token)
            .with_for_update()
            .first()
        )
        if not link:
            raise NotFoundError("Reschedule token not found")

        current_time = now()
        state = link.state_at(current_time)
        if state == LinkState.USED:
            raise LinkAlreadyUsedError()
        if state == LinkState.EXPIRED:
            raise LinkExpiredError()

        appointment = db.query(Appointment).filter(Appointment.id == link.appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found for reschedule")
        service = appointment.service

        new_slot = payload.new_slot
        if appointment.service_id and appointment.service_id != new_slot.service_id:
            raise ServiceMismatchError()

        staff_id = new_slot.staff_id or appointment.staff_id
        starts_at = new_slot.starts_at

        slots = list_slots(db, SlotQuery(
            staff_id=staff_id,
            service_id=new_slot.service_id,
            from_=add_minutes(starts_at, -VALIDATION_WINDOW_MINUTES),
            to=add_minutes(starts_at, VALIDATION_WINDOW_MINUTES),
        ))
        if not AvailabilityService.is_slot_open(slots, staff_id, starts_at):
            raise SlotUnavailableError("Requested slot is not available. Please pick another time.")

        duration = difference_in_minutes(appointment.ends_at, appointment.starts_at)
        if duration <= 0:
            duration = service.effective_duration if service else FALLBACK_DURATION_MINUTES

        appointment.starts_at = starts_at
        appointment.ends_at = add_minutes(starts_at, duration)
        appointment.staff_id = staff_id

        try:
            consumed = (
                db.query(RescheduleLink)
                .filter(RescheduleLink.id == link.id, RescheduleLink.used_at.is_(None))
                .update({RescheduleLink.used_at: current_time}, synchronize_session=False)
            )
            if consumed != 1:
                db.rollback()
                raise LinkAlreadyUsedError()

            AuditService.record(
                db,
                action="appointment_rescheduled",
                entity_id=appointment.id,
                actor_id=appointment.created_by,
            )
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_overlap_violation(e):
                raise SlotUnavailableError("Requested slot is not available. Please pick another time.") from e
            raise
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(appointment)
        logger.info(f"Rescheduled appointment {appointment.id} to {starts_at.isoformat()} (staff {staff_id})")
        return appointment
