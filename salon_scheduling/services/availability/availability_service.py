# ============================================================================
# salon_scheduling/services/availability/availability_service.py
# Slot generation: availability rules minus busy time, on a 15-minute grid
# ============================================================================
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Union
from uuid import UUID

from sqlalchemy.orm import Session

from salon_scheduling.models.appointment import Appointment, ACTIVE_APPOINTMENT_STATUSES
from salon_scheduling.models.availability import AvailabilityRule, BlackoutPeriod
from salon_scheduling.models.service import Service
from salon_scheduling.schemas.scheduling import SlotQuery, parse_payload
from salon_scheduling.services.availability.busy_intervals import build_busy_intervals
from salon_scheduling.services.availability.rule_expander import expand_rule
from salon_scheduling.utils.time_utils import Interval, add_minutes, round_up_to_interval

logger = logging.getLogger(__name__)

SLOT_INTERVAL_MINUTES = 15


@dataclass(frozen=True)
class AvailableSlot:
    staff_id: UUID
    start: datetime
    end: datetime

    def to_dict(self) -> Dict[str, str]:
        return {
            "staff_id": str(self.staff_id),
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


def _overlaps_any(block: Interval, busy: List[Interval]) -> bool:
    return any(block.overlaps(interval) for interval in busy)


class AvailabilityService:
    """Computes bookable slots from availability rules, blackouts and bookings"""

    @staticmethod
    def list_slots(db: Session, query: Union[SlotQuery, dict]) -> List[AvailableSlot]:
        """
        Bookable {staff, start, end} slots for a service inside [from, to].

        A slot's buffered block must sit inside a rule window (after the rule's
        own buffers) and must not overlap any busy interval of that staff member.
        Slots are not deduplicated across overlapping rules.
        """
        query = parse_payload(SlotQuery, query)
        window_from, window_to = query.from_, query.to
        if window_from >= window_to:
            return []

        service = db.query(Service).filter(Service.id == query.service_id).first()
        if not service:
            return []

        duration = service.effective_duration
        pre, post = service.pre_buffer, service.post_buffer

        rules_query = db.query(AvailabilityRule)
        if query.staff_id:
            rules_query = rules_query.filter(AvailabilityRule.staff_id == query.staff_id)
        rules = rules_query.all()

        if not rules:
            logger.debug(f"No availability rules for service {service.id} (staff={query.staff_id})")
            return []

        # A slot block and a padded booking each reach past the window edge by up to
        # pre + post together, so neighbours that far out can still clash
        reach = pre + post
        fetch_from = add_minutes(window_from, -reach)
        fetch_to = add_minutes(window_to, reach)

        blackouts_query = db.query(BlackoutPeriod).filter(
            BlackoutPeriod.starts_at <= fetch_to,
            BlackoutPeriod.ends_at >= fetch_from
        )
        appointments_query = db.query(Appointment).filter(
            Appointment.starts_at <= fetch_to,
            Appointment.ends_at >= fetch_from,
            Appointment.status.in_(ACTIVE_APPOINTMENT_STATUSES)
        )
        if query.staff_id:
            blackouts_query = blackouts_query.filter(BlackoutPeriod.staff_id == query.staff_id)
            appointments_query = appointments_query.filter(Appointment.staff_id == query.staff_id)

        busy_map = build_busy_intervals(
            appointments_query.all(),
            blackouts_query.all(),
            buffer_pre_min=pre,
            buffer_post_min=post
        )

        required_block = duration + pre + post
        slots: List[AvailableSlot] = []

        for rule in rules:
            busy = busy_map.get(rule.staff_id, [])
            windows = expand_rule(rule, window_from, window_to, required_block)

            for window in windows:
                earliest_allowed = add_minutes(window.start, rule.pre_buffer)
                latest_allowed = add_minutes(window.end, -rule.post_buffer)
                if latest_allowed <= earliest_allowed:
                    continue

                candidate = round_up_to_interval(max(earliest_allowed, window_from), SLOT_INTERVAL_MINUTES)
                while candidate < window_to and candidate <= latest_allowed:
                    slot_end = add_minutes(candidate, duration)
                    block = Interval(
                        start=add_minutes(candidate, -pre),
                        end=add_minutes(slot_end, post)
                    )

                    inside_rule = block.start >= earliest_allowed and block.end <= latest_allowed
                    inside_query = candidate >= window_from and slot_end <= window_to
                    if inside_rule and inside_query and not _overlaps_any(block, busy):
                        slots.append(AvailableSlot(staff_id=rule.staff_id, start=candidate, end=slot_end))

                    candidate = add_minutes(candidate, SLOT_INTERVAL_MINUTES)

        slots.sort(key=lambda slot: slot.start)
        return slots

    @staticmethod
    def is_slot_open(slots: List[AvailableSlot], staff_id: UUID, start: datetime) -> bool:
        """True when the exact {staff, start} pair is among the computed slots"""
        return any(slot.staff_id == staff_id and slot.start == start for slot in slots)
