# ============================================================================
# salon_scheduling/services/availability/busy_intervals.py
# Merges appointments and blackouts into per-staff busy spans
# ============================================================================
from collections import defaultdict
from typing import Dict, Iterable, List
from uuid import UUID

from salon_scheduling.models.appointment import ACTIVE_APPOINTMENT_STATUSES
from salon_scheduling.utils.time_utils import Interval, add_minutes


def normalise_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort by start and fold overlapping or touching intervals together."""
    ordered = sorted(
        (interval for interval in intervals if interval.end > interval.start),
        key=lambda interval: interval.start
    )

    merged: List[Interval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(start=last.start, end=max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def build_busy_intervals(
        appointments: Iterable,
        blackouts: Iterable,
        buffer_pre_min: int = 0,
        buffer_post_min: int = 0
) -> Dict[UUID, List[Interval]]:
    """
    Busy spans per staff member.

    Active appointments are padded by the service buffers; blackouts are taken
    verbatim. Staff with nothing on record map to an empty list.
    """
    busy: Dict[UUID, List[Interval]] = defaultdict(list)

    for blackout in blackouts:
        busy[blackout.staff_id].append(Interval(start=blackout.starts_at, end=blackout.ends_at))

    for appointment in appointments:
        if not appointment.staff_id:
            continue
        if appointment.status not in ACTIVE_APPOINTMENT_STATUSES:
            continue
        busy[appointment.staff_id].append(Interval(
            start=add_minutes(appointment.starts_at, -buffer_pre_min),
            end=add_minutes(appointment.ends_at, buffer_post_min),
        ))

    for staff_id in list(busy):
        busy[staff_id] = normalise_intervals(busy[staff_id])

    return busy
