# ============================================================================
# salon_scheduling/services/appointment/appointment_query_service.py
# Calendar reads - appointments starting within a UTC day or week
# ============================================================================
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from salon_scheduling.models.appointment import Appointment
from salon_scheduling.schemas.scheduling import ListDayQuery, ListWeekQuery, parse_payload


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class AppointmentQueryService:
    """Read-only appointment listings for the calendar views"""

    @staticmethod
    def _list_between(
            db: Session,
            start: datetime,
            end: datetime,
            staff_id: Optional[UUID]
    ) -> List[Appointment]:
        query = db.query(Appointment).filter(
            Appointment.starts_at >= start,
            Appointment.starts_at < end
        )
        if staff_id:
            query = query.filter(Appointment.staff_id == staff_id)
        return query.order_by(Appointment.starts_at.asc()).all()

    @staticmethod
    def list_day(db: Session, query: Union[ListDayQuery, dict]) -> List[Appointment]:
        """All appointments (any status) starting on the given UTC day."""
        query = parse_payload(ListDayQuery, query)
        start = _start_of_day(query.day)
        return AppointmentQueryService._list_between(db, start, start + timedelta(days=1), query.staff_id)

    @staticmethod
    def list_week(db: Session, query: Union[ListWeekQuery, dict]) -> List[Appointment]:
        """All appointments starting in the 7 days from week_start."""
        query = parse_payload(ListWeekQuery, query)
        start = _start_of_day(query.week_start)
        return AppointmentQueryService._list_between(db, start, start + timedelta(days=7), query.staff_id)
