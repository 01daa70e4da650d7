# salon_scheduling/models/availability.py
from sqlalchemy import Column, String, Integer, Text, ForeignKey
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
import uuid

from salon_scheduling.models.base import Base, UTCDateTime


class AvailabilityRule(Base):
    """
    Recurring working windows for one staff member, stored as iCalendar text
    (DTSTART + RRULE lines, optional DURATION/DTEND).
    """
    __tablename__ = "availability_rules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    staff_id = Column(Uuid(as_uuid=True), ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True)

    rrule_text = Column(Text, nullable=False)
    tz = Column(String(64), nullable=True)  # IANA name, used for floating DTSTART

    # Staff-side gaps (travel, breaks) applied inside each working window
    buffer_pre_min = Column(Integer, nullable=True, default=0)
    buffer_post_min = Column(Integer, nullable=True, default=0)

    staff = relationship("Staff", back_populates="availability_rules")

    @property
    def pre_buffer(self) -> int:
        return self.buffer_pre_min or 0

    @property
    def post_buffer(self) -> int:
        return self.buffer_post_min or 0


class BlackoutPeriod(Base):
    """Time off, holidays and other explicit unavailability for one staff member"""
    __tablename__ = "blackout_dates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    staff_id = Column(Uuid(as_uuid=True), ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True)

    starts_at = Column(UTCDateTime, nullable=False)
    ends_at = Column(UTCDateTime, nullable=False)
    reason = Column(String, nullable=True)  # "Holiday", "Vacation", etc.

    staff = relationship("Staff", back_populates="blackout_periods")
