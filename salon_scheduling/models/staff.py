# salon_scheduling/models/staff.py
from sqlalchemy import Column, Boolean
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
import uuid

from salon_scheduling.models.base import Base


class Staff(Base):
    """
    A groomer who performs services.
    Name and contact details are owned by the staff directory, not by scheduling.
    """
    __tablename__ = "staff"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    is_active = Column(Boolean, default=True, nullable=False)

    availability_rules = relationship("AvailabilityRule", back_populates="staff")
    blackout_periods = relationship("BlackoutPeriod", back_populates="staff")

    def __repr__(self):
        return f"<Staff(id={self.id})>"
