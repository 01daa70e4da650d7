# salon_scheduling/models/service.py
"""
Service catalog - bookable grooming services and optional add-ons
"""
from sqlalchemy import Column, String, Numeric, Integer, Boolean
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid

from salon_scheduling.models.base import Base, UTCDateTime

DEFAULT_SERVICE_DURATION_MINUTES = 60


class Service(Base):
    """
    A bookable offering. Buffers are setup/cleanup time around the service:
    not billable and not shown in the slot, but they block adjacent bookings.
    """
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=True)

    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    duration_min = Column(Integer, nullable=True)
    buffer_pre_min = Column(Integer, nullable=True, default=0)
    buffer_post_min = Column(Integer, nullable=True, default=0)

    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name})>"

    @property
    def effective_duration(self) -> int:
        """Nominal duration in minutes, falling back to an hour when unset"""
        if self.duration_min and self.duration_min > 0:
            return self.duration_min
        return DEFAULT_SERVICE_DURATION_MINUTES

    @property
    def pre_buffer(self) -> int:
        return self.buffer_pre_min or 0

    @property
    def post_buffer(self) -> int:
        return self.buffer_post_min or 0

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "base_price": float(self.base_price) if self.base_price is not None else None,
            "duration_min": self.duration_min,
            "buffer_pre_min": self.pre_buffer,
            "buffer_post_min": self.post_buffer,
            "is_active": self.is_active,
        }


class AddOn(Base):
    """Optional extra line item (nail trim, teeth brushing, ...)"""
    __tablename__ = "add_ons"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    def __repr__(self):
        return f"<AddOn(id={self.id}, name={self.name}, price={self.price})>"
