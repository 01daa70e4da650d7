# salon_scheduling/models/reschedule_link.py
"""
Single-use, time-limited link that lets a client move one appointment
"""
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone
from typing import Optional
import enum
import secrets
import uuid

from salon_scheduling.models.base import Base, UTCDateTime

TOKEN_BYTES = 24


class LinkState(str, enum.Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class RescheduleLink(Base):
    __tablename__ = "reschedule_links"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    token = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(UTCDateTime, nullable=True)  # NULL = never expires
    used_at = Column(UTCDateTime, nullable=True)
    created_by = Column(Uuid(as_uuid=True), nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())

    appointment = relationship("Appointment")

    @staticmethod
    def generate_token() -> str:
        """Generate a URL-safe random token for the link."""
        return secrets.token_urlsafe(TOKEN_BYTES)

    def state_at(self, now: Optional[datetime] = None) -> LinkState:
        """Expiry is derived at read time; only `used` is a stored transition."""
        now = now or datetime.now(timezone.utc)
        if self.used_at is not None:
            return LinkState.USED
        if self.expires_at is not None and self.expires_at <= now:
            return LinkState.EXPIRED
        return LinkState.ACTIVE

    def is_valid_at(self, now: Optional[datetime] = None) -> bool:
        return self.state_at(now) == LinkState.ACTIVE

    def __repr__(self):
        return f"<RescheduleLink {self.token[:8]}... appointment={self.appointment_id}>"
