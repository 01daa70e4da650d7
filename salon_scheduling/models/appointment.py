# salon_scheduling/models/appointment.py
from sqlalchemy import Column, String, Numeric, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid

from salon_scheduling.models.base import Base, UTCDateTime


class AppointmentStatus(str, enum.Enum):
    BOOKED = "booked"
    CHECKED_IN = "checked_in"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"
    NO_SHOW = "no_show"


# Statuses that occupy the groomer's time; canceled/no_show never block a slot
ACTIVE_APPOINTMENT_STATUSES = frozenset({
    AppointmentStatus.BOOKED.value,
    AppointmentStatus.CHECKED_IN.value,
    AppointmentStatus.IN_PROGRESS.value,
    AppointmentStatus.COMPLETED.value,
})


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    staff_id = Column(Uuid(as_uuid=True), ForeignKey("staff.id"), nullable=True, index=True)
    client_id = Column(Uuid(as_uuid=True), nullable=True)
    pet_id = Column(Uuid(as_uuid=True), nullable=True)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=True)

    starts_at = Column(UTCDateTime, nullable=False)
    ends_at = Column(UTCDateTime, nullable=False)

    # Pricing snapshot taken at booking time
    price_service = Column(Numeric(10, 2), nullable=True, default=0)
    price_addons = Column(Numeric(10, 2), nullable=True, default=0)
    discount = Column(Numeric(10, 2), nullable=True, default=0)
    tax = Column(Numeric(10, 2), nullable=True, default=0)

    status = Column(String(20), nullable=False, default=AppointmentStatus.BOOKED.value)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    service = relationship("Service")
    add_on_lines = relationship(
        "AppointmentAddOn",
        back_populates="appointment",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_appointments_staff_window", "staff_id", "starts_at", "ends_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_APPOINTMENT_STATUSES

    def __repr__(self):
        return f"<Appointment(id={self.id}, staff_id={self.staff_id}, starts_at={self.starts_at})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        def _money(value):
            return float(value) if value is not None else None

        return {
            "id": str(self.id),
            "staff_id": str(self.staff_id) if self.staff_id else None,
            "client_id": str(self.client_id) if self.client_id else None,
            "pet_id": str(self.pet_id) if self.pet_id else None,
            "service_id": str(self.service_id) if self.service_id else None,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
            "price_service": _money(self.price_service),
            "price_addons": _money(self.price_addons),
            "discount": _money(self.discount),
            "tax": _money(self.tax),
            "status": self.status,
            "notes": self.notes,
            "created_by": str(self.created_by) if self.created_by else None,
        }


class AppointmentAddOn(Base):
    """Add-on line item with the price captured when the appointment was booked"""
    __tablename__ = "appointment_add_ons"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    add_on_id = Column(Uuid(as_uuid=True), ForeignKey("add_ons.id"), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    appointment = relationship("Appointment", back_populates="add_on_lines")

    __table_args__ = (
        UniqueConstraint("appointment_id", "add_on_id", name="uq_appointment_add_on"),
    )
