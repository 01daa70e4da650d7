"""Shared test fixtures and helpers."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salon_scheduling.models import (
    AddOn,
    Appointment,
    AppointmentStatus,
    AvailabilityRule,
    Base,
    BlackoutPeriod,
    Service,
    Staff,
)

# Monday; every rule below starts here
MONDAY = datetime(2025, 1, 6, tzinfo=timezone.utc)

WORKDAY_RULE = "\n".join([
    "DTSTART:20250106T090000Z",
    "RRULE:FREQ=DAILY",
    "X-SALON-DURATION-MINUTES:480",
])

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def at(hour: int, minute: int = 0, day: int = 0) -> datetime:
    """UTC datetime on the test Monday (plus `day` days)."""
    return MONDAY.replace(day=MONDAY.day + day, hour=hour, minute=minute)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def staff(db):
    member = Staff()
    db.add(member)
    db.commit()
    return member


@pytest.fixture
def service(db):
    bath = Service(name="Full groom", base_price=Decimal("60.00"), duration_min=60)
    db.add(bath)
    db.commit()
    return bath


@pytest.fixture
def add_ons(db):
    items = [
        AddOn(name="Nail trim", price=Decimal("20.00")),
        AddOn(name="Teeth brushing", price=Decimal("10.00")),
    ]
    db.add_all(items)
    db.commit()
    return items


@pytest.fixture
def workday(db, staff):
    """09:00-17:00 UTC every day from the test Monday"""
    return add_rule(db, staff)


def add_rule(db, staff, rrule_text: str = WORKDAY_RULE, tz: Optional[str] = None, **buffers) -> AvailabilityRule:
    rule = AvailabilityRule(staff_id=staff.id, rrule_text=rrule_text, tz=tz, **buffers)
    db.add(rule)
    db.commit()
    return rule


def add_appointment(db, staff, service, starts_at, ends_at, status=AppointmentStatus.BOOKED, **fields) -> Appointment:
    appointment = Appointment(
        staff_id=staff.id,
        service_id=service.id,
        starts_at=starts_at,
        ends_at=ends_at,
        price_service=service.base_price,
        status=status.value,
        **fields
    )
    db.add(appointment)
    db.commit()
    return appointment


def add_blackout(db, staff, starts_at, ends_at, reason="Vacation") -> BlackoutPeriod:
    blackout = BlackoutPeriod(staff_id=staff.id, starts_at=starts_at, ends_at=ends_at, reason=reason)
    db.add(blackout)
    db.commit()
    return blackout


@pytest.fixture
def overlap_constraint(db):
    """Reject any flush that writes an appointment, the way the PostgreSQL
    exclusion constraint does for overlapping bookings of one groomer."""
    def reject(session, flush_context, instances):
        touched = list(session.new) + list(session.dirty)
        if any(isinstance(obj, Appointment) for obj in touched):
            raise IntegrityError(
                "INSERT INTO appointments",
                {},
                Exception('conflicting key value violates exclusion constraint "appointments_no_overlap"'),
            )

    event.listen(db, "before_flush", reject)
    yield
    event.remove(db, "before_flush", reject)


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from salon_scheduling.config.database import get_db
    from salon_scheduling.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
