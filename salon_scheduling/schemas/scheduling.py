"""
Pydantic schemas for the scheduling operations (inputs and outputs)
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from salon_scheduling.core.exceptions import InvalidRequestError
from salon_scheduling.models.appointment import AppointmentStatus
from salon_scheduling.utils.time_utils import ensure_utc

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: Type[ModelT], payload: Union[ModelT, dict]) -> ModelT:
    """
    Accept either a schema instance or a raw dict and return the schema.
    Pydantic errors become InvalidRequestError with the first message.
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "Invalid request")
        raise InvalidRequestError(f"{location}: {message}" if location else message) from e


class _UTCModel(BaseModel):
    """Normalises every datetime field to aware UTC (naive input is UTC)"""

    @field_validator("*", mode="after")
    @classmethod
    def _normalise_datetimes(cls, v):
        if isinstance(v, datetime):
            return ensure_utc(v)
        return v


# ============================================================================
# Slots
# ============================================================================

class SlotQuery(_UTCModel):
    model_config = ConfigDict(populate_by_name=True)

    service_id: UUID
    staff_id: Optional[UUID] = None
    from_: datetime = Field(..., alias="from")
    to: datetime


# ============================================================================
# Appointments
# ============================================================================

class CreateAppointmentRequest(_UTCModel):
    staff_id: UUID
    client_id: UUID
    pet_id: Optional[UUID] = None
    service_id: UUID
    starts_at: datetime
    add_on_ids: List[UUID] = Field(default_factory=list)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = Field(None, max_length=5000)
    created_by: Optional[UUID] = None
    duration_min: Optional[int] = Field(None, gt=0)

    @field_validator("add_on_ids")
    @classmethod
    def _unique_add_ons(cls, v):
        if len(v) != len(set(v)):
            raise ValueError("Duplicate add-on ids are not allowed")
        return v


class CreatedAppointment(BaseModel):
    id: UUID
    starts_at: datetime
    ends_at: datetime
    price_service: Decimal
    price_addons: Decimal


class UpdateAppointmentRequest(BaseModel):
    status: Optional[AppointmentStatus] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    tax: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=5000)

    @model_validator(mode="after")
    def _at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class CancelAppointmentRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ListDayQuery(BaseModel):
    day: date
    staff_id: Optional[UUID] = None


class ListWeekQuery(BaseModel):
    week_start: date
    staff_id: Optional[UUID] = None


# ============================================================================
# Reschedule links
# ============================================================================

class RescheduleLinkRequest(BaseModel):
    appointment_id: UUID
    ttl_hours: Optional[int] = Field(None, gt=0)
    created_by: Optional[UUID] = None


class RescheduleLinkCreated(BaseModel):
    token: str
    url: str
    expires_at: Optional[datetime]


class NewSlot(_UTCModel):
    service_id: UUID
    staff_id: Optional[UUID] = None
    starts_at: datetime


class ApplyRescheduleRequest(BaseModel):
    token: str = Field(..., min_length=10)
    new_slot: NewSlot


# ============================================================================
# Notifications
# ============================================================================

class RegisterPushTokenRequest(BaseModel):
    user_id: UUID
    platform: Literal["web"] = "web"
    token: str = Field(..., min_length=16)


class AppointmentNotificationRequest(BaseModel):
    appointment_id: UUID
    actor_id: Optional[UUID] = None
