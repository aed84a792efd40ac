"""Availability schemas - window requests, responses and generated slots"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from ..core.validators import parse_time_of_day, validate_timezone
from ..models.availability import (
    AppointmentType,
    AvailabilityStatus,
    LocationType,
    RecurrencePattern,
)
from ..models.appointment_slot import SlotStatus


class LocationRequest(BaseModel):
    type: LocationType
    address: Optional[str] = Field(None, max_length=255)
    room_number: Optional[str] = Field(None, max_length=50)


class PricingRequest(BaseModel):
    base_fee: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    insurance_accepted: bool = False
    currency: str = Field("USD", min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper()


class AvailabilityRequest(BaseModel):
    """
    Schema for creating or replacing an availability window.

    start_time/end_time arrive as "HH:mm" strings. Their ordering is checked
    by the availability service, not here.
    """

    date: date
    start_time: time
    end_time: time
    timezone: str
    slot_duration: int = Field(30, ge=15, le=480)
    break_duration: int = Field(0, ge=0, le=120)
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None
    appointment_type: AppointmentType
    location: LocationRequest
    pricing: Optional[PricingRequest] = None
    special_requirements: Optional[List[str]] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_hh_mm(cls, v, info):
        return parse_time_of_day(v, info.field_name)

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v):
        return validate_timezone(v)

    @model_validator(mode="after")
    def recurrence_is_complete(self):
        if self.is_recurring:
            if self.recurrence_pattern is None:
                raise ValueError("Recurrence pattern is required for recurring availability")
            if self.recurrence_end_date is None:
                raise ValueError("Recurrence end date is required for recurring availability")
        if self.recurrence_end_date and self.recurrence_end_date < self.date:
            raise ValueError("Recurrence end date cannot be before the availability date")
        return self


class LocationResponse(BaseModel):
    type: LocationType
    address: Optional[str] = None
    room_number: Optional[str] = None


class PricingResponse(BaseModel):
    base_fee: Optional[Decimal] = None
    insurance_accepted: Optional[bool] = None
    currency: Optional[str] = None


class AvailabilityResponse(BaseModel):
    id: int
    provider_id: int
    provider_name: Optional[str] = None
    specialization: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    timezone: str
    is_recurring: bool
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None
    slot_duration: int
    break_duration: int
    status: AvailabilityStatus
    max_appointments_per_slot: int
    current_appointments: int
    appointment_type: AppointmentType
    location: LocationResponse
    pricing: Optional[PricingResponse] = None
    notes: Optional[str] = None
    special_requirements: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("start_time", "end_time")
    def hh_mm(self, value: time) -> str:
        return value.strftime("%H:%M")

    @classmethod
    def from_entity(cls, availability, provider=None) -> "AvailabilityResponse":
        pricing = None
        if availability.base_fee is not None or availability.insurance_accepted is not None:
            pricing = PricingResponse(
                base_fee=availability.base_fee,
                insurance_accepted=availability.insurance_accepted,
                currency=availability.currency,
            )
        return cls(
            id=availability.id,
            provider_id=availability.provider_id,
            provider_name=provider.full_name if provider else None,
            specialization=provider.specialization if provider else None,
            date=availability.date,
            start_time=availability.start_time,
            end_time=availability.end_time,
            timezone=availability.timezone,
            is_recurring=availability.is_recurring,
            recurrence_pattern=availability.recurrence_pattern,
            recurrence_end_date=availability.recurrence_end_date,
            slot_duration=availability.slot_duration,
            break_duration=availability.break_duration,
            status=availability.status,
            max_appointments_per_slot=availability.max_appointments_per_slot,
            current_appointments=availability.current_appointments,
            appointment_type=availability.appointment_type,
            location=LocationResponse(
                type=availability.location_type,
                address=availability.location_address,
                room_number=availability.room_number,
            ),
            pricing=pricing,
            notes=availability.notes,
            special_requirements=availability.special_requirements,
            created_at=availability.created_at,
            updated_at=availability.updated_at,
        )


class AvailabilityCreatedResponse(BaseModel):
    availability_id: int
    provider_id: int
    provider_name: Optional[str] = None
    date: date
    start_time: str
    end_time: str
    slots_created: int


class AppointmentSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    availability_id: int
    provider_id: int
    patient_id: Optional[int] = None
    slot_start_time: datetime
    slot_end_time: datetime
    status: SlotStatus
    appointment_type: str
    booking_reference: Optional[str] = None
