from sqlalchemy import (
    Column, Integer, String, ForeignKey, Date, Time, DateTime, Boolean, Text,
    Numeric, JSON, CheckConstraint, UniqueConstraint, Index, Enum as SQLEnum
)
from sqlalchemy.sql import func
import enum

from ..core.database import Base

class RecurrencePattern(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"

class AvailabilityStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    BLOCKED = "BLOCKED"
    MAINTENANCE = "MAINTENANCE"

class AppointmentType(str, enum.Enum):
    CONSULTATION = "CONSULTATION"
    FOLLOW_UP = "FOLLOW_UP"
    EMERGENCY = "EMERGENCY"
    TELEMEDICINE = "TELEMEDICINE"

class LocationType(str, enum.Enum):
    CLINIC = "CLINIC"
    HOSPITAL = "HOSPITAL"
    TELEMEDICINE = "TELEMEDICINE"
    HOME_VISIT = "HOME_VISIT"

class ProviderAvailability(Base):
    __tablename__ = "provider_availability"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        CheckConstraint("slot_duration BETWEEN 15 AND 480", name="ck_availability_slot_duration"),
        CheckConstraint("break_duration BETWEEN 0 AND 120", name="ck_availability_break_duration"),
        CheckConstraint("max_appointments_per_slot BETWEEN 1 AND 10", name="ck_availability_max_appointments"),
        CheckConstraint("current_appointments >= 0", name="ck_availability_current_appointments"),
        UniqueConstraint("provider_id", "date", "start_time", name="uq_availability_provider_date_start"),
        Index("ix_availability_provider_date", "provider_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id"), nullable=False)

    # Window
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String(64), nullable=False)
    slot_duration = Column(Integer, nullable=False, default=30)
    break_duration = Column(Integer, nullable=False, default=0)

    # Recurrence
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(SQLEnum(RecurrencePattern), nullable=True)
    recurrence_end_date = Column(Date, nullable=True)

    # Capacity
    status = Column(SQLEnum(AvailabilityStatus), nullable=False, default=AvailabilityStatus.AVAILABLE)
    max_appointments_per_slot = Column(Integer, nullable=False, default=1)
    current_appointments = Column(Integer, nullable=False, default=0)
    appointment_type = Column(SQLEnum(AppointmentType), nullable=False, default=AppointmentType.CONSULTATION)

    # Location
    location_type = Column(SQLEnum(LocationType), nullable=False)
    location_address = Column(String(255), nullable=True)
    room_number = Column(String(50), nullable=True)

    # Pricing
    base_fee = Column(Numeric(10, 2), nullable=True)
    insurance_accepted = Column(Boolean, nullable=True)
    currency = Column(String(3), nullable=True)

    notes = Column(Text, nullable=True)
    special_requirements = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return (
            f"<ProviderAvailability(id={self.id}, provider_id={self.provider_id}, "
            f"date='{self.date}', {self.start_time}-{self.end_time})>"
        )
