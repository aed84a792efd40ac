from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base

class SlotStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    BLOCKED = "BLOCKED"

class AppointmentSlot(Base):
    __tablename__ = "appointment_slots"

    id = Column(Integer, primary_key=True, index=True)
    availability_id = Column(
        Integer, ForeignKey("provider_availability.id", ondelete="CASCADE"),
        nullable=False, index=True
    )
    provider_id = Column(Integer, ForeignKey("providers.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=True)

    # Absolute instants, stored in UTC
    slot_start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    slot_end_time = Column(DateTime(timezone=True), nullable=False)

    status = Column(SQLEnum(SlotStatus), nullable=False, default=SlotStatus.AVAILABLE)
    appointment_type = Column(String(50), nullable=False)
    booking_reference = Column(String(100), unique=True, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return (
            f"<AppointmentSlot(id={self.id}, availability_id={self.availability_id}, "
            f"start='{self.slot_start_time}', status='{self.status}')>"
        )
