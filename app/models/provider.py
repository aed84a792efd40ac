from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base

class VerificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"

class Provider(Base):
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone_number = Column(String(20), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Professional information
    specialization = Column(String(100), nullable=False, index=True)
    license_number = Column(String(50), unique=True, nullable=False)
    years_of_experience = Column(Integer, nullable=True)

    # Clinic address
    clinic_street = Column(String(200), nullable=False)
    clinic_city = Column(String(100), nullable=False)
    clinic_state = Column(String(50), nullable=False)
    clinic_zip = Column(String(20), nullable=False)

    # Status
    verification_status = Column(
        SQLEnum(VerificationStatus), nullable=False, default=VerificationStatus.PENDING
    )
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Provider(id={self.id}, email='{self.email}', specialization='{self.specialization}')>"
