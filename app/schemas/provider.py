"""Provider schemas - registration, profile updates and responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..core.validators import (
    validate_license_number,
    validate_password_strength,
    validate_phone_number,
)
from ..models.provider import VerificationStatus


class ClinicAddress(BaseModel):
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=50)
    zip: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")


class ProviderBase(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone_number: str
    specialization: str = Field(..., min_length=3, max_length=100)
    license_number: str
    years_of_experience: Optional[int] = Field(None, ge=0, le=50)
    clinic_address: ClinicAddress

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)

    @field_validator("license_number")
    @classmethod
    def validate_license(cls, v):
        return validate_license_number(v)


class ProviderRegistrationRequest(ProviderBase):
    """Schema for registering a new provider"""

    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Password and confirmation password do not match")
        return self


class ProviderUpdateRequest(ProviderBase):
    """Schema for updating a provider profile; the password is optional"""

    password: Optional[str] = None
    confirm_password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if v:
            return validate_password_strength(v)
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password and self.password != self.confirm_password:
            raise ValueError("Password and confirmation password do not match")
        return self


class ProviderResponse(BaseModel):
    """Schema for provider response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str
    specialization: str
    license_number: str
    years_of_experience: Optional[int] = None
    clinic_address: ClinicAddress
    verification_status: VerificationStatus
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def collect_clinic_address(cls, data):
        # ORM rows keep the address as flat columns
        if hasattr(data, "clinic_street"):
            return {
                "id": data.id,
                "first_name": data.first_name,
                "last_name": data.last_name,
                "email": data.email,
                "phone_number": data.phone_number,
                "specialization": data.specialization,
                "license_number": data.license_number,
                "years_of_experience": data.years_of_experience,
                "clinic_address": {
                    "street": data.clinic_street,
                    "city": data.clinic_city,
                    "state": data.clinic_state,
                    "zip": data.clinic_zip,
                },
                "verification_status": data.verification_status,
                "is_active": data.is_active,
                "created_at": data.created_at,
                "updated_at": data.updated_at,
            }
        return data
