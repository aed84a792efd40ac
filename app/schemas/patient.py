"""Patient schemas"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..core.validators import validate_password_strength, validate_phone_number
from ..models.patient import Gender


class Address(BaseModel):
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=50)
    zip: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")


class EmergencyContact(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None
    relationship: Optional[str] = Field(None, max_length=50)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone_number(v)
        return v


class InsuranceInfo(BaseModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None


class PatientRegistrationRequest(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone_number: str
    password: str
    confirm_password: str
    date_of_birth: date
    gender: Gender
    address: Address
    emergency_contact: Optional[EmergencyContact] = None
    medical_history: Optional[List[str]] = None
    insurance_info: Optional[InsuranceInfo] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return validate_password_strength(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v):
        if v >= date.today():
            raise ValueError("Date of birth must be in the past")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Password and confirmation password do not match")
        return self


class PatientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str
    date_of_birth: date
    gender: Gender
    address: Address
    emergency_contact: Optional[EmergencyContact] = None
    medical_history: Optional[List[str]] = None
    insurance_info: Optional[InsuranceInfo] = None
    email_verified: bool
    phone_verified: bool
    is_active: bool
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def collect_nested(cls, data):
        if not hasattr(data, "street"):
            return data
        emergency_contact = None
        if data.emergency_contact_name or data.emergency_contact_phone:
            emergency_contact = {
                "name": data.emergency_contact_name,
                "phone": data.emergency_contact_phone,
                "relationship": data.emergency_contact_relationship,
            }
        insurance_info = None
        if data.insurance_provider or data.insurance_policy_number:
            insurance_info = {
                "provider": data.insurance_provider,
                "policy_number": data.insurance_policy_number,
            }
        return {
            "id": data.id,
            "first_name": data.first_name,
            "last_name": data.last_name,
            "email": data.email,
            "phone_number": data.phone_number,
            "date_of_birth": data.date_of_birth,
            "gender": data.gender,
            "address": {
                "street": data.street,
                "city": data.city,
                "state": data.state,
                "zip": data.zip_code,
            },
            "emergency_contact": emergency_contact,
            "medical_history": data.medical_history,
            "insurance_info": insurance_info,
            "email_verified": data.email_verified,
            "phone_verified": data.phone_verified,
            "is_active": data.is_active,
            "created_at": data.created_at,
        }
