from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from .patient import PatientResponse
from .provider import ProviderResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    provider: ProviderResponse


class PatientLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    patient: PatientResponse


class TokenValidationResponse(BaseModel):
    valid: bool
    provider_id: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None
    specialization: Optional[str] = None
    expires: Optional[int] = None
