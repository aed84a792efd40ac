from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.database import get_db, get_redis
from ..core.security import (
    security, AuthenticationError, AuthorizationError, UserRole, TokenPayload
)
from ..models.provider import Provider
from ..models.patient import Patient
from ..services.auth_service import AuthService

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis)
) -> TokenPayload:
    """Extract and verify the JWT from the Authorization header."""
    return AuthService(db, redis_client).resolve_token(credentials.credentials)

async def get_current_provider(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> Provider:
    """Resolve the authenticated provider from the database."""
    if token_payload.role != UserRole.PROVIDER.value:
        raise AuthorizationError("Provider access required")

    provider = db.query(Provider).filter(Provider.id == int(token_payload.sub)).first()
    if not provider:
        raise AuthenticationError("Provider not found")

    if not provider.is_active:
        raise AuthenticationError("Provider account is deactivated")

    return provider

async def get_current_patient(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> Patient:
    if token_payload.role != UserRole.PATIENT.value:
        raise AuthorizationError("Patient access required")

    patient = db.query(Patient).filter(Patient.id == int(token_payload.sub)).first()
    if not patient or not patient.is_active:
        raise AuthenticationError("Patient not found or inactive")

    return patient
