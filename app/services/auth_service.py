from sqlalchemy.orm import Session
from fastapi import HTTPException, status
import logging

from ..models.provider import Provider, VerificationStatus
from ..models.patient import Patient
from ..core.security import (
    verify_password, create_token, verify_token, revoke_token,
    is_token_revoked, TokenPayload, UserRole, AuthenticationError
)
from ..schemas.auth import LoginRequest, LoginResponse, PatientLoginResponse, TokenValidationResponse
from ..schemas.provider import ProviderResponse
from ..schemas.patient import PatientResponse

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session, redis_client=None):
        self.db = db
        self.redis = redis_client

    def authenticate_provider(self, login_data: LoginRequest) -> LoginResponse:
        """Authenticate a provider and return an access token."""
        provider = self.db.query(Provider).filter(
            Provider.email == login_data.email
        ).first()

        if not provider or not verify_password(login_data.password, provider.password_hash):
            logger.warning(f"Failed provider login for {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        if not provider.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        if provider.verification_status != VerificationStatus.VERIFIED:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is not verified. Please wait for verification."
            )

        token = create_token(
            provider.id, provider.email, UserRole.PROVIDER,
            specialization=provider.specialization
        )

        return LoginResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            provider=ProviderResponse.model_validate(provider)
        )

    def authenticate_patient(self, login_data: LoginRequest) -> PatientLoginResponse:
        """Authenticate a patient and return an access token."""
        patient = self.db.query(Patient).filter(
            Patient.email == login_data.email
        ).first()

        if not patient or not verify_password(login_data.password, patient.password_hash):
            logger.warning(f"Failed patient login for {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not patient.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated. Please contact support."
            )

        token = create_token(patient.id, patient.email, UserRole.PATIENT)

        return PatientLoginResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            patient=PatientResponse.model_validate(patient)
        )

    def resolve_token(self, token: str) -> TokenPayload:
        """Decode a bearer token, rejecting revoked, expired and non-access tokens."""
        if not token:
            raise AuthenticationError("Token is required")

        if is_token_revoked(self.redis, token):
            raise AuthenticationError("Token has been invalidated")

        token_payload = verify_token(token)
        if not token_payload or not token_payload.sub:
            raise AuthenticationError("Invalid or expired token")

        if token_payload.token_type != "access":
            raise AuthenticationError("Invalid token type")

        return token_payload

    def logout(self, token: str) -> None:
        """Revoke the token for the rest of its lifetime."""
        token_payload = verify_token(token)
        if token_payload:
            revoke_token(self.redis, token, token_payload)
            logger.info(f"Token revoked for {token_payload.role} {token_payload.sub}")

    def validate_token(self, token: str) -> TokenValidationResponse:
        try:
            token_payload = self.resolve_token(token)
        except AuthenticationError:
            return TokenValidationResponse(valid=False)

        return TokenValidationResponse(
            valid=True,
            provider_id=int(token_payload.sub),
            email=token_payload.email,
            role=token_payload.role,
            specialization=token_payload.specialization,
            expires=token_payload.exp
        )
