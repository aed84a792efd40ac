from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ...core.database import get_db, get_redis
from ...core.security import security
from ...api.deps import get_current_provider
from ...services.auth_service import AuthService
from ...schemas.auth import LoginRequest, LoginResponse, TokenValidationResponse
from ...schemas.common import MessageResponse
from ...schemas.provider import ProviderResponse
from ...models.provider import Provider

router = APIRouter(prefix="/provider", tags=["Provider Authentication"])

@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Authenticate a provider and return an access token."""
    auth_service = AuthService(db)
    return auth_service.authenticate_provider(login_data)

@router.post("/logout", response_model=MessageResponse)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis)
):
    """Invalidate the caller's access token."""
    auth_service = AuthService(db, redis_client)
    auth_service.logout(credentials.credentials)

    return {"message": "Successfully logged out"}

@router.get("/me", response_model=ProviderResponse)
async def get_current_provider_info(
    current_provider: Provider = Depends(get_current_provider)
):
    """Get the authenticated provider."""
    return ProviderResponse.model_validate(current_provider)

@router.post("/validate-token", response_model=TokenValidationResponse)
async def validate_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    redis_client = Depends(get_redis)
):
    """Report whether a token is still usable."""
    auth_service = AuthService(db, redis_client)
    return auth_service.validate_token(credentials.credentials)
