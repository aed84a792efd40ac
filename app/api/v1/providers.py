from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...core.security import AuthorizationError
from ...api.deps import get_current_provider
from ...models.provider import Provider, VerificationStatus
from ...schemas.common import MessageResponse, Page
from ...schemas.provider import (
    ProviderRegistrationRequest, ProviderResponse, ProviderUpdateRequest
)
from ...services.provider_service import ProviderService

router = APIRouter(prefix="/provider", tags=["Providers"])

def get_provider_service(db: Session = Depends(get_db)) -> ProviderService:
    return ProviderService(db)

@router.post("/register", response_model=ProviderResponse, status_code=status.HTTP_201_CREATED)
async def register_provider(
    data: ProviderRegistrationRequest,
    service: ProviderService = Depends(get_provider_service)
):
    """Register a new provider (verification pending)."""
    return ProviderResponse.model_validate(service.register_provider(data))

@router.get("/all", response_model=Page[ProviderResponse])
async def list_providers(
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    service: ProviderService = Depends(get_provider_service)
):
    return service.list_providers(page, size, sort_by, sort_dir)

@router.get("/active", response_model=Page[ProviderResponse])
async def list_active_providers(
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    service: ProviderService = Depends(get_provider_service)
):
    return service.list_providers(page, size, sort_by, sort_dir, active_only=True)

@router.get("/search", response_model=Page[ProviderResponse])
async def search_providers(
    search: Optional[str] = None,
    verification_status: Optional[VerificationStatus] = None,
    is_active: Optional[bool] = None,
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    service: ProviderService = Depends(get_provider_service)
):
    """Search providers by name, email or specialization."""
    return service.search_providers(
        search, verification_status, is_active, page, size, sort_by, sort_dir
    )

@router.get("/{provider_id}", response_model=ProviderResponse)
async def get_provider(
    provider_id: int,
    service: ProviderService = Depends(get_provider_service)
):
    return ProviderResponse.model_validate(service.get_provider(provider_id))

@router.put("/{provider_id}", response_model=ProviderResponse)
async def update_provider(
    provider_id: int,
    data: ProviderUpdateRequest,
    current_provider: Provider = Depends(get_current_provider),
    service: ProviderService = Depends(get_provider_service)
):
    """Update the caller's own profile."""
    if current_provider.id != provider_id:
        raise AuthorizationError("Providers can only update their own profile")
    return ProviderResponse.model_validate(service.update_provider(provider_id, data))

@router.delete("/{provider_id}", response_model=MessageResponse)
async def delete_provider(
    provider_id: int,
    current_provider: Provider = Depends(get_current_provider),
    service: ProviderService = Depends(get_provider_service)
):
    """Soft-delete the caller's own account."""
    if current_provider.id != provider_id:
        raise AuthorizationError("Providers can only deactivate their own account")
    service.deactivate_provider(provider_id)
    return {"message": "Provider deactivated successfully"}

