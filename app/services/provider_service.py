import logging
from typing import Optional

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, NotFoundError
from ..core.pagination import apply_sort, page_bounds, paginate
from ..core.security import get_password_hash
from ..models.provider import Provider, VerificationStatus
from ..schemas.common import Page
from ..schemas.provider import ProviderRegistrationRequest, ProviderResponse, ProviderUpdateRequest

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Provider.created_at,
    "createdAt": Provider.created_at,
    "last_name": Provider.last_name,
    "lastName": Provider.last_name,
    "specialization": Provider.specialization,
    "years_of_experience": Provider.years_of_experience,
}


class ProviderService:
    def __init__(self, db: Session):
        self.db = db

    def register_provider(self, data: ProviderRegistrationRequest) -> Provider:
        """Register a new provider; verification starts as PENDING."""
        self._ensure_unique(data)

        provider = Provider(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            password_hash=get_password_hash(data.password),
            specialization=data.specialization,
            license_number=data.license_number,
            years_of_experience=data.years_of_experience,
            clinic_street=data.clinic_address.street,
            clinic_city=data.clinic_address.city,
            clinic_state=data.clinic_address.state,
            clinic_zip=data.clinic_address.zip,
            verification_status=VerificationStatus.PENDING,
            is_active=True,
        )

        self.db.add(provider)
        self._commit()
        self.db.refresh(provider)

        logger.info(f"Registered provider {provider.id} ({provider.specialization})")
        return provider

    def get_provider(self, provider_id: int) -> Provider:
        provider = self.db.query(Provider).filter(Provider.id == provider_id).first()
        if not provider:
            raise NotFoundError(f"Provider not found with id: {provider_id}")
        return provider

    def update_provider(self, provider_id: int, data: ProviderUpdateRequest) -> Provider:
        provider = self.get_provider(provider_id)
        self._ensure_unique(data, current=provider)

        provider.first_name = data.first_name
        provider.last_name = data.last_name
        provider.email = data.email
        provider.phone_number = data.phone_number
        provider.specialization = data.specialization
        provider.license_number = data.license_number
        provider.years_of_experience = data.years_of_experience
        provider.clinic_street = data.clinic_address.street
        provider.clinic_city = data.clinic_address.city
        provider.clinic_state = data.clinic_address.state
        provider.clinic_zip = data.clinic_address.zip

        if data.password:
            provider.password_hash = get_password_hash(data.password)

        self._commit()
        self.db.refresh(provider)
        return provider

    def deactivate_provider(self, provider_id: int) -> Provider:
        """Soft delete; provider rows are never removed."""
        provider = self.get_provider(provider_id)
        provider.is_active = False
        self._commit()
        logger.info(f"Deactivated provider {provider_id}")
        return provider

    def set_verification_status(self, provider_id: int, status: VerificationStatus) -> Provider:
        provider = self.get_provider(provider_id)
        provider.verification_status = status
        self._commit()
        self.db.refresh(provider)
        logger.info(f"Provider {provider_id} verification status set to {status.value}")
        return provider

    def list_providers(
        self,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
        active_only: bool = False,
    ) -> Page[ProviderResponse]:
        return self.search_providers(
            is_active=True if active_only else None,
            page=page, size=size, sort_by=sort_by, sort_dir=sort_dir,
        )

    def search_providers(
        self,
        search: Optional[str] = None,
        verification_status: Optional[VerificationStatus] = None,
        is_active: Optional[bool] = None,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
    ) -> Page[ProviderResponse]:
        """Case-insensitive substring search over name, email and specialization."""
        page, size = page_bounds(page, size)
        query = self.db.query(Provider)

        if search:
            term = search.lower()
            query = query.filter(or_(
                func.lower(Provider.first_name).contains(term, autoescape=True),
                func.lower(Provider.last_name).contains(term, autoescape=True),
                func.lower(Provider.email).contains(term, autoescape=True),
                func.lower(Provider.specialization).contains(term, autoescape=True),
            ))
        if verification_status is not None:
            query = query.filter(Provider.verification_status == verification_status)
        if is_active is not None:
            query = query.filter(Provider.is_active.is_(is_active))

        query = apply_sort(query, SORTABLE_COLUMNS, sort_by, sort_dir)
        rows, total = paginate(query, page, size)
        content = [ProviderResponse.model_validate(p) for p in rows]
        return Page[ProviderResponse].build(content, page, size, total)

    def _ensure_unique(self, data, current: Optional[Provider] = None) -> None:
        checks = (
            (Provider.email, data.email, "Email already exists"),
            (Provider.phone_number, data.phone_number, "Phone number already exists"),
            (Provider.license_number, data.license_number, "License number already exists"),
        )
        for column, value, message in checks:
            query = self.db.query(Provider.id).filter(column == value)
            if current is not None:
                query = query.filter(Provider.id != current.id)
            if query.first():
                raise ConflictError(message)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Provider with these details already exists") from e
