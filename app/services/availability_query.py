"""Read-side queries over availability windows and slots"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundError
from ..core.pagination import apply_sort, page_bounds, paginate
from ..models.appointment_slot import AppointmentSlot
from ..models.availability import AppointmentType, AvailabilityStatus, ProviderAvailability
from ..models.provider import Provider
from ..schemas.availability import AppointmentSlotResponse, AvailabilityResponse
from ..schemas.common import Page

SORTABLE_COLUMNS = {
    "created_at": ProviderAvailability.created_at,
    "createdAt": ProviderAvailability.created_at,
    "updated_at": ProviderAvailability.updated_at,
    "date": ProviderAvailability.date,
    "start_time": ProviderAvailability.start_time,
    "startTime": ProviderAvailability.start_time,
    "base_fee": ProviderAvailability.base_fee,
    "baseFee": ProviderAvailability.base_fee,
}


class AvailabilityQueryService:
    """Filters compose with AND; a filter left as None does not constrain."""

    def __init__(self, db: Session):
        self.db = db

    def _joined(self):
        return self.db.query(ProviderAvailability, Provider).join(
            Provider, Provider.id == ProviderAvailability.provider_id
        )

    @staticmethod
    def _date_range(query, start_date: Optional[date], end_date: Optional[date]):
        if start_date is not None:
            query = query.filter(ProviderAvailability.date >= start_date)
        if end_date is not None:
            query = query.filter(ProviderAvailability.date <= end_date)
        return query

    @staticmethod
    def _to_page(rows, page: int, size: int, total: int) -> Page[AvailabilityResponse]:
        content = [AvailabilityResponse.from_entity(window, provider) for window, provider in rows]
        return Page[AvailabilityResponse].build(content, page, size, total)

    def get_provider_availability(
        self,
        provider_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AvailabilityStatus] = None,
        appointment_type: Optional[AppointmentType] = None,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
    ) -> Page[AvailabilityResponse]:
        """Windows of one provider within an inclusive date range."""
        page, size = page_bounds(page, size)
        if not self.db.query(Provider.id).filter(Provider.id == provider_id).first():
            raise NotFoundError("Provider not found")

        query = self._joined().filter(ProviderAvailability.provider_id == provider_id)
        query = self._date_range(query, start_date, end_date)
        if status is not None:
            query = query.filter(ProviderAvailability.status == status)
        if appointment_type is not None:
            query = query.filter(ProviderAvailability.appointment_type == appointment_type)

        query = apply_sort(query, SORTABLE_COLUMNS, sort_by, sort_dir)
        rows, total = paginate(query, page, size)
        return self._to_page(rows, page, size, total)

    def search_available(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        specialization: Optional[str] = None,
        location: Optional[str] = None,
        appointment_type: Optional[AppointmentType] = None,
        insurance_accepted: Optional[bool] = None,
        max_price: Optional[Decimal] = None,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_dir: str = "desc",
    ) -> Page[AvailabilityResponse]:
        """
        Search AVAILABLE windows across providers.

        specialization and location are case-insensitive substring matches
        against the provider's specialization and the window's address.
        """
        page, size = page_bounds(page, size)
        query = self._joined().filter(ProviderAvailability.status == AvailabilityStatus.AVAILABLE)
        query = self._date_range(query, start_date, end_date)

        if specialization:
            query = query.filter(
                func.lower(Provider.specialization).contains(specialization.lower(), autoescape=True)
            )
        if location:
            query = query.filter(
                func.lower(ProviderAvailability.location_address).contains(location.lower(), autoescape=True)
            )
        if appointment_type is not None:
            query = query.filter(ProviderAvailability.appointment_type == appointment_type)
        if insurance_accepted is not None:
            query = query.filter(ProviderAvailability.insurance_accepted.is_(insurance_accepted))
        if max_price is not None:
            query = query.filter(ProviderAvailability.base_fee <= max_price)

        query = apply_sort(query, SORTABLE_COLUMNS, sort_by, sort_dir)
        rows, total = paginate(query, page, size)
        return self._to_page(rows, page, size, total)

    def available_specializations(self, today: Optional[date] = None) -> List[str]:
        """Distinct specializations with an AVAILABLE window today or later."""
        today = today or date.today()
        rows = (
            self.db.query(Provider.specialization)
            .join(ProviderAvailability, ProviderAvailability.provider_id == Provider.id)
            .filter(
                ProviderAvailability.status == AvailabilityStatus.AVAILABLE,
                ProviderAvailability.date >= today,
            )
            .distinct()
            .order_by(Provider.specialization.asc())
            .all()
        )
        return [row[0] for row in rows]

    def upcoming(self, provider_id: int, today: Optional[date] = None) -> List[AvailabilityResponse]:
        today = today or date.today()
        provider = self.db.query(Provider).filter(Provider.id == provider_id).first()
        if not provider:
            raise NotFoundError("Provider not found")

        windows = (
            self.db.query(ProviderAvailability)
            .filter(
                ProviderAvailability.provider_id == provider_id,
                ProviderAvailability.date >= today,
            )
            .order_by(ProviderAvailability.date.asc(), ProviderAvailability.start_time.asc())
            .all()
        )
        return [AvailabilityResponse.from_entity(window, provider) for window in windows]

    def count_available(self, provider_id: int, start_date: date, end_date: date) -> int:
        return (
            self.db.query(ProviderAvailability)
            .filter(
                ProviderAvailability.provider_id == provider_id,
                ProviderAvailability.date >= start_date,
                ProviderAvailability.date <= end_date,
                ProviderAvailability.status == AvailabilityStatus.AVAILABLE,
            )
            .count()
        )

    def slots_for_window(self, availability_id: int) -> List[AppointmentSlotResponse]:
        if not self.db.query(ProviderAvailability.id).filter(ProviderAvailability.id == availability_id).first():
            raise NotFoundError("Availability not found")
        slots = (
            self.db.query(AppointmentSlot)
            .filter(AppointmentSlot.availability_id == availability_id)
            .order_by(AppointmentSlot.slot_start_time.asc())
            .all()
        )
        return [AppointmentSlotResponse.model_validate(slot) for slot in slots]
