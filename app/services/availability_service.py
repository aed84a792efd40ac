import logging
from datetime import date, time
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.security import AuthorizationError
from ..models.appointment_slot import AppointmentSlot, SlotStatus
from ..models.availability import ProviderAvailability
from ..repositories.availability_repository import AvailabilityRepository
from ..schemas.availability import AvailabilityRequest
from .overlap_detector import has_overlap
from .recurrence import active_cohort_windows
from .slot_partitioner import partition

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Create, replace and delete availability windows together with their slots.

    Every operation is one transaction: the window write and the slot writes
    commit together or not at all.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def create_availability(self, provider_id: int, request: AvailabilityRequest) -> ProviderAvailability:
        """Validate and store a new window, then generate its slots."""
        try:
            provider = self.repo.lock_provider(self.db, provider_id)
            if not provider:
                raise NotFoundError("Provider not found")

            self._validate_time_range(request.start_time, request.end_time)
            self._ensure_no_overlap(provider_id, request.date, request.start_time, request.end_time)

            availability = ProviderAvailability(
                provider_id=provider_id,
                is_recurring=request.is_recurring,
                recurrence_pattern=request.recurrence_pattern,
                recurrence_end_date=request.recurrence_end_date,
            )
            self._apply_request(availability, request)
            self.repo.save(self.db, availability)

            slots = self._build_slots(availability)
            self.repo.save_slots(self.db, slots)

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Availability already exists for this provider, date and start time") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(availability)
        logger.info(
            f"Created availability {availability.id} for provider {provider_id} on "
            f"{availability.date} with {len(slots)} slots"
        )
        return availability

    def update_availability(
        self,
        availability_id: int,
        request: AvailabilityRequest,
        provider_id: Optional[int] = None,
    ) -> ProviderAvailability:
        """
        Replace a window's schedule and regenerate its slots.

        Existing slots are deleted and recreated, so their ids do not survive
        the update.
        """
        try:
            availability = self._get_owned(availability_id, provider_id)
            self.repo.lock_provider(self.db, availability.provider_id)

            self._validate_time_range(request.start_time, request.end_time)
            self._ensure_no_overlap(
                availability.provider_id,
                request.date,
                request.start_time,
                request.end_time,
                exclude_window_id=availability.id,
            )

            self._apply_request(availability, request)
            self.repo.save(self.db, availability)

            old_slots = self.repo.find_slots_by_window_id(self.db, availability.id)
            self.repo.delete_slots(self.db, old_slots)

            slots = self._build_slots(availability)
            self.repo.save_slots(self.db, slots)

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Availability already exists for this provider, date and start time") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(availability)
        logger.info(
            f"Updated availability {availability.id}: replaced {len(old_slots)} slots with {len(slots)}"
        )
        return availability

    def delete_availability(
        self,
        availability_id: int,
        delete_recurring: bool = False,
        reason: Optional[str] = None,
        provider_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> int:
        """
        Delete a window, or with delete_recurring the provider's whole active
        recurring cohort. Returns the number of windows removed.
        """
        try:
            availability = self._get_owned(availability_id, provider_id)

            if delete_recurring and availability.is_recurring:
                windows = active_cohort_windows(
                    self.db, availability.provider_id, today or date.today()
                )
                if availability not in windows:
                    windows.append(availability)
            else:
                windows = [availability]

            # Slots go first, their parent rows after
            for window in windows:
                self.repo.delete_slots(self.db, self.repo.find_slots_by_window_id(self.db, window.id))
            self.repo.delete_all(self.db, windows)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Deleted {len(windows)} availability window(s) starting from {availability_id}"
            f" (recurring={bool(delete_recurring)}, reason={reason or 'n/a'})"
        )
        return len(windows)

    def get_availability(self, availability_id: int) -> ProviderAvailability:
        availability = self.repo.get_by_id(self.db, availability_id)
        if not availability:
            raise NotFoundError("Availability not found")
        return availability

    def _get_owned(self, availability_id: int, provider_id: Optional[int]) -> ProviderAvailability:
        availability = self.get_availability(availability_id)
        if provider_id is not None and availability.provider_id != provider_id:
            raise AuthorizationError("Availability belongs to another provider")
        return availability

    @staticmethod
    def _validate_time_range(start_time: time, end_time: time) -> None:
        if start_time >= end_time:
            raise ValidationError("End time must be after start time")

    def _ensure_no_overlap(
        self,
        provider_id: int,
        on_date: date,
        start_time: time,
        end_time: time,
        exclude_window_id: Optional[int] = None,
    ) -> None:
        if has_overlap(self.db, provider_id, on_date, start_time, end_time, exclude_window_id):
            raise ValidationError("Time slot overlaps with existing availability")

    @staticmethod
    def _apply_request(availability: ProviderAvailability, request: AvailabilityRequest) -> None:
        """Copy the mutable fields of a request onto a window."""
        availability.date = request.date
        availability.start_time = request.start_time
        availability.end_time = request.end_time
        availability.timezone = request.timezone
        availability.slot_duration = request.slot_duration
        availability.break_duration = request.break_duration
        availability.appointment_type = request.appointment_type

        availability.location_type = request.location.type
        availability.location_address = request.location.address
        availability.room_number = request.location.room_number

        if request.pricing is not None:
            availability.base_fee = request.pricing.base_fee
            availability.insurance_accepted = request.pricing.insurance_accepted
            availability.currency = request.pricing.currency

        availability.special_requirements = request.special_requirements
        availability.notes = request.notes

    @staticmethod
    def _build_slots(availability: ProviderAvailability) -> List[AppointmentSlot]:
        return [
            AppointmentSlot(
                availability_id=availability.id,
                provider_id=availability.provider_id,
                slot_start_time=interval.start,
                slot_end_time=interval.end,
                status=SlotStatus.AVAILABLE,
                appointment_type=availability.appointment_type.value,
            )
            for interval in partition(availability)
        ]
