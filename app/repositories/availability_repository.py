"""Availability repository - database operations for windows and their slots"""

from datetime import date, time
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.appointment_slot import AppointmentSlot
from ..models.availability import ProviderAvailability
from ..models.provider import Provider


class AvailabilityRepository:
    """Repository for availability windows and generated appointment slots.

    Methods flush but never commit; the calling service owns the transaction.
    """

    @staticmethod
    def get_by_id(db: Session, availability_id: int) -> Optional[ProviderAvailability]:
        return (
            db.query(ProviderAvailability)
            .filter(ProviderAvailability.id == availability_id)
            .first()
        )

    @staticmethod
    def lock_provider(db: Session, provider_id: int) -> Optional[Provider]:
        """Load the provider row with FOR UPDATE so writers for one provider run one at a time."""
        return (
            db.query(Provider)
            .filter(Provider.id == provider_id)
            .with_for_update()
            .first()
        )

    @staticmethod
    def find_by_provider_and_date(
        db: Session, provider_id: int, on_date: date
    ) -> List[ProviderAvailability]:
        return (
            db.query(ProviderAvailability)
            .filter(
                ProviderAvailability.provider_id == provider_id,
                ProviderAvailability.date == on_date,
            )
            .order_by(ProviderAvailability.start_time.asc())
            .all()
        )

    @staticmethod
    def find_overlapping(
        db: Session,
        provider_id: int,
        on_date: date,
        start_time: time,
        end_time: time,
        exclude_id: Optional[int] = None,
    ) -> List[ProviderAvailability]:
        """Windows on the same provider/date whose [start, end) intersects the candidate."""
        query = db.query(ProviderAvailability).filter(
            ProviderAvailability.provider_id == provider_id,
            ProviderAvailability.date == on_date,
            ProviderAvailability.start_time < end_time,
            ProviderAvailability.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.filter(ProviderAvailability.id != exclude_id)
        return query.all()

    @staticmethod
    def find_active_recurring(
        db: Session, provider_id: int, as_of: date
    ) -> List[ProviderAvailability]:
        return (
            db.query(ProviderAvailability)
            .filter(
                ProviderAvailability.provider_id == provider_id,
                ProviderAvailability.is_recurring.is_(True),
                ProviderAvailability.recurrence_end_date >= as_of,
            )
            .all()
        )

    @staticmethod
    def save(db: Session, availability: ProviderAvailability) -> ProviderAvailability:
        db.add(availability)
        db.flush()
        return availability

    @staticmethod
    def delete_all(db: Session, availabilities: List[ProviderAvailability]) -> None:
        for availability in availabilities:
            db.delete(availability)
        db.flush()

    @staticmethod
    def find_slots_by_window_id(db: Session, availability_id: int) -> List[AppointmentSlot]:
        return (
            db.query(AppointmentSlot)
            .filter(AppointmentSlot.availability_id == availability_id)
            .order_by(AppointmentSlot.slot_start_time.asc())
            .all()
        )

    @staticmethod
    def save_slots(db: Session, slots: List[AppointmentSlot]) -> List[AppointmentSlot]:
        db.add_all(slots)
        db.flush()
        return slots

    @staticmethod
    def delete_slots(db: Session, slots: List[AppointmentSlot]) -> None:
        for slot in slots:
            db.delete(slot)
        db.flush()

    @staticmethod
    def count_slots(db: Session, availability_id: int) -> int:
        return (
            db.query(AppointmentSlot)
            .filter(AppointmentSlot.availability_id == availability_id)
            .count()
        )
