"""Recurring cohort lookup used by delete-with-series."""

from datetime import date
from typing import List, Set

from sqlalchemy.orm import Session

from ..models.availability import ProviderAvailability
from ..repositories.availability_repository import AvailabilityRepository


def active_cohort_windows(db: Session, provider_id: int, as_of: date) -> List[ProviderAvailability]:
    """
    Recurring windows of a provider whose series is still running on as_of
    (recurrence_end_date >= as_of). Only rows already persisted are returned;
    nothing is materialized here.
    """
    return AvailabilityRepository.find_active_recurring(db, provider_id, as_of)


def active_cohort(db: Session, provider_id: int, as_of: date) -> Set[int]:
    return {window.id for window in active_cohort_windows(db, provider_id, as_of)}
