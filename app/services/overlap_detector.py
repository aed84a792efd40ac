"""
Overlap detection for availability windows.

Two windows overlap when they belong to the same provider, fall on the same
date and their half-open [start, end) ranges intersect. Touching boundaries
(09:00-11:00 and 11:00-13:00) do not overlap.
"""

import logging
from datetime import date, time
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.availability import ProviderAvailability
from ..repositories.availability_repository import AvailabilityRepository

logger = logging.getLogger(__name__)


def intervals_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """
    Reference predicate for half-open [start, end) overlap.

    AvailabilityRepository.find_overlapping expresses the same comparison in
    SQL; the two are kept in agreement by the overlap detector tests.
    """
    return a_start < b_end and a_end > b_start


def find_conflicts(
    db: Session,
    provider_id: int,
    on_date: date,
    start_time: time,
    end_time: time,
    exclude_window_id: Optional[int] = None,
) -> List[ProviderAvailability]:
    """Existing windows the candidate would collide with."""
    return AvailabilityRepository.find_overlapping(
        db, provider_id, on_date, start_time, end_time, exclude_id=exclude_window_id
    )


def has_overlap(
    db: Session,
    provider_id: int,
    on_date: date,
    start_time: time,
    end_time: time,
    exclude_window_id: Optional[int] = None,
) -> bool:
    conflicts = find_conflicts(db, provider_id, on_date, start_time, end_time, exclude_window_id)
    if conflicts:
        logger.warning(
            f"Availability {start_time}-{end_time} on {on_date} for provider {provider_id} "
            f"overlaps window(s) {[w.id for w in conflicts]}"
        )
    return bool(conflicts)
