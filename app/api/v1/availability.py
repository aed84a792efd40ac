from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...core.exceptions import ValidationError
from ...api.deps import get_current_provider
from ...models.availability import AppointmentType, AvailabilityStatus
from ...models.provider import Provider
from ...repositories.availability_repository import AvailabilityRepository
from ...schemas.availability import (
    AppointmentSlotResponse, AvailabilityCreatedResponse,
    AvailabilityRequest, AvailabilityResponse
)
from ...schemas.common import Page
from ...services.availability_query import AvailabilityQueryService
from ...services.availability_service import AvailabilityService

router = APIRouter(prefix="/provider", tags=["Provider Availability"])

@router.post(
    "/availability",
    response_model=AvailabilityCreatedResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_availability(
    request: AvailabilityRequest,
    current_provider: Provider = Depends(get_current_provider),
    db: Session = Depends(get_db)
):
    """Create an availability window for the caller and generate its slots."""
    availability = AvailabilityService(db).create_availability(current_provider.id, request)

    return AvailabilityCreatedResponse(
        availability_id=availability.id,
        provider_id=current_provider.id,
        provider_name=current_provider.full_name,
        date=availability.date,
        start_time=availability.start_time.strftime("%H:%M"),
        end_time=availability.end_time.strftime("%H:%M"),
        slots_created=AvailabilityRepository.count_slots(db, availability.id)
    )

@router.get("/availability/search", response_model=Page[AvailabilityResponse])
async def search_availability(
    on_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    specialization: Optional[str] = None,
    location: Optional[str] = None,
    appointment_type: Optional[AppointmentType] = None,
    insurance_accepted: Optional[bool] = None,
    max_price: Optional[Decimal] = Query(None, gt=0),
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    db: Session = Depends(get_db)
):
    """
    Search open windows across providers.

    A single `date` takes precedence over `start_date`/`end_date`.
    """
    if on_date is not None:
        start_date = end_date = on_date
    elif start_date is None or end_date is None:
        raise ValidationError("Either date or start_date and end_date must be provided")
    elif start_date > end_date:
        raise ValidationError("Start date must not be after end date")

    return AvailabilityQueryService(db).search_available(
        start_date=start_date,
        end_date=end_date,
        specialization=specialization,
        location=location,
        appointment_type=appointment_type,
        insurance_accepted=insurance_accepted,
        max_price=max_price,
        page=page,
        size=size,
        sort_by=sort_by,
        sort_dir=sort_dir
    )

@router.get("/availability/specializations", response_model=List[str])
async def list_specializations(db: Session = Depends(get_db)):
    """Specializations with open windows from today on."""
    return AvailabilityQueryService(db).available_specializations()

@router.get("/availability/{availability_id}", response_model=AvailabilityResponse)
async def get_availability(
    availability_id: int,
    db: Session = Depends(get_db)
):
    availability = AvailabilityService(db).get_availability(availability_id)
    provider = db.query(Provider).filter(Provider.id == availability.provider_id).first()
    return AvailabilityResponse.from_entity(availability, provider)

@router.get("/availability/{availability_id}/slots", response_model=List[AppointmentSlotResponse])
async def get_availability_slots(
    availability_id: int,
    db: Session = Depends(get_db)
):
    return AvailabilityQueryService(db).slots_for_window(availability_id)

@router.put("/availability/{availability_id}", response_model=AvailabilityResponse)
async def update_availability(
    availability_id: int,
    request: AvailabilityRequest,
    current_provider: Provider = Depends(get_current_provider),
    db: Session = Depends(get_db)
):
    """Replace one of the caller's windows and regenerate its slots."""
    availability = AvailabilityService(db).update_availability(
        availability_id, request, provider_id=current_provider.id
    )
    return AvailabilityResponse.from_entity(availability, current_provider)

@router.delete("/availability/{availability_id}")
async def delete_availability(
    availability_id: int,
    delete_recurring: bool = False,
    reason: Optional[str] = Query(None, max_length=500),
    current_provider: Provider = Depends(get_current_provider),
    db: Session = Depends(get_db)
):
    """Delete a window, or the caller's active recurring set with delete_recurring."""
    deleted = AvailabilityService(db).delete_availability(
        availability_id,
        delete_recurring=delete_recurring,
        reason=reason,
        provider_id=current_provider.id
    )

    return {
        "message": "Availability deleted successfully",
        "deleted_count": deleted
    }

@router.get("/{provider_id}/availability", response_model=Page[AvailabilityResponse])
async def get_provider_availability(
    provider_id: int,
    start_date: date,
    end_date: date,
    status: Optional[AvailabilityStatus] = None,
    appointment_type: Optional[AppointmentType] = None,
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    db: Session = Depends(get_db)
):
    """Windows of one provider in an inclusive date range."""
    if start_date > end_date:
        raise ValidationError("Start date must not be after end date")

    return AvailabilityQueryService(db).get_provider_availability(
        provider_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
        appointment_type=appointment_type,
        page=page,
        size=size,
        sort_by=sort_by,
        sort_dir=sort_dir
    )

@router.get("/{provider_id}/upcoming-slots", response_model=List[AvailabilityResponse])
async def get_upcoming_availability(
    provider_id: int,
    db: Session = Depends(get_db)
):
    return AvailabilityQueryService(db).upcoming(provider_id)

@router.get("/{provider_id}/available-count")
async def count_available_windows(
    provider_id: int,
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db)
):
    count = AvailabilityQueryService(db).count_available(provider_id, start_date, end_date)
    return {"provider_id": provider_id, "count": count}
