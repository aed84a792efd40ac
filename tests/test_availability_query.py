from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.availability import AppointmentType, AvailabilityStatus
from app.services.availability_query import AvailabilityQueryService
from app.services.availability_service import AvailabilityService
from tests.conftest import FUTURE_DATE, availability_request


@pytest.fixture
def schedule(db_session, make_provider):
    """Two providers with a mix of prices, insurance and types on FUTURE_DATE."""
    cardiologist = make_provider(1, specialization="Cardiology")
    dermatologist = make_provider(2, specialization="Pediatric Dermatology")
    service = AvailabilityService(db_session)

    service.create_availability(cardiologist.id, availability_request(
        start_time="08:00", end_time="10:00",
        pricing={"base_fee": "80.00", "insurance_accepted": True},
    ))
    service.create_availability(cardiologist.id, availability_request(
        start_time="10:00", end_time="12:00", appointment_type="FOLLOW_UP",
        pricing={"base_fee": "250.00", "insurance_accepted": False},
    ))
    service.create_availability(dermatologist.id, availability_request(
        start_time="09:00", end_time="11:00", appointment_type="TELEMEDICINE",
        location={"type": "TELEMEDICINE", "address": "Online Room 7"},
        pricing={"base_fee": "100.00", "insurance_accepted": True},
    ))
    return cardiologist, dermatologist


def search(db, **filters):
    filters.setdefault("start_date", FUTURE_DATE)
    filters.setdefault("end_date", FUTURE_DATE)
    return AvailabilityQueryService(db).search_available(**filters)


def test_max_price_excludes_more_expensive_windows(db_session, schedule):
    page = search(db_session, max_price=Decimal("100"))

    assert page.total_elements == 2
    assert all(item.pricing.base_fee <= Decimal("100") for item in page.content)


def test_insurance_filter(db_session, schedule):
    page = search(db_session, insurance_accepted=True)

    assert page.total_elements == 2
    assert all(item.pricing.insurance_accepted for item in page.content)


def test_specialization_is_case_insensitive_substring(db_session, schedule):
    _, dermatologist = schedule
    page = search(db_session, specialization="DERMA")

    assert page.total_elements == 1
    assert page.content[0].provider_id == dermatologist.id
    assert page.content[0].specialization == "Pediatric Dermatology"


def test_location_and_type_filters_compose(db_session, schedule):
    assert search(db_session, location="online").total_elements == 1
    assert search(db_session, location="princeton",
                  appointment_type=AppointmentType.FOLLOW_UP).total_elements == 1
    assert search(db_session, location="princeton",
                  appointment_type=AppointmentType.TELEMEDICINE).total_elements == 0


def test_search_outside_date_range_is_empty(db_session, schedule):
    later = FUTURE_DATE + timedelta(days=1)
    assert search(db_session, start_date=later, end_date=later).total_elements == 0


def test_search_only_returns_available_windows(db_session, schedule):
    cardiologist, _ = schedule
    window = AvailabilityQueryService(db_session).upcoming(cardiologist.id)[0]
    row = AvailabilityService(db_session).get_availability(window.id)
    row.status = AvailabilityStatus.BLOCKED
    db_session.commit()

    assert search(db_session).total_elements == 2


def test_pagination_and_sorting(db_session, schedule):
    first = search(db_session, size=2, sort_by="baseFee", sort_dir="asc")
    second = search(db_session, page=1, size=2, sort_by="baseFee", sort_dir="asc")

    assert first.total_elements == 3
    assert first.total_pages == 2
    assert [item.pricing.base_fee for item in first.content] == [Decimal("80.00"), Decimal("100.00")]
    assert [item.pricing.base_fee for item in second.content] == [Decimal("250.00")]


def test_unknown_sort_field_is_rejected(db_session, schedule):
    with pytest.raises(ValidationError):
        search(db_session, sort_by="password_hash")


def test_provider_availability_filters_by_type(db_session, schedule):
    cardiologist, _ = schedule
    service = AvailabilityQueryService(db_session)

    everything = service.get_provider_availability(cardiologist.id, FUTURE_DATE, FUTURE_DATE)
    follow_ups = service.get_provider_availability(
        cardiologist.id, FUTURE_DATE, FUTURE_DATE, appointment_type=AppointmentType.FOLLOW_UP
    )

    assert everything.total_elements == 2
    assert follow_ups.total_elements == 1
    assert follow_ups.content[0].provider_name == cardiologist.full_name


def test_provider_availability_unknown_provider(db_session):
    with pytest.raises(NotFoundError):
        AvailabilityQueryService(db_session).get_provider_availability(77, FUTURE_DATE, FUTURE_DATE)


def test_available_specializations(db_session, schedule):
    service = AvailabilityQueryService(db_session)

    assert service.available_specializations() == ["Cardiology", "Pediatric Dermatology"]
    assert service.available_specializations(today=FUTURE_DATE + timedelta(days=1)) == []


def test_upcoming_is_ordered_by_date_then_start(db_session, provider):
    service = AvailabilityService(db_session)
    later_day = FUTURE_DATE + timedelta(days=2)
    service.create_availability(provider.id, availability_request(date=later_day.isoformat(),
                                                                  start_time="08:00", end_time="09:00"))
    service.create_availability(provider.id, availability_request(start_time="14:00", end_time="15:00"))
    service.create_availability(provider.id, availability_request(start_time="08:00", end_time="09:00"))

    upcoming = AvailabilityQueryService(db_session).upcoming(provider.id)

    assert [(w.date, w.start_time.hour) for w in upcoming] == [
        (FUTURE_DATE, 8), (FUTURE_DATE, 14), (later_day, 8)
    ]
    assert AvailabilityQueryService(db_session).upcoming(provider.id, today=later_day + timedelta(days=1)) == []


def test_count_available(db_session, schedule):
    cardiologist, _ = schedule

    assert AvailabilityQueryService(db_session).count_available(
        cardiologist.id, FUTURE_DATE, FUTURE_DATE
    ) == 2
    assert AvailabilityQueryService(db_session).count_available(
        cardiologist.id, date(2000, 1, 1), date(2000, 1, 2)
    ) == 0


def test_slots_for_window_are_ordered(db_session, provider):
    window = AvailabilityService(db_session).create_availability(
        provider.id, availability_request(start_time="09:00", end_time="10:00", break_duration=0)
    )

    slots = AvailabilityQueryService(db_session).slots_for_window(window.id)

    assert len(slots) == 2
    assert slots[0].slot_start_time < slots[1].slot_start_time
    assert all(slot.availability_id == window.id for slot in slots)


def test_service_page_size_defaults_to_setting(db_session, schedule):
    assert search(db_session).size == settings.DEFAULT_PAGE_SIZE
